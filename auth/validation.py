"""
註冊輸入校驗，返回字段級別的錯誤信息。
"""

import re
from typing import Dict, Optional

from auth.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+$")
STRONG_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")

USERNAME_MIN, USERNAME_MAX = 3, 50
PASSWORD_MIN, PASSWORD_MAX = 6, 100
FULL_NAME_MAX = 100


def is_valid_email(email: Optional[str]) -> bool:
    return email is not None and EMAIL_PATTERN.match(email) is not None


def is_valid_username(username: Optional[str]) -> bool:
    return (
        username is not None
        and USERNAME_MIN <= len(username) <= USERNAME_MAX
        and USERNAME_PATTERN.match(username) is not None
    )


def is_valid_password(password: Optional[str]) -> bool:
    return password is not None and PASSWORD_MIN <= len(password) <= PASSWORD_MAX


def is_strong_password(password: Optional[str]) -> bool:
    """至少一個大寫、一個小寫、一個數字和一個特殊字符。註冊時不強制要求。"""
    return password is not None and STRONG_PASSWORD_PATTERN.match(password) is not None


def signup_errors(username: Optional[str], email: Optional[str], full_name: Optional[str], password: Optional[str]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not is_valid_username(username):
        errors["username"] = (
            f"Username must be {USERNAME_MIN}-{USERNAME_MAX} characters "
            "and contain only letters, digits, '.', '_' or '-'"
        )
    if not is_valid_email(email):
        errors["email"] = "Email should be valid"
    if not full_name or not full_name.strip():
        errors["fullName"] = "Full name is required"
    elif len(full_name) > FULL_NAME_MAX:
        errors["fullName"] = f"Full name must be at most {FULL_NAME_MAX} characters"
    if not is_valid_password(password):
        errors["password"] = f"Password must be {PASSWORD_MIN}-{PASSWORD_MAX} characters"
    return errors


def validate_signup(username: Optional[str], email: Optional[str], full_name: Optional[str], password: Optional[str]) -> None:
    errors = signup_errors(username, email, full_name, password)
    if errors:
        raise ValidationError(errors)
