"""
認證錯誤類型
- Token 類錯誤只在內部區分 (日誌用)，對外一律收斂為通用的失敗信息
- 只有缺少簽名密鑰是致命錯誤，其他錯誤都在流程邊界被處理
"""

from __future__ import annotations

from typing import Dict, Optional


class AuthError(Exception):
    """所有認證相關錯誤的基類"""


class MissingSigningKeyError(AuthError):
    """啟動時未配置 JWT 簽名密鑰"""


class TokenError(AuthError):
    """Token 無法被信任"""


class MalformedTokenError(TokenError):
    """Token 結構無法解析"""


class SignatureMismatchError(TokenError):
    """可以解析，但簽名不匹配"""


class TokenExpiredError(TokenError):
    """簽名正確，但已過期"""


class UserNotFoundError(AuthError):
    def __init__(self, username: str):
        super().__init__(f"User not found: {username}")
        self.username = username


class BadCredentialsError(AuthError):
    def __init__(self, username: str):
        super().__init__(f"Bad credentials for user: {username}")
        self.username = username


class ValidationError(AuthError):
    """
    輸入格式錯誤，攜帶字段級別的錯誤信息。
    這類錯誤不包含帳號是否存在的信息，因此可以原樣返回給客戶端。
    """

    def __init__(self, errors: Optional[Dict[str, str]] = None, message: str = "Validation failed"):
        super().__init__(message)
        self.errors: Dict[str, str] = dict(errors or {})
        self.message = message


class DuplicateUserError(AuthError):
    def __init__(self, field: str, value: str):
        super().__init__(f"{field} is already taken: {value}")
        self.field = field
        self.value = value
