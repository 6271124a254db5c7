"""
憑據校驗
- 密碼使用 argon2id 哈希 (慢速、加鹽、單向)
- CredentialVerifier 每次調用都重新比對哈希，不做任何緩存
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

if TYPE_CHECKING:
    from auth.store import Identity, UserStore

logger = logging.getLogger(__name__)

_pwd_hasher = PasswordHasher(type=Type.ID)


def hash_password(password: str) -> str:
    """使用 argon2id 哈希密碼，返回包含參數與鹽值的編碼字符串。"""
    return _pwd_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """
    驗證密碼是否與給定的哈希值匹配。
    哈希格式錯誤也視為不匹配。
    """
    if not password or not hashed_password:
        return False
    try:
        return _pwd_hasher.verify(hashed_password, password)
    except (InvalidHash, VerifyMismatchError, VerificationError):
        return False


# 用戶不存在時仍比對一次哈希，耗時與密碼錯誤一致
_DUMMY_HASH = hash_password("dummy-password-for-unknown-users")


@dataclass(frozen=True)
class Authenticated:
    identity: "Identity"


@dataclass(frozen=True)
class UserNotFound:
    username: str


@dataclass(frozen=True)
class BadCredentials:
    username: str


AuthResult = Union[Authenticated, UserNotFound, BadCredentials]


class CredentialVerifier:
    def __init__(self, store: "UserStore"):
        self._store = store

    def verify(self, username: str, password: str) -> AuthResult:
        user = self._store.find_by_username(username)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            return UserNotFound(username)

        if not verify_password(password, user.password_hash):
            return BadCredentials(username)

        if not user.enabled:
            logger.warning(f"用戶 {username} 已被停用，拒絕登錄")
            return BadCredentials(username)

        return Authenticated(user.identity())
