"""
認證流程
- signup:    校驗輸入 -> 檢查唯一性 -> 創建用戶 (不簽發 token)
- login:     校驗憑據 -> 簽發 token
- authorize: 解析 Authorization 頭 -> 校驗 token -> 加載身份 -> 檢查角色

所有失敗都以 FlowFailure 返回，由路由層統一映射為 HTTP 狀態碼。
登錄失敗對外不區分「用戶不存在」與「密碼錯誤」，只在日誌中區分。
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterable, Optional, TypeVar, Union

from auth.credentials import BadCredentials, CredentialVerifier, UserNotFound
from auth.errors import DuplicateUserError, TokenError, ValidationError
from auth.provider import TokenProvider
from auth.store import Identity, UserStore
from auth.validation import is_strong_password, validate_signup

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
TOKEN_TYPE = "Bearer"

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"
INVALID_TOKEN_MESSAGE = "Invalid token"
FORBIDDEN_MESSAGE = "Access denied"

T = TypeVar("T")


class FailureKind(str, enum.Enum):
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class FlowSuccess(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class FlowFailure:
    kind: FailureKind
    message: str
    errors: Dict[str, str] = field(default_factory=dict)
    # 內部原因，只用於日誌，不返回給客戶端
    reason: str = ""
    ok: bool = False


FlowResult = Union[FlowSuccess[T], FlowFailure]


@dataclass(frozen=True)
class LoginResult:
    token: str
    username: str
    email: str
    expires_in: int
    type: str = TOKEN_TYPE


def has_roles(identity: Identity, required: Iterable[str]) -> bool:
    """身份是否具備全部所需角色；required 為空時只要求已登錄。"""
    return set(required).issubset(identity.roles)


class AuthenticationFlow:
    def __init__(self, store: UserStore, provider: TokenProvider, verifier: Optional[CredentialVerifier] = None):
        self.store = store
        self.provider = provider
        self.verifier = verifier or CredentialVerifier(store)

    def signup(self, username: str, email: str, full_name: str, password: str) -> FlowResult[Identity]:
        try:
            validate_signup(username, email, full_name, password)
        except ValidationError as e:
            logger.info(f"註冊輸入校驗失敗: {sorted(e.errors)}")
            return FlowFailure(FailureKind.VALIDATION, e.message, errors=e.errors, reason="ValidationError")
        if not is_strong_password(password):
            logger.info(f"用戶 {username} 使用的密碼強度較弱 (不阻止註冊)")

        if self.store.exists_by_username(username):
            logger.info(f"註冊失敗，用戶名已存在: {username}")
            return FlowFailure(FailureKind.DUPLICATE, "Username is already taken", reason="DuplicateUserError")
        if self.store.exists_by_email(email):
            logger.info(f"註冊失敗，郵箱已被使用: {username}")
            return FlowFailure(FailureKind.DUPLICATE, "Email is already in use", reason="DuplicateUserError")

        try:
            identity = self.store.create(username, email, full_name, password)
        except DuplicateUserError as e:
            # 兩個併發註冊同時通過了唯一性檢查
            logger.info(f"註冊失敗，{e}")
            message = "Username is already taken" if e.field == "username" else "Email is already in use"
            return FlowFailure(FailureKind.DUPLICATE, message, reason="DuplicateUserError")

        logger.info(f"用戶 {username} 註冊成功")
        return FlowSuccess(identity)

    def login(self, username: str, password: str) -> FlowResult[LoginResult]:
        logger.info(f"用戶 {username} 嘗試登錄")
        result = self.verifier.verify(username, password)

        if isinstance(result, UserNotFound):
            logger.warning(f"用戶 {username} 不存在")
            return FlowFailure(FailureKind.AUTHENTICATION, INVALID_CREDENTIALS_MESSAGE, reason="UserNotFoundError")
        if isinstance(result, BadCredentials):
            logger.warning(f"用戶 {username} 密碼驗證失敗")
            return FlowFailure(FailureKind.AUTHENTICATION, INVALID_CREDENTIALS_MESSAGE, reason="BadCredentialsError")

        identity = result.identity
        token = self.provider.issue(identity.username)
        logger.info(f"用戶 {username} 登錄成功")
        return FlowSuccess(
            LoginResult(
                token=token,
                username=identity.username,
                email=identity.email,
                expires_in=self.provider.validity_millis,
            )
        )

    def validate(self, authorization: Optional[str]) -> FlowResult[str]:
        """只校驗 token，返回 subject，不查詢用戶存儲。"""
        token = self._strip_bearer(authorization)
        if token is None or not self.provider.validate(token):
            return FlowFailure(FailureKind.AUTHENTICATION, INVALID_TOKEN_MESSAGE, reason="TokenError")
        try:
            return FlowSuccess(self.provider.extract_subject(token))
        except TokenError as e:
            return FlowFailure(FailureKind.AUTHENTICATION, INVALID_TOKEN_MESSAGE, reason=type(e).__name__)

    def authorize(self, authorization: Optional[str], required_roles: Iterable[str] = ()) -> FlowResult[Identity]:
        subject = self.validate(authorization)
        if not subject.ok:
            return subject

        user = self.store.find_by_username(subject.value)
        if user is None or not user.enabled:
            logger.warning(f"Token 中的用戶 {subject.value} 不存在或已停用")
            return FlowFailure(FailureKind.AUTHENTICATION, INVALID_TOKEN_MESSAGE, reason="UserNotFoundError")

        identity = user.identity()
        required = frozenset(required_roles)
        if not has_roles(identity, required):
            logger.warning(f"用戶 {identity.username} 缺少角色 {sorted(required - identity.roles)}")
            return FlowFailure(FailureKind.FORBIDDEN, FORBIDDEN_MESSAGE, reason="MissingRole")
        return FlowSuccess(identity)

    @staticmethod
    def _strip_bearer(authorization: Optional[str]) -> Optional[str]:
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None
        return authorization[len(BEARER_PREFIX):]

