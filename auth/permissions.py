"""
權限檢查工具
提供基於角色的 FastAPI 依賴
"""

from typing import Iterable, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from auth.flow import AuthenticationFlow, FailureKind, FlowFailure, has_roles
from auth.store import Identity
import logging

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def to_http_exception(failure: FlowFailure) -> HTTPException:
    if failure.kind == FailureKind.FORBIDDEN:
        return _forbidden(failure.message)
    return _unauthorized(failure.message)


def get_auth_flow(request: Request) -> AuthenticationFlow:
    return request.app.state.auth_flow


def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    flow: AuthenticationFlow = Depends(get_auth_flow),
) -> Identity:
    """
    返回當前請求的身份。
    AuthMiddleware 已經解析過的直接使用，否則從 Authorization: Bearer <token> 解析。
    校驗失敗一律 401。
    """
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, Identity):
        return identity

    result = flow.authorize(authorization)
    if not result.ok:
        logger.debug(f"get_current_identity: 認證失敗, 原因: {result.reason}")
        raise to_http_exception(result)
    request.state.identity = result.value
    return result.value


def require_roles(required: Iterable[str]):
    """
    依賴：校驗身份是否具備全部所需角色。
    校驗失敗返回 403。
    """
    required_roles = frozenset(required)

    def _dep(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_roles(identity, required_roles):
            logger.warning(f"用戶 {identity.username} 權限不足，需要角色 {sorted(required_roles)}")
            raise _forbidden("Access denied")
        return identity

    return _dep
