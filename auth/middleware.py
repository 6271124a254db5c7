"""
權限驗證中間件
提供基於路由的身份與角色檢查
- 受保護路由在處理函數運行前完成校驗，身份存放在 request.state.identity
- 未在映射表中的路由視為公開路由
"""
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Pattern

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from auth.flow import AuthenticationFlow
from routers.schemas import failure_response

logger = logging.getLogger(__name__)

# 路由 -> {方法: 所需角色}；空列表表示只需要登錄
ROUTE_ROLES: Dict[Pattern[str], Dict[str, List[str]]] = {
    re.compile(r"^/api/user/profile/?$"): {"GET": ["USER"]},
    re.compile(r"^/api/user/info/?$"): {"GET": ["USER"]},
}


class AuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, route_roles: Optional[Dict[Pattern[str], Dict[str, List[str]]]] = None):
        super().__init__(app)
        self.route_roles = ROUTE_ROLES if route_roles is None else route_roles

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Any]]):
        path = request.url.path
        method = request.method

        required_roles = self._get_required_roles_for_route(path, method)
        if required_roles is None:
            logger.debug(f"AuthMiddleware: 路由 {method} {path} 為公開路由，跳過身份檢查")
            return await call_next(request)

        flow: AuthenticationFlow = request.app.state.auth_flow
        result = flow.authorize(request.headers.get("Authorization"), required_roles)
        if not result.ok:
            logger.warning(f"AuthMiddleware: 拒絕 {method} {path}: {result.reason}")
            return failure_response(result)

        request.state.identity = result.value
        logger.debug(f"AuthMiddleware: 用戶 {result.value.username} 通過檢查以訪問 {method} {path}")
        return await call_next(request)

    def _get_required_roles_for_route(self, path: str, method: str) -> Optional[List[str]]:
        """
        返回 None 表示路由 (或該方法) 未在映射表中定義。
        """
        for pattern, method_roles in self.route_roles.items():
            if pattern.fullmatch(path):
                return method_roles.get(method)
        return None
