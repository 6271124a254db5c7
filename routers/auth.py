"""
鉴权路由
- 注册: 用户名 + 邮箱 + 姓名 + 密码，不签发 token
- 登录: 用户名 + 密码，返回 24 小时有效的 JWT Bearer Token
- 校验: 检查 Authorization: Bearer <token> 是否有效

登录与注册是同步函数，FastAPI 会放到线程池执行，慢速的密码哈希不会阻塞事件循环。
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, status

from auth.flow import AuthenticationFlow
from auth.permissions import get_auth_flow
from routers.schemas import (
    ApiResponse,
    JwtResponse,
    LoginRequest,
    SignUpRequest,
    UserProfile,
    api_response,
    failure_response,
)

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/auth", tags=["鉴权"])


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
def register_user(body: SignUpRequest, flow: AuthenticationFlow = Depends(get_auth_flow)):
    result = flow.signup(body.username, body.email, body.full_name, body.password)
    if not result.ok:
        return failure_response(result)
    return api_response(
        status.HTTP_201_CREATED,
        True,
        "User registered successfully",
        UserProfile.from_identity(result.value),
    )


@router.post("/login", response_model=ApiResponse)
def authenticate_user(body: LoginRequest, flow: AuthenticationFlow = Depends(get_auth_flow)):
    result = flow.login(body.username, body.password)
    if not result.ok:
        # 不区分用户不存在与密码错误
        logger.debug(f"登录失败原因: {result.reason}")
        return failure_response(result)
    return api_response(status.HTTP_200_OK, True, "Login successful", JwtResponse.from_login(result.value))


@router.get("/validate", response_model=ApiResponse)
def validate_token(
    authorization: Optional[str] = Header(None),
    flow: AuthenticationFlow = Depends(get_auth_flow),
):
    result = flow.validate(authorization)
    if not result.ok:
        return failure_response(result)
    return api_response(status.HTTP_200_OK, True, "Token is valid", result.value)
