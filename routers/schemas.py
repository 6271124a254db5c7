"""
接口的請求/響應模型
- 所有響應使用 ApiResponse 信封: {success, message, data}
- 對外字段使用駝峰命名 (fullName, expiresIn, createdAt ...)
- FlowFailure 在這裡統一映射為 HTTP 狀態碼
"""

from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from auth.flow import FailureKind, FlowFailure, LoginResult
from auth.store import Identity


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ApiResponse(BaseModel):
    success: bool
    message: str
    data: Any = None


class SignUpRequest(CamelModel):
    username: str
    email: str
    full_name: str = Field(alias="fullName")
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class UserProfile(CamelModel):
    id: str
    username: str
    email: str
    full_name: str = Field(alias="fullName")
    roles: List[str]
    enabled: bool
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserProfile":
        # 不包含密碼哈希
        return cls(
            id=identity.id,
            username=identity.username,
            email=identity.email,
            full_name=identity.full_name,
            roles=sorted(identity.roles),
            enabled=identity.enabled,
            created_at=identity.created_at,
            updated_at=identity.updated_at,
        )


class JwtResponse(CamelModel):
    token: str
    type: str
    username: str
    email: str
    expires_in: int = Field(alias="expiresIn")

    @classmethod
    def from_login(cls, result: LoginResult) -> "JwtResponse":
        return cls(
            token=result.token,
            type=result.type,
            username=result.username,
            email=result.email,
            expires_in=result.expires_in,
        )


class UserInfo(BaseModel):
    username: str
    authorities: List[str]


FAILURE_STATUS: Dict[FailureKind, int] = {
    FailureKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureKind.DUPLICATE: status.HTTP_400_BAD_REQUEST,
    FailureKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    FailureKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
}


def api_response(
    status_code: int,
    success: bool,
    message: str,
    data: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    body = ApiResponse(success=success, message=message, data=data).model_dump()
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def failure_response(failure: FlowFailure) -> JSONResponse:
    status_code = FAILURE_STATUS[failure.kind]
    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return api_response(status_code, False, failure.message, failure.errors or None, headers=headers)
