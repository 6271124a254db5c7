"""
用戶路由
需要有效 token 且具備 USER 角色 (由 AuthMiddleware 與 require_roles 雙重校驗)
"""
from fastapi import APIRouter, Depends

from auth.permissions import require_roles
from auth.store import Identity
from routers.schemas import ApiResponse, UserInfo

router = APIRouter(prefix="/api/user", tags=["用戶"])

# 每個接口所需的角色
PROFILE_ROLES = ("USER",)
INFO_ROLES = ("USER",)


@router.get("/profile", response_model=ApiResponse)
async def get_user_profile(identity: Identity = Depends(require_roles(PROFILE_ROLES))):
    return ApiResponse(success=True, message="User profile retrieved", data=identity.username)


@router.get("/info", response_model=ApiResponse)
async def get_user_info(identity: Identity = Depends(require_roles(INFO_ROLES))):
    info = UserInfo(username=identity.username, authorities=sorted(f"ROLE_{r}" for r in identity.roles))
    return ApiResponse(success=True, message="User info retrieved", data=info.model_dump(by_alias=True))
