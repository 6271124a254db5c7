"""
公開路由，不需要身份驗證
"""
from fastapi import APIRouter

import global_data
from routers.schemas import ApiResponse

router = APIRouter(prefix="/api/public", tags=["公開"])


@router.get("/health", response_model=ApiResponse)
async def health():
    """存活檢查"""
    return ApiResponse(success=True, message="Application is running")


@router.get("/info", response_model=ApiResponse)
async def info():
    return ApiResponse(success=True, message=global_data.APP_NAME, data=f"Version: {global_data.APP_VERSION}")
