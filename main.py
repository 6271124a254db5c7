from contextlib import asynccontextmanager
from typing import Optional
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

import global_data
from auth.config import create_auth_flow, get_effective_config_snapshot
from auth.flow import AuthenticationFlow
from auth.middleware import AuthMiddleware
from logging_config import get_colorful_logger
from routers import include_routers
from routers.schemas import api_response

# 配置彩色日志
logger = get_colorful_logger(__name__)
for _name in ("auth", "routers"):
    get_colorful_logger(_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理器"""
    if getattr(app.state, "auth_flow", None) is None:
        logger.info("正在初始化认证系统...")
        # 缺少 JWT_SECRET 时直接抛出 MissingSigningKeyError，服务不会启动
        app.state.auth_flow = create_auth_flow()
        logger.info(f"认证系统初始化完成: {get_effective_config_snapshot()}")
    yield
    logger.info("服务关闭")


# 中间件：记录请求和响应信息
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"Response: {response.status_code} (处理时间: {process_time:.2f}s)")
    return response


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return api_response(exc.status_code, False, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors[".".join(loc) or "body"] = err.get("msg", "invalid")
    return api_response(400, False, "Validation failed", errors)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"未处理的异常: {request.method} {request.url.path}")
    return api_response(500, False, "An unexpected error occurred")


def create_app(auth_flow: Optional[AuthenticationFlow] = None) -> FastAPI:
    """
    创建 FastAPI 应用。
    auth_flow 为空时在启动阶段按环境变量组装 (测试中可以直接注入)。
    """
    app = include_routers(FastAPI(title=global_data.APP_NAME, version=global_data.APP_VERSION, lifespan=lifespan))
    app.state.auth_flow = auth_flow

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # 注册權限驗證中間件
    app.add_middleware(AuthMiddleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=log_requests)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=global_data.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8080, workers=1)
