"""
全局路徑與應用配置
"""

import os
import pathlib

# 注册路径
DATA_BASE_PATH = pathlib.Path(os.environ.get("DATA_BASE_PATH", "./data"))

# 用戶文件路徑 (JsonUserStore 使用)
USERS_FILE_PATH = os.environ.get("USERS_FILE_PATH")
USERS_FILE = pathlib.Path(USERS_FILE_PATH) if USERS_FILE_PATH and str(USERS_FILE_PATH).strip() else DATA_BASE_PATH / "users.json"

APP_NAME = "JWT Authentication Example"
APP_VERSION = "1.0.0"


def get_cors_origins():
    """CORS 允許的來源，逗號分隔，默認 *"""
    raw = os.environ.get("CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]
