"""
Auth configuration loader and helpers.

- JWT secret comes from ENV JWT_SECRET only. There is no default: a missing
  secret is a fatal startup error.
- JWT validity defaults to 86400 seconds (24h), overridable via ENV JWT_EXPIRES_SECONDS.
- User store: ENV USER_STORE = "json" (default, users.json under DATA_BASE_PATH) or "memory".
- The secret itself is never logged or returned; the snapshot only reports whether it is set.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import global_data
from auth.errors import MissingSigningKeyError
from auth.flow import AuthenticationFlow
from auth.keys import SigningKey, load_signing_key
from auth.provider import DEFAULT_VALIDITY_SECONDS, TokenProvider
from auth.store import InMemoryUserStore, JsonUserStore, UserStore

logger = logging.getLogger(__name__)

_ENV_JWT_SECRET = "JWT_SECRET"
_ENV_JWT_EXPIRES_SECONDS = "JWT_EXPIRES_SECONDS"
_ENV_USER_STORE = "USER_STORE"


def get_jwt_secret() -> str:
    """獲取 JWT 密鑰，未配置時拋出 MissingSigningKeyError。"""
    secret = os.environ.get(_ENV_JWT_SECRET)
    if not secret or not secret.strip():
        raise MissingSigningKeyError(f"環境變量 {_ENV_JWT_SECRET} 未設置，拒絕啟動")
    return secret


def get_jwt_expires_seconds() -> int:
    """獲取 JWT 到期時間 (秒，默認為 86400)。"""
    raw = os.environ.get(_ENV_JWT_EXPIRES_SECONDS)
    if not raw:
        return DEFAULT_VALIDITY_SECONDS
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %d", _ENV_JWT_EXPIRES_SECONDS, raw, DEFAULT_VALIDITY_SECONDS)
        return DEFAULT_VALIDITY_SECONDS
    if value <= 0:
        logger.warning("%s must be positive; using default %d", _ENV_JWT_EXPIRES_SECONDS, DEFAULT_VALIDITY_SECONDS)
        return DEFAULT_VALIDITY_SECONDS
    return value


def load_key() -> SigningKey:
    return load_signing_key(get_jwt_secret())


def create_user_store(kind: Optional[str] = None) -> UserStore:
    kind = (kind or os.environ.get(_ENV_USER_STORE) or "json").strip().lower()
    if kind == "memory":
        logger.info("使用內存用戶存儲，重啟後數據丟失")
        return InMemoryUserStore()
    if kind != "json":
        logger.warning("Unknown %s=%r; falling back to json", _ENV_USER_STORE, kind)
    return JsonUserStore(global_data.USERS_FILE)


def create_auth_flow(store: Optional[UserStore] = None, key: Optional[SigningKey] = None) -> AuthenticationFlow:
    """
    按環境配置組裝認證流程。
    key 為空時從環境變量加載，缺失即失敗。
    """
    provider = TokenProvider(key or load_key(), validity_seconds=get_jwt_expires_seconds())
    return AuthenticationFlow(store if store is not None else create_user_store(), provider)


def get_effective_config_snapshot() -> Dict[str, Any]:
    """返回有效配置的快照 (用於診斷)，不包含密鑰。"""
    return {
        "jwt_secret_from_env": bool(os.environ.get(_ENV_JWT_SECRET)),
        "jwt_expires_seconds": get_jwt_expires_seconds(),
        "user_store": (os.environ.get(_ENV_USER_STORE) or "json").lower(),
        "users_file": str(global_data.USERS_FILE),
    }
