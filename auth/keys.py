"""
JWT 簽名密鑰
- 進程啟動時加載一次，之後只讀
- 未配置密鑰時直接失敗，不回退到默認值
- generate_secret_key 是離線一次性工具，不在請求路徑上使用

用法: python -m auth.keys
"""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from dataclasses import dataclass, field
from typing import Callable, Optional

from auth.errors import MissingSigningKeyError

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH = 64  # 512 bits
MIN_KEY_BYTES = 32  # 256 bits


@dataclass(frozen=True)
class SigningKey:
    secret: bytes = field(repr=False)

    def __len__(self) -> int:
        return len(self.secret)


def generate_secret_key(rng: Optional[Callable[[int], bytes]] = None, length: int = SECRET_KEY_LENGTH) -> str:
    """
    生成隨機密鑰並以 base64 文本返回，用於寫入外部配置 (例如 JWT_SECRET 環境變量)。
    rng 默認為 secrets.token_bytes，測試時可以傳入固定的隨機源。
    """
    source = rng or secrets.token_bytes
    raw = source(length)
    if len(raw) != length:
        raise ValueError(f"random source returned {len(raw)} bytes, expected {length}")
    return base64.b64encode(raw).decode("ascii")


def load_signing_key(value: Optional[str]) -> SigningKey:
    """
    從配置值構建簽名密鑰。
    優先按 base64 解碼；不是合法 base64 時直接使用 UTF-8 字節。
    """
    if value is None or not str(value).strip():
        raise MissingSigningKeyError("JWT signing key is not configured (set JWT_SECRET)")

    text = str(value).strip()
    try:
        secret = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        secret = text.encode("utf-8")
    if not secret:
        secret = text.encode("utf-8")

    if len(secret) < MIN_KEY_BYTES:
        # 不記錄密鑰本身，只記錄長度
        logger.warning("JWT signing key is only %d bits; at least %d bits is recommended", len(secret) * 8, MIN_KEY_BYTES * 8)
    return SigningKey(secret=secret)


if __name__ == "__main__":
    print("Generated JWT Secret Key (use in production):")
    print(generate_secret_key())
