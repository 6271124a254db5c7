"""
Token 簽發與校驗
- issue: 以 subject 簽發 24 小時有效的 HS256 token
- verify: 內部使用，區分 格式錯誤 / 簽名錯誤 / 已過期
- validate: 對外使用，所有失敗一律返回 False，不拋出異常
- extract_subject: 只在 validate 通過後調用
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Callable, Dict, Optional

from auth import jwt as jwt_lib
from auth.errors import SignatureMismatchError, TokenError, TokenExpiredError
from auth.keys import SigningKey

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_SECONDS = 24 * 60 * 60

# 由 provider 設置，客戶端無法覆蓋
_RESERVED_CLAIMS = frozenset(jwt_lib.REQUIRED_CLAIMS)


class TokenProvider:
    def __init__(
        self,
        key: SigningKey,
        validity_seconds: int = DEFAULT_VALIDITY_SECONDS,
        clock: Callable[[], int] = jwt_lib.now_ts,
    ):
        if validity_seconds <= 0:
            raise ValueError("validity_seconds must be positive")
        self._key = key
        self._clock = clock
        self.validity_seconds = int(validity_seconds)

    @property
    def validity_millis(self) -> int:
        return self.validity_seconds * 1000

    def issue(self, subject: str, extra_claims: Optional[Dict[str, Any]] = None) -> str:
        iat = int(self._clock())
        claims: Dict[str, Any] = {
            k: v for k, v in (extra_claims or {}).items() if k not in _RESERVED_CLAIMS
        }
        claims.update({"sub": subject, "iat": iat, "exp": iat + self.validity_seconds})
        return jwt_lib.encode(claims, self._key.secret)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        解析並校驗 token，返回 claims。
        失敗時拋出 MalformedTokenError / SignatureMismatchError / TokenExpiredError。
        """
        parsed = jwt_lib.parse(token)
        if parsed.header.get("alg") != "HS256" or parsed.header.get("typ") != "JWT":
            raise SignatureMismatchError("Unsupported JWT header")

        expected = jwt_lib.encoded_signature(parsed.signing_input, self._key.secret)
        if not hmac.compare_digest(expected.encode("ascii"), parsed.signature.encode("utf-8", "replace")):
            raise SignatureMismatchError("Invalid JWT signature")

        if self._clock() >= parsed.claims["exp"]:
            raise TokenExpiredError("Token expired")
        return parsed.claims

    def validate(self, token: str) -> bool:
        try:
            self.verify(token)
        except TokenError as e:
            logger.debug(f"Token 校驗失敗: {type(e).__name__}: {e}")
            return False
        return True

    def extract_subject(self, token: str) -> str:
        """
        返回 token 的 subject。
        無效 token 會拋出對應的 TokenError，而不是返回一個不可信的 subject。
        """
        return self.verify(token)["sub"]
