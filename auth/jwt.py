"""
JWT (HS256) codec using Python standard library only.
Base64url without padding, HMAC-SHA256 signature.

The codec only answers "can I read this token". Whether the token can be
trusted (signature, expiry) is decided by auth.provider.TokenProvider.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict, NamedTuple, Union

from auth.errors import MalformedTokenError

HEADER: Dict[str, str] = {"alg": "HS256", "typ": "JWT"}
REQUIRED_CLAIMS = ("sub", "iat", "exp")


class ParsedToken(NamedTuple):
    header: Dict[str, Any]
    claims: Dict[str, Any]
    signing_input: bytes
    signature: str


def _b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    """Base64url decode with automatic padding restoration."""
    s = data.encode("ascii")
    padding = b"=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + padding)


def _to_bytes(secret: Union[str, bytes]) -> bytes:
    return secret.encode("utf-8") if isinstance(secret, str) else secret


def now_ts() -> int:
    """Return current UNIX timestamp (seconds)."""
    return int(time.time())


def sign(signing_input: bytes, secret: Union[str, bytes]) -> bytes:
    """HMAC-SHA256 over the exact `header.claims` bytes."""
    return hmac.new(_to_bytes(secret), signing_input, hashlib.sha256).digest()


def encoded_signature(signing_input: bytes, secret: Union[str, bytes]) -> str:
    """The signature segment as it appears on the wire."""
    return _b64url_encode(sign(signing_input, secret))


def encode(claims: Dict[str, Any], secret: Union[str, bytes]) -> str:
    """
    Encode a JWT token with HS256.
    Requires claims to contain 'sub' (str), 'iat' and 'exp' (int UNIX timestamps).
    Same claims + same secret always produce the same token.
    """
    _check_claims(claims, error=ValueError)

    header_b64 = _b64url_encode(json.dumps(HEADER, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(claims, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig_b64 = encoded_signature(signing_input, secret)
    return f"{header_b64}.{payload_b64}.{sig_b64}"


def _decode_json_segment(segment: str, name: str) -> Dict[str, Any]:
    try:
        value = json.loads(_b64url_decode(segment).decode("utf-8"))
    except (ValueError, UnicodeError, binascii.Error, RecursionError) as e:
        raise MalformedTokenError(f"JWT {name} is not valid base64url JSON: {e}") from e
    if not isinstance(value, dict):
        raise MalformedTokenError(f"JWT {name} must be a JSON object")
    return value


def _check_claims(claims: Dict[str, Any], error: type = MalformedTokenError) -> None:
    for name in REQUIRED_CLAIMS:
        if name not in claims:
            raise error(f"JWT claims missing '{name}'")
    if not isinstance(claims["sub"], str):
        raise error("'sub' must be a string")
    for name in ("iat", "exp"):
        # bool 是 int 的子類，這裡要排除
        if not isinstance(claims[name], int) or isinstance(claims[name], bool):
            raise error(f"'{name}' must be an integer UNIX timestamp")


def parse(token: str) -> ParsedToken:
    """
    Split and decode a compact JWT without verifying it.
    Raises MalformedTokenError on any structural problem; never on a bad signature.
    """
    if not isinstance(token, str):
        raise MalformedTokenError("JWT must be a string")

    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedTokenError("Invalid JWT format")

    header_b64, payload_b64, sig_b64 = parts
    header = _decode_json_segment(header_b64, "header")
    claims = _decode_json_segment(payload_b64, "claims")
    _check_claims(claims)

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    # 簽名段保持原始文本，由 TokenProvider 按文本比較
    return ParsedToken(header=header, claims=claims, signing_input=signing_input, signature=sig_b64)
