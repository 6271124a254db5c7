import base64
import json

import pytest

from auth import jwt as jwt_lib
from auth.errors import MalformedTokenError

SECRET = b"codec-secret"


def _claims(**overrides):
    claims = {"sub": "alice", "iat": 1_700_000_000, "exp": 1_700_086_400}
    claims.update(overrides)
    return claims


def _segment(obj) -> str:
    raw = json.dumps(obj).encode("utf-8") if not isinstance(obj, bytes) else obj
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def test_encode_produces_three_base64url_segments():
    token = jwt_lib.encode(_claims(), SECRET)
    parts = token.split(".")
    assert len(parts) == 3
    for part in parts:
        assert "=" not in part
        assert "+" not in part and "/" not in part


def test_encode_is_deterministic():
    assert jwt_lib.encode(_claims(), SECRET) == jwt_lib.encode(_claims(), SECRET)
    assert jwt_lib.encode(_claims(), SECRET) != jwt_lib.encode(_claims(), b"other-secret")


def test_parse_returns_header_and_claims():
    token = jwt_lib.encode(_claims(role="x"), SECRET)
    parsed = jwt_lib.parse(token)
    assert parsed.header == {"alg": "HS256", "typ": "JWT"}
    assert parsed.claims == _claims(role="x")
    header_b64, payload_b64, sig_b64 = token.split(".")
    assert parsed.signing_input == f"{header_b64}.{payload_b64}".encode("ascii")
    assert parsed.signature == sig_b64


def test_parse_does_not_judge_signature():
    token = jwt_lib.encode(_claims(), SECRET)
    header_b64, payload_b64, _ = token.split(".")
    parsed = jwt_lib.parse(f"{header_b64}.{payload_b64}.not-a-real-signature")
    assert parsed.claims["sub"] == "alice"


def test_non_ascii_subject_roundtrip():
    token = jwt_lib.encode(_claims(sub="測試用戶"), SECRET)
    assert jwt_lib.parse(token).claims["sub"] == "測試用戶"


@pytest.mark.parametrize(
    "token",
    [
        "",
        "abc",
        "a.b",
        "a.b.c.d",
        "invalid.token.string",
        "....",
    ],
)
def test_parse_rejects_wrong_shape(token):
    with pytest.raises(MalformedTokenError):
        jwt_lib.parse(token)


def test_parse_rejects_non_string():
    with pytest.raises(MalformedTokenError):
        jwt_lib.parse(None)  # type: ignore[arg-type]


def test_parse_rejects_non_json_claims():
    header = _segment({"alg": "HS256", "typ": "JWT"})
    with pytest.raises(MalformedTokenError):
        jwt_lib.parse(f"{header}.{_segment(b'not json')}.sig")


def test_parse_rejects_non_object_claims():
    header = _segment({"alg": "HS256", "typ": "JWT"})
    with pytest.raises(MalformedTokenError):
        jwt_lib.parse(f"{header}.{_segment([1, 2, 3])}.sig")


@pytest.mark.parametrize("missing", ["sub", "iat", "exp"])
def test_parse_rejects_missing_required_claim(missing):
    claims = _claims()
    del claims[missing]
    header = _segment({"alg": "HS256", "typ": "JWT"})
    with pytest.raises(MalformedTokenError):
        jwt_lib.parse(f"{header}.{_segment(claims)}.sig")


@pytest.mark.parametrize(
    "overrides",
    [
        {"sub": 42},
        {"iat": "now"},
        {"exp": 1.5},
        {"exp": True},
    ],
)
def test_parse_rejects_wrong_claim_types(overrides):
    header = _segment({"alg": "HS256", "typ": "JWT"})
    with pytest.raises(MalformedTokenError):
        jwt_lib.parse(f"{header}.{_segment(_claims(**overrides))}.sig")


def test_encode_requires_exp():
    claims = _claims()
    del claims["exp"]
    with pytest.raises(ValueError):
        jwt_lib.encode(claims, SECRET)
