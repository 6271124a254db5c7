import pytest

from auth import jwt as jwt_lib
from auth.errors import MalformedTokenError, SignatureMismatchError, TokenExpiredError
from auth.keys import SigningKey
from auth.provider import DEFAULT_VALIDITY_SECONDS, TokenProvider


def _flip(segment: str, index: int) -> str:
    """把 segment 中第 index 個字符換成另一個 base64url 字符"""
    original = segment[index]
    replacement = "A" if original != "A" else "B"
    return segment[:index] + replacement + segment[index + 1:]


@pytest.mark.parametrize("subject", ["testuser", "a", "user.name-1_2", "測試", ""])
def test_issue_then_extract_subject_roundtrip(provider, subject):
    token = provider.issue(subject)
    assert provider.extract_subject(token) == subject


def test_fresh_token_validates(provider):
    assert provider.validate(provider.issue("testuser")) is True


def test_claims_timestamps(provider, clock):
    claims = jwt_lib.parse(provider.issue("testuser")).claims
    assert claims["iat"] == clock.now
    assert claims["exp"] == clock.now + DEFAULT_VALIDITY_SECONDS
    assert provider.validity_millis == 86_400_000


def test_extra_claims_cannot_override_reserved(provider, clock):
    token = provider.issue("alice", {"sub": "mallory", "exp": 99_999_999_999, "role": "USER"})
    claims = provider.verify(token)
    assert claims["sub"] == "alice"
    assert claims["exp"] == clock.now + DEFAULT_VALIDITY_SECONDS
    assert claims["role"] == "USER"


def test_expired_token_fails_even_with_good_signature(provider, clock):
    token = provider.issue("testuser")
    clock.advance(DEFAULT_VALIDITY_SECONDS - 1)
    assert provider.validate(token) is True

    clock.advance(1)
    assert provider.validate(token) is False
    with pytest.raises(TokenExpiredError):
        provider.verify(token)


def test_extract_subject_refuses_expired_token(provider, clock):
    token = provider.issue("testuser")
    clock.advance(DEFAULT_VALIDITY_SECONDS * 2)
    with pytest.raises(TokenExpiredError):
        provider.extract_subject(token)


def test_extract_subject_refuses_forged_token(provider, clock):
    forged = TokenProvider(SigningKey(b"x" * 64), clock=clock).issue("admin")
    with pytest.raises(SignatureMismatchError):
        provider.extract_subject(forged)


def test_tampered_claims_segment_fails(provider):
    token = provider.issue("testuser")
    header_b64, payload_b64, sig_b64 = token.split(".")
    for i in range(len(payload_b64)):
        tampered = f"{header_b64}.{_flip(payload_b64, i)}.{sig_b64}"
        assert provider.validate(tampered) is False, f"flip at claims[{i}] still validated"


def test_tampered_signature_segment_fails(provider):
    token = provider.issue("testuser")
    header_b64, payload_b64, sig_b64 = token.split(".")
    for i in range(len(sig_b64)):
        tampered = f"{header_b64}.{payload_b64}.{_flip(sig_b64, i)}"
        assert provider.validate(tampered) is False, f"flip at signature[{i}] still validated"


def test_signature_mismatch_is_distinguished(provider):
    header_b64, payload_b64, sig_b64 = provider.issue("testuser").split(".")
    with pytest.raises(SignatureMismatchError):
        provider.verify(f"{header_b64}.{payload_b64}.{_flip(sig_b64, 0)}")


def test_unsupported_algorithm_rejected(provider, clock):
    import base64
    import json

    header = base64.urlsafe_b64encode(json.dumps({"alg": "none", "typ": "JWT"}).encode()).rstrip(b"=").decode()
    _, payload_b64, sig_b64 = provider.issue("testuser").split(".")
    forged = f"{header}.{payload_b64}.{sig_b64}"
    assert provider.validate(forged) is False
    with pytest.raises(SignatureMismatchError):
        provider.verify(forged)


@pytest.mark.parametrize(
    "token",
    ["", "invalid", "invalid.token", "invalid.token.string", "a.b.c.d", "é.é.é", None, 12345],
)
def test_malformed_input_never_raises_from_validate(provider, token):
    assert provider.validate(token) is False


@pytest.mark.parametrize("token", ["", "invalid.token", "invalid.token.string", "a.b.c.d"])
def test_malformed_input_raises_from_extract_subject(provider, token):
    with pytest.raises(MalformedTokenError):
        provider.extract_subject(token)


def test_key_isolation(clock):
    provider_a = TokenProvider(SigningKey(b"A" * 64), clock=clock)
    provider_b = TokenProvider(SigningKey(b"B" * 64), clock=clock)
    token = provider_a.issue("testuser")
    assert provider_a.validate(token) is True
    assert provider_b.validate(token) is False


def test_same_second_same_token(provider):
    # 同一時刻、同一 subject、同一密鑰 -> 相同簽名
    assert provider.issue("testuser") == provider.issue("testuser")


def test_validity_must_be_positive(key):
    with pytest.raises(ValueError):
        TokenProvider(key, validity_seconds=0)
