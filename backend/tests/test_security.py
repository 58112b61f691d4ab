import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import SecretStr

from gallery.core import security
from gallery.core.security import TokenCodec, secrets_match

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def unb64url(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def codec_at(moment: datetime, key="test-secret", lifetime=timedelta(hours=24)) -> TokenCodec:
    return TokenCodec(key, lifetime=lifetime, clock=lambda: moment)


def signed(payload: bytes, key=b"test-secret") -> str:
    return b64url(payload) + "." + b64url(hmac.new(key, payload, hashlib.sha256).digest())


def test_issue_then_verify_returns_owner(codec):
    token = codec.issue(1, "ann@x.com", "lead")
    assert codec.verify(token) == (1, True)


def test_token_has_two_base64url_segments_and_claims():
    token = codec_at(T0).issue(7, "bob@x.com", "customer")
    payload_b64, mac_b64 = token.split(".")

    claims = json.loads(unb64url(payload_b64))
    assert claims == {
        "category": "customer",
        "email": "bob@x.com",
        "expires_at": int((T0 + timedelta(hours=24)).timestamp()),
        "issued_at": int(T0.timestamp()),
        "owner_id": 7,
    }
    expected_mac = hmac.new(b"test-secret", unb64url(payload_b64), hashlib.sha256).digest()
    assert unb64url(mac_b64) == expected_mac
    assert "=" not in token


def test_secret_str_key_is_accepted():
    codec = TokenCodec(SecretStr("test-secret"))
    token = codec.issue(3, "c@x.com", "lead")
    assert TokenCodec("test-secret").verify(token) == (3, True)


def test_empty_key_is_rejected():
    with pytest.raises(ValueError):
        TokenCodec("")


def test_flipped_mac_byte_is_rejected(codec):
    token = codec.issue(1, "ann@x.com", "lead")
    payload_b64, mac_b64 = token.split(".")
    mac = bytearray(unb64url(mac_b64))
    mac[0] ^= 0x01

    owner_id, valid = codec.verify(payload_b64 + "." + b64url(bytes(mac)))
    assert valid is False
    assert owner_id is None


def test_any_other_last_mac_character_is_rejected(codec):
    token = codec.issue(1, "ann@x.com", "lead")
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"

    accepted = [
        c for c in alphabet
        if c != token[-1] and codec.verify(token[:-1] + c) != (None, False)
    ]
    assert accepted == []


def test_non_canonical_payload_segment_is_rejected():
    payload = b'{"owner_id":1}'
    token = signed(payload)
    payload_b64, mac_b64 = token.split(".")
    assert len(payload) % 3 != 0
    # Same decoded bytes, different trailing bits
    twin = next(
        c for c in "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
        if c != payload_b64[-1] and unb64url(payload_b64[:-1] + c) == payload
    )

    with pytest.raises(ValueError):
        security._b64url_decode(payload_b64[:-1] + twin)
    assert security._b64url_decode(payload_b64) == payload


def test_tampered_claims_are_rejected(codec):
    token = codec.issue(1, "ann@x.com", "lead")
    payload_b64, mac_b64 = token.split(".")
    claims = json.loads(unb64url(payload_b64))
    claims["owner_id"] = 2
    forged = b64url(json.dumps(claims, sort_keys=True, separators=(",", ":")).encode())

    assert codec.verify(forged + "." + mac_b64) == (None, False)


def test_token_signed_with_other_key_is_rejected():
    token = TokenCodec("other-secret").issue(1, "ann@x.com", "lead")
    assert TokenCodec("test-secret").verify(token) == (None, False)


def test_expired_token_is_rejected():
    token = codec_at(T0, lifetime=timedelta(hours=1)).issue(1, "ann@x.com", "lead")

    assert codec_at(T0 + timedelta(minutes=59, seconds=59)).verify(token) == (1, True)
    # At expires_at the token is already dead
    assert codec_at(T0 + timedelta(hours=1)).verify(token) == (None, False)
    assert codec_at(T0 + timedelta(days=2)).verify(token) == (None, False)


@pytest.mark.parametrize("token", [
    None,
    "",
    "no-separator",
    "a.b.c",
    "....",
    "!!!.###",
    "e30.",
])
def test_malformed_tokens_fail_closed(codec, token):
    assert codec.verify(token) == (None, False)


def test_validly_signed_garbage_payload_fails_closed():
    assert TokenCodec("test-secret").verify(signed(b"not json")) == (None, False)
    assert TokenCodec("test-secret").verify(signed(b"[1, 2]")) == (None, False)
    assert TokenCodec("test-secret").verify(signed(b'{"owner_id": "1", "expires_at": 9999999999}')) == (None, False)
    assert TokenCodec("test-secret").verify(signed(b'{"owner_id": true, "expires_at": 9999999999}')) == (None, False)
    assert TokenCodec("test-secret").verify(signed(b'{"owner_id": 1}')) == (None, False)


def test_decode_claims_returns_full_bundle():
    codec = codec_at(T0)
    claims = codec.decode_claims(codec.issue(5, "eve@x.com", "customer"))
    assert claims is not None
    assert claims.owner_id == 5
    assert claims.email == "eve@x.com"
    assert claims.category == "customer"
    assert claims.expires_at - claims.issued_at == 24 * 3600


def test_mac_comparison_uses_compare_digest(codec, monkeypatch):
    seen = []
    original = hmac.compare_digest

    def spy(a, b):
        seen.append((len(a), len(b)))
        return original(a, b)

    monkeypatch.setattr(security.hmac, "compare_digest", spy)
    token = codec.issue(1, "ann@x.com", "lead")
    codec.verify(token)

    assert seen == [(32, 32)]


def test_secrets_match():
    assert secrets_match("secret1", "secret1")
    assert not secrets_match("secret1", "secret2")
    assert not secrets_match("Secret1", "secret1")
