"""
tests/test_tokens.py -- Unit tests for auth/tokens.py and core/identifiers.py.

The codec must tell malformed, tampered/wrong-key, expired, and
unusable-claim tokens apart without raising. The subject's shape is left to
the auth pipeline. Ids must be exactly 24 lowercase hex characters.
"""

from __future__ import annotations

import base64
import json
import time

import pytest
from jose import jwt

from auth.tokens import DecodeFailure, DecodeFailureKind, TokenCodec
from core.errors import MalformedIdentifier
from core.identifiers import is_valid_id, new_id, require_valid_id


def _b64url(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


class TestTokenCodec:
    """issue() / decode() behaviour."""

    def test_issue_then_decode_returns_claims(self, codec: TokenCodec) -> None:
        """A freshly issued token decodes to its subject and extra claims."""
        account_id = new_id()
        claims = codec.decode(codec.issue(account_id, username="root"))
        assert isinstance(claims, dict)
        assert claims["sub"] == account_id
        assert claims["username"] == "root"
        assert claims["exp"] > claims["iat"]

    def test_garbage_is_malformed(self, codec: TokenCodec) -> None:
        result = codec.decode("not-a-jwt")
        assert isinstance(result, DecodeFailure)
        assert result.kind is DecodeFailureKind.MALFORMED

    def test_unparseable_payload_is_malformed(self, codec: TokenCodec) -> None:
        """Three segments, but the middle one is not JSON."""
        header = _b64url({"alg": "HS256", "typ": "JWT"})
        result = codec.decode(f"{header}.bm90IGpzb24.c2ln")
        assert isinstance(result, DecodeFailure)
        assert result.kind is DecodeFailureKind.MALFORMED

    def test_tampered_payload_is_signature_invalid(self, codec: TokenCodec) -> None:
        """Swapping the payload under the issued signature must not verify."""
        header, _payload, signature = codec.issue(new_id()).split(".")
        forged_payload = _b64url({"sub": new_id(), "exp": 9999999999})
        result = codec.decode(f"{header}.{forged_payload}.{signature}")
        assert isinstance(result, DecodeFailure)
        assert result.kind is DecodeFailureKind.SIGNATURE_INVALID

    def test_other_key_is_signature_invalid(self, codec: TokenCodec) -> None:
        other = TokenCodec("another-secret-key-that-is-long-enough-000000")
        result = codec.decode(other.issue(new_id()))
        assert isinstance(result, DecodeFailure)
        assert result.kind is DecodeFailureKind.SIGNATURE_INVALID

    def test_expired_token(self, codec: TokenCodec) -> None:
        result = codec.decode(codec.issue(new_id(), expire_seconds=-60))
        assert isinstance(result, DecodeFailure)
        assert result.kind is DecodeFailureKind.EXPIRED

    def test_future_nbf_is_claims_invalid(self, codec: TokenCodec, secret_key: str) -> None:
        """Correctly signed, but not valid yet: a claim problem, not a forged signature."""
        now = int(time.time())
        token = jwt.encode({"sub": new_id(), "nbf": now + 600, "exp": now + 3600}, secret_key, algorithm="HS256")
        result = codec.decode(token)
        assert isinstance(result, DecodeFailure)
        assert result.kind is DecodeFailureKind.CLAIMS_INVALID

    def test_non_string_subject_still_decodes(self, codec: TokenCodec, secret_key: str) -> None:
        """The subject's shape is checked by the pipeline, not by the codec."""
        token = jwt.encode({"sub": 123, "exp": int(time.time()) + 60}, secret_key, algorithm="HS256")
        claims = codec.decode(token)
        assert isinstance(claims, dict)
        assert claims["sub"] == 123

    def test_from_settings_uses_secret_and_lifetime(self, settings) -> None:
        codec = TokenCodec.from_settings(settings)
        assert codec.expire_seconds == settings.token_expire_seconds
        # Same secret -> tokens from one codec verify with the other
        assert isinstance(TokenCodec(settings.secret_key).decode(codec.issue(new_id())), dict)


class TestIdentifiers:
    """Opaque id format."""

    def test_new_id_is_valid(self) -> None:
        value = new_id()
        assert len(value) == 24
        assert is_valid_id(value)

    def test_new_ids_are_distinct(self) -> None:
        assert len({new_id() for _ in range(100)}) == 100

    @pytest.mark.parametrize(
        "value",
        ["", "abc", "5a422a851b54a676234d17f", "5A422A851B54A676234D17F7", "5a422a851b54a676234d17f7\n", None, 42],
    )
    def test_invalid_ids_rejected(self, value) -> None:
        assert not is_valid_id(value)
        with pytest.raises(MalformedIdentifier):
            require_valid_id(value)

    def test_require_valid_id_returns_value(self) -> None:
        assert require_valid_id("5a422a851b54a676234d17f7") == "5a422a851b54a676234d17f7"
