"""
auth/tokens.py -- JWT issue / verify for bearer authentication.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the account id as the `sub`
       claim plus `username`, `iat` and `exp`. The signing key is the
       SECRET_KEY from the Settings object handed to TokenCodec -- the codec
       never reads configuration on its own.

  decode() returns either the claims dict or a DecodeFailure value. It does
       not raise for bad tokens, and it tells four failures apart:
         MALFORMED          -- not a structurally valid JWT
         SIGNATURE_INVALID  -- tampered with, or signed with another key
         EXPIRED            -- valid signature, `exp` in the past
         CLAIMS_INVALID     -- valid signature, but a registered claim is
                               unusable (`nbf` in the future, non-numeric
                               `iat`, unexpected `aud`)
       The auth pipeline turns any of them into InvalidToken (400). Token
       absence is the caller's concern; decode() is never called without one.

       The shape of `sub` is not checked here (jose's verify_sub is off). A
       correctly signed token with a non-string subject decodes, and the
       pipeline's claim stage rejects it as Unauthenticated (401).

Layer rule: no imports from api/ or posts/. Import from core/ is allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Union

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError

from core.config import Settings

_ALGORITHM = "HS256"


class DecodeFailureKind(str, Enum):
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    CLAIMS_INVALID = "claims_invalid"


@dataclass(frozen=True)
class DecodeFailure:
    """Why a token could not be turned into claims."""

    kind: DecodeFailureKind
    detail: str = ""


DecodeResult = Union[dict, DecodeFailure]


class TokenCodec:
    """Signs and verifies bearer tokens with a process-wide secret.

    Usage:
        codec = TokenCodec.from_settings(settings)
        token = codec.issue(account.id, username=account.username)
        result = codec.decode(token)
        if isinstance(result, DecodeFailure): ...
    """

    def __init__(self, secret_key: str, expire_seconds: int = 3600) -> None:
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenCodec:
        return cls(settings.secret_key, settings.token_expire_seconds)

    def issue(self, subject: str, expire_seconds: int | None = None, **claims: Any) -> str:
        """Encode a signed JWT whose `sub` is the given account id.

        Args:
            subject:        Account id stored as the `sub` claim.
            expire_seconds: Token lifetime. None uses the codec default. A
                            negative value issues an already-expired token,
                            which is only useful in tests.
            claims:         Extra claims, e.g. username=...
        """
        duration = self.expire_seconds if expire_seconds is None else expire_seconds
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(seconds=duration),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def decode(self, token: str) -> DecodeResult:
        """Verify a JWT. Returns its claims, or a DecodeFailure describing why not."""
        # Structural check first, without the key: a token whose header or
        # payload does not parse is malformed, not forged.
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as exc:
            return DecodeFailure(DecodeFailureKind.MALFORMED, str(exc))

        try:
            return jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM], options={"verify_sub": False})
        except ExpiredSignatureError as exc:
            return DecodeFailure(DecodeFailureKind.EXPIRED, str(exc))
        except JWTClaimsError as exc:
            return DecodeFailure(DecodeFailureKind.CLAIMS_INVALID, str(exc))
        except JWTError as exc:
            return DecodeFailure(DecodeFailureKind.SIGNATURE_INVALID, str(exc))
