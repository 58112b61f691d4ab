# gallery/core/security.py
import base64
import binascii
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

from pydantic import SecretStr

logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = "."
DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    """Strict base64url decoding; raises ValueError on any non-canonical input"""
    padded = segment + "=" * (-len(segment) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError("Invalid base64url segment") from e
    # b64decode ignores the unused low bits of the last character
    if _b64url_encode(raw) != segment:
        raise ValueError("Non-canonical base64url segment")
    return raw


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenClaims:
    owner_id: int
    email: str
    category: str
    issued_at: int
    expires_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "email": self.email,
            "category": self.category,
            "issued_at": self.issued_at,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TokenClaims":
        if not isinstance(data, dict):
            raise ValueError("Claim bundle must be an object")
        owner_id = data.get("owner_id")
        expires_at = data.get("expires_at")
        issued_at = data.get("issued_at", 0)
        # bool is an int subclass, reject it explicitly
        for value in (owner_id, expires_at, issued_at):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError("Claim bundle has ill-typed fields")
        return cls(
            owner_id=owner_id,
            email=str(data.get("email", "")),
            category=str(data.get("category", "")),
            issued_at=issued_at,
            expires_at=expires_at,
        )


class TokenCodec:
    """Issues and verifies signed, self-contained bearer tokens.

    Wire format: ``base64url(claims_json) + "." + base64url(hmac_sha256(claims_json))``.
    The server keeps no session state; a token is trusted only if its MAC matches
    and it has not yet reached ``expires_at``.
    """

    def __init__(
        self,
        secret_key: Union[SecretStr, str],
        lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if isinstance(secret_key, SecretStr):
            secret_key = secret_key.get_secret_value()
        if not secret_key:
            raise ValueError("Token secret key must not be empty")
        self._key = secret_key.encode("utf-8")
        self.lifetime = lifetime
        self._clock = clock

    def _sign(self, payload: bytes) -> bytes:
        return hmac.new(self._key, payload, hashlib.sha256).digest()

    @staticmethod
    def _serialize(claims: TokenClaims) -> bytes:
        return json.dumps(claims.to_dict(), sort_keys=True, separators=(",", ":")).encode("utf-8")

    def issue(self, owner_id: int, email: str, category: str) -> str:
        """Create a signed token for the given identity"""
        now = self._clock()
        claims = TokenClaims(
            owner_id=owner_id,
            email=email,
            category=category,
            issued_at=int(now.timestamp()),
            expires_at=int((now + self.lifetime).timestamp()),
        )
        payload = self._serialize(claims)
        return _b64url_encode(payload) + TOKEN_SEPARATOR + _b64url_encode(self._sign(payload))

    def decode_claims(self, token: Optional[str]) -> Optional[TokenClaims]:
        """Return the verified claim bundle, or None for any malformed, forged or expired token"""
        if not token or not isinstance(token, str):
            return None

        parts = token.split(TOKEN_SEPARATOR)
        if len(parts) != 2:
            return None

        try:
            payload = _b64url_decode(parts[0])
            signature = _b64url_decode(parts[1])
        except ValueError:
            return None

        # compare_digest walks the full length regardless of where bytes differ
        if not hmac.compare_digest(signature, self._sign(payload)):
            return None

        try:
            claims = TokenClaims.from_dict(json.loads(payload.decode("utf-8")))
        except (ValueError, UnicodeDecodeError):
            return None

        if int(self._clock().timestamp()) >= claims.expires_at:
            logger.debug("Rejected expired token for owner %s", claims.owner_id)
            return None

        return claims

    def verify(self, token: Optional[str]) -> Tuple[Optional[int], bool]:
        """Return ``(owner_id, True)`` for a valid token and ``(None, False)`` otherwise"""
        claims = self.decode_claims(token)
        if claims is None:
            return None, False
        return claims.owner_id, True


def secrets_match(provided: str, stored: str) -> bool:
    """Constant-time comparison of a login secret against the stored value"""
    return hmac.compare_digest(provided.encode("utf-8"), stored.encode("utf-8"))
