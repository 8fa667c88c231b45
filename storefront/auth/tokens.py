"""Signed, time-limited session tokens (JWT) binding to a user id."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import jwt

from storefront.auth.errors import TokenInvalid
from storefront.core.config import get_settings

TOKEN_TYPE = "access"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded token contents. No role or capability is ever carried."""

    user_id: int
    issued_at: datetime
    expires_at: datetime
    version: int = 0


class TokenService:
    """
    Stateless issuer/verifier.

    Expired, forged and malformed tokens all surface as TokenInvalid; the
    reason attribute tells them apart for logging.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 1440) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user_id: int, version: int = 0) -> str:
        """Create a token for user_id valid for expire_minutes."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
            "ver": version,
            "type": TOKEN_TYPE,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> TokenClaims:
        """Validate signature and expiry and return the claims. Raises TokenInvalid."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenInvalid("expired") from e
        except jwt.InvalidSignatureError as e:
            raise TokenInvalid("signature") from e
        except jwt.PyJWTError as e:
            raise TokenInvalid("malformed") from e

        if payload.get("type", TOKEN_TYPE) != TOKEN_TYPE:
            raise TokenInvalid("malformed")
        try:
            user_id = int(payload["sub"])
            version = int(payload.get("ver", 0))
        except (TypeError, ValueError) as e:
            raise TokenInvalid("malformed") from e
        return TokenClaims(
            user_id=user_id,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            version=version,
        )

    def verify(self, token: str) -> int:
        """Return the user id bound to a valid token. Raises TokenInvalid."""
        return self.decode(token).user_id


@lru_cache
def get_token_service() -> TokenService:
    """Token service configured from settings (safe to call from dependencies)."""
    settings = get_settings()
    return TokenService(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
