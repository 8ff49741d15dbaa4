"""
Stateless bearer tokens shared by every service.

Tokens are HS256 JWTs carrying ``iss``, ``sub`` (the principal's email) and
``exp``. Any instance holding the same secret and issuer can verify a token
issued by any other instance; nothing is persisted.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from clinic.core.config import Config
from clinic.core.errors import TokenCreationError
from clinic.core.logger import logger

ALGORITHM = "HS256"
INVALID_TOKEN = ""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and validates signed bearer tokens"""

    def __init__(
        self,
        secret: str,
        issuer: str = "auth-api",
        ttl: timedelta = timedelta(hours=2),
        leeway_seconds: int = 0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._secret = secret
        self.issuer = issuer
        self.ttl = ttl
        self.leeway_seconds = leeway_seconds
        self._clock = clock

    @classmethod
    def from_config(cls, config: Config) -> "TokenService":
        return cls(
            secret=config.api_security_token_secret,
            issuer=config.api_security_token_issuer,
            ttl=timedelta(hours=config.api_security_token_ttl_hours),
            leeway_seconds=config.api_security_token_leeway_seconds,
        )

    def expires_at(self) -> datetime:
        """Expiry for a token issued now, in UTC"""
        return self._clock().astimezone(timezone.utc) + self.ttl

    def issue(self, principal_email: str) -> str:
        """
        Sign a token for the given principal.

        Raises:
            TokenCreationError: If signing fails
        """
        if not self._secret:
            raise TokenCreationError("Error while generating token: no signing secret configured")

        payload = {
            "iss": self.issuer,
            "sub": principal_email,
            "exp": self.expires_at(),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise TokenCreationError("Error while generating token") from e

    def validate(self, token: Optional[str]) -> str:
        """
        Return the token's subject, or the empty string when the token is not
        valid (bad signature, wrong issuer, expired, malformed).
        """
        if not token:
            return INVALID_TOKEN

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                leeway=self.leeway_seconds,
                options={"require": ["exp", "iss", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.debug(f"Token rejected: {e}", metadata={"event": "token_invalid", "reason": type(e).__name__})
            return INVALID_TOKEN

        subject = payload.get("sub")
        return subject if isinstance(subject, str) else INVALID_TOKEN
