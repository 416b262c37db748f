"""
Session Cookie Codec

All session state lives in the cookie: a compact HS256 JWT carrying the
authenticated user id (``sub``), the issue time (``iat``) and the expiry
(``exp``). Nothing is stored server-side, so logging out just clears the
cookie and an expired token simply stops verifying.

A token that fails verification for any reason (bad signature, wrong
algorithm, missing claims, expired) decodes to the anonymous session rather
than raising.

Usage:
    codec = SessionCodec(secret=settings.session_secret, max_age_seconds=3600)
    token = codec.encode(user.id)
    session = codec.decode(token)
    session.user_id  # -> user.id
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionData:
    """
    Decoded session payload.

    Attributes:
        user_id: Authenticated user, None for anonymous visitors
        issued_at: When the cookie was issued
        expires_at: When the cookie stops being accepted
    """
    user_id: Optional[int] = None
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "user_id": self.user_id,
            "issued_at": self.issued_at.isoformat() if self.issued_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


ANONYMOUS = SessionData()


class SessionCodec:
    """Signs and verifies session tokens with an injected secret and lifetime."""

    ALGORITHM = "HS256"
    REQUIRED_CLAIMS = ["sub", "iat", "exp"]

    def __init__(self, secret: str, max_age_seconds: int):
        if not secret:
            raise ValueError("Session secret must not be empty")
        self._secret = secret
        self.max_age = timedelta(seconds=max_age_seconds)

    @property
    def max_age_seconds(self) -> int:
        return int(self.max_age.total_seconds())

    def encode(self, user_id: int, now: Optional[datetime] = None) -> str:
        """Issue a signed token for ``user_id``."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.max_age,
        }
        return jwt.encode(payload, self._secret, algorithm=self.ALGORITHM)

    def decode(self, token: Optional[str]) -> SessionData:
        """Verify ``token``; anything invalid yields the anonymous session."""
        if not token:
            return ANONYMOUS
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                options={"require": self.REQUIRED_CLAIMS},
            )
            user_id = int(payload["sub"])
        except jwt.ExpiredSignatureError:
            logger.debug("Session cookie expired")
            return ANONYMOUS
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.warning(f"Rejected session cookie: {e}")
            return ANONYMOUS

        return SessionData(
            user_id=user_id,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


class SessionCookie:
    """
    Reads and writes the session cookie on Starlette requests/responses.

    Bundles the codec with the cookie attributes so every route sets and
    clears the cookie the same way (deleting only works when name, path,
    secure and samesite match the ones it was set with).
    """

    def __init__(
        self,
        codec: SessionCodec,
        name: str = "session",
        secure: bool = False,
        samesite: str = "lax",
    ):
        self.codec = codec
        self.name = name
        self.secure = secure
        self.samesite = samesite

    @classmethod
    def from_settings(cls, settings) -> "SessionCookie":
        codec = SessionCodec(
            secret=settings.session_secret,
            max_age_seconds=settings.session_max_age_seconds,
        )
        return cls(
            codec,
            name=settings.session_cookie_name,
            secure=settings.secure_cookies,
            samesite=settings.cookie_samesite,
        )

    def read(self, request) -> SessionData:
        return self.codec.decode(request.cookies.get(self.name))

    def issue(self, response, user_id: int) -> None:
        response.set_cookie(
            key=self.name,
            value=self.codec.encode(user_id),
            max_age=self.codec.max_age_seconds,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite=self.samesite,
        )

    def clear(self, response) -> None:
        response.delete_cookie(
            key=self.name,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite=self.samesite,
        )
