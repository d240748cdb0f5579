from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

import jwt
import pytz
from werkzeug.security import check_password_hash, generate_password_hash

from ..core.enums import Role
from ..core.exceptions import TokenError


class PasswordHasher(Protocol):
    def hash(self, plaintext: str) -> str:
        raise NotImplementedError

    def verify(self, password_hash: str, plaintext: str) -> bool:
        raise NotImplementedError


class WerkzeugPasswordHasher:
    """Adaptive salted hash (scrypt by default) from werkzeug.security."""

    def __init__(self, method: Optional[str] = None):
        self._method = method

    def hash(self, plaintext: str) -> str:
        if self._method:
            return generate_password_hash(plaintext, method=self._method)
        return generate_password_hash(plaintext)

    def verify(self, password_hash: str, plaintext: str) -> bool:
        if not password_hash:
            return False
        try:
            return check_password_hash(password_hash, plaintext)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: Role


class TokenSigner(Protocol):
    def generate(self, user_id: str, email: str, role: Role) -> str:
        raise NotImplementedError

    def parse(self, token: str) -> TokenClaims:
        raise NotImplementedError


class JWTSigner:
    """HS256 bearer tokens carrying uid/email/role with a fixed issuer."""

    algorithm = "HS256"

    def __init__(self, secret: str, *, issuer: str, ttl_seconds: int):
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self._issuer = issuer
        self._ttl = timedelta(seconds=int(ttl_seconds))

    def generate(self, user_id: str, email: str, role: Role) -> str:
        now = datetime.now(pytz.utc)
        payload = {
            "uid": str(user_id),
            "email": email,
            "role": Role(role).value,
            "iss": self._issuer,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def parse(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("token has expired") from None
        except jwt.InvalidTokenError as exc:
            raise TokenError(f"invalid token: {exc}") from None

        try:
            return TokenClaims(
                user_id=str(payload["uid"]),
                email=str(payload["email"]),
                role=Role(payload["role"]),
            )
        except (KeyError, ValueError):
            raise TokenError("invalid token claims") from None
