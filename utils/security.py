"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access token creation/verification via PyJWT
- Opaque refresh token generation
- Device fingerprint derivation
"""
from __future__ import annotations

import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from services.errors import ExpiredTokenError, InvalidTokenError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_BYTES = 32  # 256 bits
UNKNOWN_DEVICE_PART = "unknown"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PasswordVerifier:
    """One-way hashing and comparison of account passwords."""

    def __init__(self, hasher: Optional[PasswordHasher] = None):
        self.hasher = hasher or PasswordHasher()
        self._dummy_hash: Optional[str] = None

    def hash(self, password: str) -> str:
        """Hash a plaintext password using Argon2
        """
        return self.hasher.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """ Verify a plaintext password using argon2
        """
        try:
            return self.hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    def burn(self, password: str) -> None:
        """Spend the same work as verify() when there is no account to check against."""
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(secrets.token_hex(16))
        self.verify(password, self._dummy_hash)


@dataclass(frozen=True)
class AccessIdentity:
    account_id: int
    identifier: str


class TokenIssuer:
    """Signs short-lived access tokens and mints opaque refresh tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=10),
        issuer: str = "file-vault-api",
        clock: Callable[[], datetime] = _now,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.issuer = issuer
        self.clock = clock

    def issue_access_token(self, account_id: int, identifier: str) -> str:
        now = self.clock()
        payload = {
            "iss": self.issuer,
            "sub": str(account_id),
            "identifier": identifier,
            "type": ACCESS_TOKEN_TYPE,
            "iat": now,
            "exp": now + self.access_ttl,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    @staticmethod
    def issue_refresh_token() -> str:
        return secrets.token_hex(REFRESH_TOKEN_BYTES)

    def verify_access_token(self, token: str) -> AccessIdentity:
        """
        Decode and validate an access token.
        Raises ExpiredTokenError once exp has passed, InvalidTokenError for
        anything else wrong with it (signature, structure, claims, type).
        """
        try:
            decoded = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "sub", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError("Token expired")
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}")

        if decoded.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError("Wrong token type")
        identifier = decoded.get("identifier")
        try:
            account_id = int(decoded["sub"])
        except (TypeError, ValueError):
            raise InvalidTokenError("Malformed subject claim")
        if not isinstance(identifier, str) or not identifier:
            raise InvalidTokenError("Missing identifier claim")
        return AccessIdentity(account_id=account_id, identifier=identifier)


def derive_device_fingerprint(address: Optional[str], user_agent: Optional[str]) -> str:
    """
    SHA-256 over "<address>-<user agent>". Same address and client string
    always give the same device; a new address is a new device.
    """
    device = f"{address or UNKNOWN_DEVICE_PART}-{user_agent or UNKNOWN_DEVICE_PART}"
    return hashlib.sha256(device.encode("utf-8")).hexdigest()
