"""
Session lifecycle: signup, sign-in, refresh-token rotation and logout.

A refresh session binds one opaque refresh token to an (account, device)
pair. An account holds at most `max_devices` of them; signing in from a new
device beyond that evicts the one created first.

All state goes through the SessionStore; nothing is cached in process. The
count-then-evict step is not wrapped in a transaction, so two concurrent
sign-ins from new devices may briefly leave the account over the cap. The
next sign-in from a new device brings it back down. Likewise, two concurrent
refreshes with the same token are not serialized: the one that loses the
race fails with a storage error (500) rather than an invalid-token error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from models.account import Account
from models.base_model import utcnow
from models.refresh_session import RefreshSession
from models.schemas.common import is_valid_password, normalize_identifier
from services.errors import (
    ConflictError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
)
from services.ports import CredentialStore, SessionStore
from utils.security import PasswordVerifier, TokenIssuer

logger = logging.getLogger(__name__)

MAX_DEVICES_PER_USER = 5
REFRESH_TOKEN_TTL = timedelta(days=7)


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    session: RefreshSession

    @property
    def refresh_token(self) -> str:
        return self.session.token


class SessionManager:
    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionStore,
        passwords: PasswordVerifier,
        tokens: TokenIssuer,
        max_devices: int = MAX_DEVICES_PER_USER,
        refresh_ttl: timedelta = REFRESH_TOKEN_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        if max_devices < 1:
            raise ValueError("max_devices must be at least 1")
        self.credentials = credentials
        self.sessions = sessions
        self.passwords = passwords
        self.tokens = tokens
        self.max_devices = max_devices
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    def register(self, identifier: str, password: str, device_fingerprint: str) -> IssuedTokens:
        """Create an account and open its first session on the calling device."""
        if not identifier or not password:
            raise InvalidInputError("id and password are required")
        normalized = normalize_identifier(identifier)
        if normalized is None:
            raise InvalidInputError("id must be a valid email or phone number")
        if not is_valid_password(password):
            raise InvalidInputError("password must be at least 6 characters long")

        if self.credentials.get_by_identifier(normalized) is not None:
            raise ConflictError("User with this id already exists")

        account = self.credentials.create(normalized, self.passwords.hash(password))
        logger.info("Account %s created", account.id)
        return self._bind_device(account, device_fingerprint)

    def login(self, identifier: str, password: str, device_fingerprint: str) -> IssuedTokens:
        """
        Check credentials and issue a new token pair for the device.

        Unknown identifier and wrong password raise the same error.
        """
        if not identifier or not password:
            raise InvalidInputError("id and password are required")
        lookup = normalize_identifier(identifier) or str(identifier).strip()

        account = self.credentials.get_by_identifier(lookup)
        if account is None:
            self.passwords.burn(password)
            raise InvalidCredentialsError()
        if not self.passwords.verify(password, account.password_hash):
            raise InvalidCredentialsError()

        issued = self._bind_device(account, device_fingerprint)
        logger.info("Account %s signed in from device %s", account.id, device_fingerprint[:8])
        return issued

    def refresh(self, refresh_token: str) -> IssuedTokens:
        """
        Rotate a refresh token. The presented token stops working; the device
        keeps its slot under a new token with a fresh expiry.
        """
        if not refresh_token:
            raise InvalidInputError("refreshToken is required")

        current = self.sessions.find_by_token(refresh_token)
        if current is None:
            raise InvalidTokenError("Invalid refresh token")

        now = self.clock()
        if current.expires_at <= now:
            # lazy cleanup, there is no background sweep
            self.sessions.delete(current)
            logger.info("Removed expired session of account %s", current.user_id)
            raise ExpiredTokenError("Refresh token has expired")

        account = self.credentials.get(current.user_id)
        if account is None:
            raise NotFoundError("User not found")

        fingerprint = current.device_id
        self.sessions.delete(current)
        session = self.sessions.create(
            account.id,
            fingerprint,
            self.tokens.issue_refresh_token(),
            now + self.refresh_ttl,
            now,
        )
        logger.debug("Rotated refresh token for account %s", account.id)
        return IssuedTokens(self.tokens.issue_access_token(account.id, account.identifier), session)

    def logout(self, account_id: int, device_fingerprint: str) -> None:
        """Drop the device's session. Idempotent."""
        removed = self.sessions.delete_for_device(account_id, device_fingerprint)
        logger.info("Account %s logged out (%d session(s) removed)", account_id, removed)

    def _bind_device(self, account: Account, device_fingerprint: str) -> IssuedTokens:
        access_token = self.tokens.issue_access_token(account.id, account.identifier)
        refresh_token = self.tokens.issue_refresh_token()
        now = self.clock()
        expires_at = now + self.refresh_ttl

        existing = self.sessions.find_for_device(account.id, device_fingerprint)
        if existing is not None:
            session = self.sessions.replace_token(existing, refresh_token, expires_at, now)
        else:
            self._make_room(account.id)
            session = self.sessions.create(account.id, device_fingerprint, refresh_token, expires_at, now)
        return IssuedTokens(access_token, session)

    def _make_room(self, account_id: int) -> None:
        while self.sessions.count_for_account(account_id) >= self.max_devices:
            oldest = self.sessions.oldest_for_account(account_id)
            if oldest is None:
                break
            self.sessions.delete(oldest)
            logger.info(
                "Device limit (%d) reached for account %s, evicted device %s",
                self.max_devices,
                account_id,
                oldest.device_id[:8],
            )
