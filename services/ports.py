"""
Persistence ports used by the core components.

Each component talks to storage only through one of these narrow
interfaces; models/stores.py provides the SQLAlchemy implementations and the
payload side lives in utils/payloads.py.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from models.account import Account
from models.file_record import FileRecord
from models.refresh_session import RefreshSession
from utils.payloads import StoredPayload


class CredentialStore(Protocol):
    def get(self, account_id: int) -> Optional[Account]: ...

    def get_by_identifier(self, identifier: str) -> Optional[Account]: ...

    def create(self, identifier: str, password_hash: str) -> Account:
        """Insert an account; raises ConflictError if the identifier is taken."""
        ...


class SessionStore(Protocol):
    def find_by_token(self, token: str) -> Optional[RefreshSession]: ...

    def find_for_device(self, account_id: int, device_fingerprint: str) -> Optional[RefreshSession]: ...

    def count_for_account(self, account_id: int) -> int: ...

    def oldest_for_account(self, account_id: int) -> Optional[RefreshSession]: ...

    def create(
        self,
        account_id: int,
        device_fingerprint: str,
        token: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> RefreshSession: ...

    def replace_token(
        self, session: RefreshSession, token: str, expires_at: datetime, updated_at: datetime
    ) -> RefreshSession: ...

    def delete(self, session: RefreshSession) -> None: ...

    def delete_for_device(self, account_id: int, device_fingerprint: str) -> int: ...


class FileStore(Protocol):
    def create(self, account_id: int, payload: StoredPayload, uploaded_at: datetime) -> FileRecord: ...

    def get_owned(self, account_id: int, file_id: int) -> Optional[FileRecord]: ...

    def list_owned(self, account_id: int, limit: int, offset: int) -> List[FileRecord]: ...

    def count_owned(self, account_id: int) -> int: ...

    def replace(self, record: FileRecord, payload: StoredPayload) -> FileRecord: ...

    def delete(self, record: FileRecord) -> None: ...


class PayloadStorage(Protocol):
    def exists(self, path: str) -> bool: ...

    def delete(self, path: str) -> None: ...

    def discard(self, path: str) -> None:
        """Best-effort delete; failures are logged, never raised."""
        ...
