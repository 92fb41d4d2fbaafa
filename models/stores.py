"""
SQLAlchemy implementations of the persistence ports in services/ports.py.

Every file query carries the owner filter in its WHERE clause, so records
of other accounts are never loaded at all.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.account import Account
from models.db_storage import DBStorage
from models.file_record import FileRecord
from models.refresh_session import RefreshSession
from services.errors import ConflictError, StorageError
from utils.payloads import StoredPayload

logger = logging.getLogger(__name__)


class SqlCredentialStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def get(self, account_id: int) -> Optional[Account]:
        try:
            return self.storage.get(Account, account_id)
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def get_by_identifier(self, identifier: str) -> Optional[Account]:
        try:
            return self.storage.get_session().query(Account).filter(Account.identifier == identifier).first()
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def create(self, identifier: str, password_hash: str) -> Account:
        session = self.storage.get_session()
        account = Account(identifier=identifier, password_hash=password_hash)
        session.add(account)
        try:
            session.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent signup with the same identifier
            session.rollback()
            raise ConflictError("User with this id already exists") from exc
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError() from exc
        return account


class SqlSessionStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def find_by_token(self, token: str) -> Optional[RefreshSession]:
        try:
            return self.storage.get_session().query(RefreshSession).filter(RefreshSession.token == token).first()
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def find_for_device(self, account_id: int, device_fingerprint: str) -> Optional[RefreshSession]:
        try:
            return (
                self.storage.get_session().query(RefreshSession)
                .filter(
                    RefreshSession.user_id == account_id,
                    RefreshSession.device_id == device_fingerprint,
                )
                .first()
            )
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def count_for_account(self, account_id: int) -> int:
        try:
            return (
                self.storage.get_session().query(RefreshSession)
                .filter(RefreshSession.user_id == account_id)
                .count()
            )
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def oldest_for_account(self, account_id: int) -> Optional[RefreshSession]:
        # Equal created_at values: whichever row the database returns first.
        try:
            return (
                self.storage.get_session().query(RefreshSession)
                .filter(RefreshSession.user_id == account_id)
                .order_by(RefreshSession.created_at.asc())
                .first()
            )
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def create(
        self,
        account_id: int,
        device_fingerprint: str,
        token: str,
        expires_at: datetime,
        created_at: datetime,
    ) -> RefreshSession:
        rs = RefreshSession(
            user_id=account_id,
            device_id=device_fingerprint,
            token=token,
            expires_at=expires_at,
            created_at=created_at,
            updated_at=created_at,
        )
        self.storage.new(rs)
        self.storage.save()
        return rs

    def replace_token(
        self, session: RefreshSession, token: str, expires_at: datetime, updated_at: datetime
    ) -> RefreshSession:
        session.token = token
        session.expires_at = expires_at
        session.updated_at = updated_at
        self.storage.new(session)
        self.storage.save()
        return session

    def delete(self, session: RefreshSession) -> None:
        self.storage.delete(session)
        self.storage.save()

    def delete_for_device(self, account_id: int, device_fingerprint: str) -> int:
        try:
            deleted = (
                self.storage.get_session().query(RefreshSession)
                .filter(
                    RefreshSession.user_id == account_id,
                    RefreshSession.device_id == device_fingerprint,
                )
                .delete(synchronize_session=False)
            )
        except SQLAlchemyError as exc:
            self.storage.get_session().rollback()
            raise StorageError() from exc
        self.storage.save()
        return deleted


class SqlFileStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def _owned(self, account_id: int):
        return self.storage.get_session().query(FileRecord).filter(FileRecord.user_id == account_id)

    def create(self, account_id: int, payload: StoredPayload, uploaded_at: datetime) -> FileRecord:
        record = FileRecord(
            name=payload.name,
            extension=payload.extension,
            mime_type=payload.mime_type,
            size=payload.size,
            path=payload.path,
            user_id=account_id,
            upload_date=uploaded_at,
        )
        self.storage.new(record)
        self.storage.save()
        return record

    def get_owned(self, account_id: int, file_id: int) -> Optional[FileRecord]:
        try:
            return self._owned(account_id).filter(FileRecord.id == file_id).first()
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def list_owned(self, account_id: int, limit: int, offset: int) -> List[FileRecord]:
        try:
            return (
                self._owned(account_id)
                .order_by(FileRecord.upload_date.desc(), FileRecord.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def count_owned(self, account_id: int) -> int:
        try:
            return (
                self.storage.get_session()
                .query(func.count(FileRecord.id))
                .filter(FileRecord.user_id == account_id)
                .scalar()
            )
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def replace(self, record: FileRecord, payload: StoredPayload) -> FileRecord:
        record.name = payload.name
        record.extension = payload.extension
        record.mime_type = payload.mime_type
        record.size = payload.size
        record.path = payload.path
        self.storage.new(record)
        self.storage.save()
        return record

    def delete(self, record: FileRecord) -> None:
        self.storage.delete(record)
        self.storage.save()
