"""
Per-account file metadata.

Payloads are written by the payload storage before the registry sees them;
the registry keeps metadata and storage consistent:
- a metadata write that fails discards the payload that was just stored
- an update that fails, or targets a file the caller does not own, discards
  the new payload
- delete removes the payload first, and still drops the row if that fails
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List

from models.base_model import utcnow
from models.file_record import FileRecord
from services.errors import InvalidInputError, NotFoundError, StorageError
from services.ports import FileStore, PayloadStorage
from utils.payloads import StoredPayload

logger = logging.getLogger(__name__)

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class FilePage:
    records: List[FileRecord]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)


class FileRegistry:
    def __init__(
        self,
        files: FileStore,
        payloads: PayloadStorage,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.files = files
        self.payloads = payloads
        self.clock = clock

    def upload(self, account_id: int, payload: StoredPayload) -> FileRecord:
        try:
            record = self.files.create(account_id, payload, self.clock())
        except StorageError:
            logger.error("Metadata write failed for account %s, discarding payload", account_id)
            self.payloads.discard(payload.path)
            raise
        logger.info("Account %s uploaded file %s (%d bytes)", account_id, record.id, record.size)
        return record

    def list(self, account_id: int, page_size: int, page: int) -> FilePage:
        """Newest uploads first."""
        if not MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE:
            raise InvalidInputError(
                f"list_size must be a positive number between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}"
            )
        if page < 1:
            raise InvalidInputError("page must be a positive number")

        records = self.files.list_owned(account_id, limit=page_size, offset=(page - 1) * page_size)
        total = self.files.count_owned(account_id)
        return FilePage(records=records, total=total, page=page, page_size=page_size)

    def get(self, account_id: int, file_id: int) -> FileRecord:
        record = self.files.get_owned(account_id, file_id)
        if record is None:
            raise NotFoundError("File not found")
        return record

    def locate(self, account_id: int, file_id: int) -> FileRecord:
        """Like get(), but also requires the payload to still be in storage."""
        record = self.get(account_id, file_id)
        if not self.payloads.exists(record.path):
            logger.warning("Payload of file %s is missing from storage", record.id)
            raise NotFoundError("File not found")
        return record

    def update(self, account_id: int, file_id: int, payload: StoredPayload) -> FileRecord:
        """Replace every metadata field and the stored payload of an owned file."""
        try:
            record = self.files.get_owned(account_id, file_id)
            if record is None:
                raise NotFoundError("File not found")
            previous_path = record.path
            record = self.files.replace(record, payload)
        except (NotFoundError, StorageError):
            self.payloads.discard(payload.path)
            raise
        if previous_path != payload.path:
            self.payloads.discard(previous_path)
        logger.info("Account %s replaced file %s", account_id, record.id)
        return record

    def delete(self, account_id: int, file_id: int) -> None:
        record = self.get(account_id, file_id)
        # a payload that cannot be removed is left orphaned
        self.payloads.discard(record.path)
        self.files.delete(record)
        logger.info("Account %s deleted file %s", account_id, file_id)
