"""Local disk storage for uploaded file payloads."""

import logging
import os
import uuid
from dataclasses import dataclass

from werkzeug.datastructures import FileStorage

from services.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
# Column widths of files.name and files.extension
MAX_NAME_LENGTH = 255
MAX_EXTENSION_LENGTH = 32


@dataclass(frozen=True)
class StoredPayload:
    """Metadata of a payload that is already written to storage."""

    name: str
    extension: str
    mime_type: str
    size: int
    path: str


def split_filename(filename: str) -> tuple:
    """Split an uploaded filename into display name and extension (no dot).

    >>> split_filename("report.final.pdf")
    ('report.final', 'pdf')
    """
    base = os.path.basename(filename.replace("\\", "/"))
    name, ext = os.path.splitext(base)
    return name, ext[1:]


class LocalPayloadStorage:
    """Writes uploads under a root folder using generated, collision-free names.

    Paths handed out are absolute and only meaningful to this class.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)

    def save(self, upload: FileStorage) -> StoredPayload:
        """Persist an uploaded file and describe it.

        Raises:
            InvalidInputError: If the name or extension is too long to record.
            OSError: If the payload cannot be written.
        """
        name, extension = split_filename(upload.filename or "")
        if len(name) > MAX_NAME_LENGTH or len(extension) > MAX_EXTENSION_LENGTH:
            raise InvalidInputError("File name is too long")
        stored_name = uuid.uuid4().hex + (f".{extension}" if extension else "")
        path = os.path.join(self.root, stored_name)
        try:
            logger.info("Writing payload to storage: %s", stored_name)
            upload.save(path)
        except OSError:
            logger.exception("Failed to write payload: %s", stored_name)
            self.discard(path)
            raise
        return StoredPayload(
            name=name,
            extension=extension,
            mime_type=upload.mimetype or DEFAULT_MIME_TYPE,
            size=os.path.getsize(path),
            path=path,
        )

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def delete(self, path: str) -> None:
        """Delete a payload; a missing file is not an error.

        Raises:
            OSError: If the file exists but cannot be removed.
        """
        try:
            os.remove(path)
            logger.info("Deleted payload: %s", os.path.basename(path))
        except FileNotFoundError:
            logger.debug("Payload already gone: %s", os.path.basename(path))

    def discard(self, path: str) -> None:
        """Best-effort delete used for compensation; leaves an orphan on failure."""
        try:
            self.delete(path)
        except OSError:
            logger.exception("Failed to discard payload, orphaned file: %s", path)
