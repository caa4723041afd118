"""
Temporary document lifecycle.

A request that produces a PDF on disk owns it through ``temporary_document``,
which removes the file when the scope exits, however it exits.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from fastapi import UploadFile

from ..errors import PayloadTooLargeError

logger = logging.getLogger(__name__)

UPLOAD_CHUNK_SIZE = 1024 * 1024


@dataclass
class TemporaryDocument:
    """A PDF on local disk, owned by a single request."""

    path: Path
    original_name: str | None = None
    size: int = 0

    @property
    def filename(self) -> str:
        """Name to present to downstream services."""
        return self.original_name or self.path.name

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def delete(self) -> bool:
        """
        Remove the file from disk.

        Safe to call more than once. Errors are logged, never raised.

        Returns:
            True if a file was removed by this call.
        """
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception("Error cleaning up file %s", self.path)
            return False
        logger.debug("Removed temporary document %s", self.path)
        return True


def new_document_path(directory: Path, prefix: str = "temp") -> Path:
    """Return a collision-free PDF path inside ``directory``."""
    return directory / f"{prefix}-{uuid.uuid4()}.pdf"


@asynccontextmanager
async def temporary_document(document: TemporaryDocument) -> AsyncIterator[TemporaryDocument]:
    """Yield ``document`` and delete it on every exit path."""
    try:
        yield document
    finally:
        await asyncio.to_thread(document.delete)


async def write_document(directory: Path, data: bytes, prefix: str = "temp") -> TemporaryDocument:
    """
    Write ``data`` to a new temporary document in ``directory``.

    A partially written file is removed if the write fails or the caller
    is cancelled mid-write.
    """
    document = TemporaryDocument(path=new_document_path(directory, prefix), size=len(data))
    write = asyncio.ensure_future(asyncio.to_thread(document.path.write_bytes, data))
    try:
        await asyncio.shield(write)
    except BaseException:
        # the worker thread keeps writing after a cancel; wait for it first
        await asyncio.wait([write])
        await asyncio.to_thread(document.delete)
        raise
    return document


async def save_upload(
    upload: UploadFile,
    directory: Path,
    max_bytes: int,
) -> TemporaryDocument:
    """
    Stream an uploaded file to disk, enforcing the size limit.

    The partially written file is removed if the limit is exceeded or
    writing fails.

    Raises:
        PayloadTooLargeError: If the upload is larger than ``max_bytes``.
    """
    if upload.size is not None and upload.size > max_bytes:
        raise PayloadTooLargeError(_too_large_message(max_bytes))

    document = TemporaryDocument(
        path=new_document_path(directory, "upload"),
        original_name=upload.filename,
    )
    try:
        with document.path.open("wb") as handle:
            while chunk := await upload.read(UPLOAD_CHUNK_SIZE):
                document.size += len(chunk)
                if document.size > max_bytes:
                    raise PayloadTooLargeError(_too_large_message(max_bytes))
                await asyncio.to_thread(handle.write, chunk)
    except BaseException:
        await asyncio.to_thread(document.delete)
        raise
    finally:
        await upload.close()

    logger.info(
        "Saved upload %s (%d bytes) to %s",
        upload.filename,
        document.size,
        document.path,
    )
    return document


def _too_large_message(max_bytes: int) -> str:
    return f"File too large (limit is {max_bytes // (1024 * 1024)} MB)"
