"""
Document Store Module.

Keeps a copy of every imported source document under

    <documents_dir>/Imports/<year>/<invoice number><ext>

Identical content already stored under that name is reused; different
content gets a "_<first 8 hex digits of its SHA-256>" suffix.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from config import get_config
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.helpers import (
    ensure_directory,
    get_file_extension,
    is_within_directory,
    sanitize_identifier,
    sha256_digest,
)
from invoice_ingest.utils.exceptions import DocumentStorageError

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredDocument:
    """Location of a stored copy, relative to the store's base directory."""
    relative_path: str
    sha256: str
    reused: bool = False


class DocumentStore:
    """
    Content-addressed copies of imported documents.

    Attributes:
        base_dir: Root directory of the store
        folder: Subdirectory for imported documents

    Example:
        >>> store = DocumentStore("outputs/documents")
        >>> stored = store.store("inbox/2025-001_Raupp.pdf", "2025-001", 2025)
        >>> stored.relative_path
        'Imports/2025/2025-001.pdf'
    """

    FOLDER = "Imports"

    def __init__(self, base_dir: Optional[Union[str, Path]] = None) -> None:
        self.base_dir = Path(base_dir or get_config("paths.documents_dir", "outputs/documents"))

    def store(self, source: Union[str, Path], identifier: str, year: int) -> StoredDocument:
        """
        Copy a source document into the store.

        Args:
            source: Path of the document to copy.
            identifier: Invoice number the copy is named after.
            year: Invoice year, used as subdirectory.

        Returns:
            StoredDocument describing the stored copy.

        Raises:
            DocumentStorageError: If the source cannot be read, the target
                escapes the base directory or the write fails.
        """
        source = Path(source)
        try:
            data = source.read_bytes()
        except OSError as e:
            raise DocumentStorageError(identifier, f"cannot read {source}: {e}") from e

        digest = sha256_digest(data)
        extension = get_file_extension(source) or ".pdf"
        stem = sanitize_identifier(identifier)
        directory = self.base_dir / self.FOLDER / str(int(year))

        target = directory / f"{stem}{extension}"
        if target.exists():
            try:
                existing = sha256_digest(target.read_bytes())
            except OSError as e:
                raise DocumentStorageError(identifier, f"cannot read {target}: {e}") from e
            if existing == digest:
                logger.debug(f"Document already stored: {target}")
                return StoredDocument(self._relative(target), digest, reused=True)
            target = directory / f"{stem}_{digest[:8]}{extension}"
            if target.exists():
                return StoredDocument(self._relative(target), digest, reused=True)

        if not is_within_directory(target, self.base_dir):
            raise DocumentStorageError(identifier, f"target outside store: {target}")

        try:
            ensure_directory(directory)
            target.write_bytes(data)
        except OSError as e:
            raise DocumentStorageError(identifier, str(e)) from e

        logger.info(f"Stored document: {target}")
        return StoredDocument(self._relative(target), digest)

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path of a stored document.

        Raises:
            DocumentStorageError: If the path escapes the base directory.
        """
        path = self.base_dir / relative_path
        if not is_within_directory(path, self.base_dir):
            raise DocumentStorageError(relative_path, "path outside store")
        return path

    def _relative(self, path: Path) -> str:
        return path.relative_to(self.base_dir).as_posix()
