"""
Main Input Handler Module.

This module provides the InputHandler class, the text-extraction
collaborator of the import pipeline. It validates source files, lists
import directories and returns the text layer of each document.

Usage:
    from invoice_ingest.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("2025-001_Raupp.pdf")

    # Directory listing
    paths = handler.list_documents("./facturen/")

Classes:
    SourceDocument: Text layer of one document
    InputHandler: Main class for file input handling
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.helpers import get_file_extension
from invoice_ingest.utils.exceptions import (
    InputError,
    NoExtractableTextError,
    SourceNotFoundError,
    UnreadableSourceError,
    UnsupportedFileTypeError,
)

from .pdf_processor import PDFTextExtractor


# Initialize module logger
logger = get_logger(__name__)

PAGE_SEPARATOR = "\f"


@dataclass
class SourceDocument:
    """
    Text layer of one source document.

    Attributes:
        filepath: Original file path
        filename: Original filename
        file_type: 'pdf' or 'text'
        pages: Extracted text per page
    """
    filepath: str
    filename: str
    file_type: str
    pages: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def __repr__(self) -> str:
        return (
            f"SourceDocument(filename='{self.filename}', "
            f"type='{self.file_type}', "
            f"pages={self.page_count})"
        )


class InputHandler:
    """
    Main input handler for invoice files.

    PDFs are read through their embedded text layer. Text files hold an
    already extracted layer, with form feeds between pages.

    Attributes:
        supported_extensions: Set of supported file extensions
        min_text_length: Shorter text means the document needs OCR
        pdf_extractor: PDFTextExtractor instance for PDF files

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load("2025-001_Raupp.pdf")
        >>> print(f"Loaded {document.page_count} pages")
    """

    PDF_EXTENSIONS = {'.pdf'}
    TEXT_EXTENSIONS = {'.txt'}

    def __init__(self, pdf_extractor: Optional[PDFTextExtractor] = None) -> None:
        """
        Initialize the InputHandler.

        Args:
            pdf_extractor: Optional extractor; created from configuration
                when omitted.
        """
        self.supported_extensions = {
            ext.lower() for ext in get_config(
                "input.supported_extensions",
                sorted(self.PDF_EXTENSIONS | self.TEXT_EXTENSIONS)
            )
        }
        self.min_text_length = int(get_config("input.pdf.min_text_length", 20))
        self._pdf_extractor = pdf_extractor

        logger.debug(f"InputHandler initialized with extensions: {sorted(self.supported_extensions)}")

    @property
    def pdf_extractor(self) -> PDFTextExtractor:
        if self._pdf_extractor is None:
            self._pdf_extractor = PDFTextExtractor()
        return self._pdf_extractor

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists and has a supported type.

        Raises:
            SourceNotFoundError: If the file doesn't exist.
            InputError: If the path is not a file.
            UnsupportedFileTypeError: If the file type is not supported.
        """
        path = Path(filepath)

        if not path.exists():
            raise SourceNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_extensions))

        return path

    def load(self, filepath: Union[str, Path]) -> SourceDocument:
        """
        Load the text layer of a document.

        Args:
            filepath: Path to the invoice file.

        Returns:
            SourceDocument with one text entry per page.

        Raises:
            SourceNotFoundError, UnsupportedFileTypeError: Invalid input.
            UnreadableSourceError: The file cannot be read.
            NoExtractableTextError: The document has no usable text layer.
        """
        path = self.validate_file(filepath)
        extension = get_file_extension(path)
        logger.debug(f"Loading file: {path}")

        if extension in self.TEXT_EXTENSIONS:
            file_type = 'text'
            try:
                pages = path.read_text(encoding="utf-8").split(PAGE_SEPARATOR)
            except (OSError, UnicodeDecodeError) as e:
                raise UnreadableSourceError(str(path), str(e)) from e
        else:
            file_type = 'pdf'
            pages = self.pdf_extractor.extract_pages(path)

        document = SourceDocument(
            filepath=str(path),
            filename=path.name,
            file_type=file_type,
            pages=pages,
        )

        if len(document.text.strip()) < self.min_text_length:
            raise NoExtractableTextError(str(path))

        logger.debug(f"Loaded {document}")
        return document

    def list_documents(self, directory: Union[str, Path]) -> List[Path]:
        """
        List the supported documents in a directory.

        The scan is non-recursive, skips hidden files and is sorted by name.

        Raises:
            SourceNotFoundError: If the directory doesn't exist.
            InputError: If the path is not a directory or cannot be listed.
        """
        directory = Path(directory)

        if not directory.exists():
            raise SourceNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        try:
            files = [
                path for path in directory.iterdir()
                if path.is_file()
                and not path.name.startswith('.')
                and get_file_extension(path) in self.supported_extensions
            ]
        except OSError as e:
            raise InputError(f"Cannot list directory: {directory}", {'reason': str(e)}) from e

        files.sort(key=lambda path: path.name)
        logger.info(f"Found {len(files)} documents in {directory}")
        return files
