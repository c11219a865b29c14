"""
PDF Text Extraction Module.

This module reads the embedded text layer of digital PDF invoices:
    - pdfplumber as primary extractor
    - PyMuPDF (fitz) as fallback
    - page limit from configuration

Scanned PDFs have no text layer; they are reported, not rasterized.

Author: Administration Tooling Team
"""

from pathlib import Path
from typing import List, Union

from config import get_config
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.exceptions import InputError, UnreadableSourceError

# Initialize module logger
logger = get_logger(__name__)


class PDFTextExtractor:
    """
    Extracts per-page text from PDF files.

    Attributes:
        max_pages: Maximum number of pages to read

    Example:
        >>> extractor = PDFTextExtractor()
        >>> pages = extractor.extract_pages("2025-001_Raupp.pdf")
        >>> print(pages[0][:40])
    """

    def __init__(self) -> None:
        """Initialize the PDF extractor with configuration."""
        self.max_pages = int(get_config("input.pdf.max_pages", 10))

        # Check for required libraries
        self._check_dependencies()

        logger.debug(f"PDFTextExtractor initialized (max_pages={self.max_pages})")

    def _check_dependencies(self) -> None:
        """Check which PDF libraries are available."""
        try:
            import pdfplumber
            self._pdfplumber = pdfplumber
        except ImportError:
            logger.debug("pdfplumber not available. Using PyMuPDF as primary.")
            self._pdfplumber = None

        try:
            import fitz  # PyMuPDF
            self._pymupdf = fitz
        except ImportError:
            logger.debug("PyMuPDF not available. No fallback extractor.")
            self._pymupdf = None

    def extract_pages(self, filepath: Union[str, Path]) -> List[str]:
        """
        Extract the text of the first max_pages pages.

        Args:
            filepath: Path to the PDF file.

        Returns:
            One string per page; a page without text yields "".

        Raises:
            UnreadableSourceError: If no available library can read the file.
            InputError: If neither pdfplumber nor PyMuPDF is installed.
        """
        filepath = Path(filepath)

        if self._pdfplumber is None and self._pymupdf is None:
            raise InputError(
                "No PDF text extraction library available. "
                "Install pdfplumber or PyMuPDF."
            )

        errors = []
        if self._pdfplumber is not None:
            try:
                return self._extract_with_pdfplumber(filepath)
            except Exception as e:
                logger.debug(f"pdfplumber failed on {filepath.name}: {e}")
                errors.append(f"pdfplumber: {e}")

        if self._pymupdf is not None:
            try:
                return self._extract_with_pymupdf(filepath)
            except Exception as e:
                logger.debug(f"PyMuPDF failed on {filepath.name}: {e}")
                errors.append(f"PyMuPDF: {e}")

        raise UnreadableSourceError(str(filepath), "; ".join(errors))

    def _extract_with_pdfplumber(self, filepath: Path) -> List[str]:
        logger.debug("Using pdfplumber for text extraction")
        with self._pdfplumber.open(filepath) as pdf:
            return [page.extract_text() or "" for page in pdf.pages[:self.max_pages]]

    def _extract_with_pymupdf(self, filepath: Path) -> List[str]:
        logger.debug("Using PyMuPDF for text extraction")
        doc = self._pymupdf.open(filepath)
        try:
            return [doc.load_page(number).get_text() for number in range(min(len(doc), self.max_pages))]
        finally:
            doc.close()
