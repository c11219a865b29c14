"""
Input Handler Module for the Invoice Ingestion Engine.

This module provides functionality for:
    - Validating input files
    - Listing import directories
    - Reading the text layer of digital PDFs
    - Reading already extracted text layers (.txt)

Author: Administration Tooling Team
"""

from .handler import InputHandler, SourceDocument
from .pdf_processor import PDFTextExtractor

__all__ = ['InputHandler', 'SourceDocument', 'PDFTextExtractor']
