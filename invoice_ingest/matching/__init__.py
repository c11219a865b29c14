"""
Matching Module for the Invoice Ingestion Engine.

This module provides:
    - ClientResolver: registry lookup with provisional creation
    - DeduplicationGate: soft duplicate detection for invoices and entries
"""

from .client_resolver import ClientResolver, ClientResolution
from .deduplication import DeduplicationGate

__all__ = [
    'ClientResolver',
    'ClientResolution',
    'DeduplicationGate',
]
