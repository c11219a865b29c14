"""
Pipeline Module for the Invoice Ingestion Engine.

This module provides:
    - ImportOrchestrator: single-document and batch entry points
    - ImportResult / ImportSummary: per-document outcome and run totals
"""

from .import_result import ImportResult, ImportSummary, summarize
from .orchestrator import ImportOrchestrator

__all__ = [
    'ImportResult',
    'ImportSummary',
    'summarize',
    'ImportOrchestrator',
]
