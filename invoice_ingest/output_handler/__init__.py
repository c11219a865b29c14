"""
Output Handler Module for the Invoice Ingestion Engine.

This module provides:
    - SQLite persistence of clients, invoices and time entries
    - Content-addressed storage of imported source documents
    - Excel import reports
"""

from .records import Client, InvoiceRecord, TimeEntryRecord
from .database_handler import DatabaseHandler
from .document_store import DocumentStore, StoredDocument
from .excel_exporter import ReportExporter

__all__ = [
    'Client',
    'InvoiceRecord',
    'TimeEntryRecord',
    'DatabaseHandler',
    'DocumentStore',
    'StoredDocument',
    'ReportExporter',
]
