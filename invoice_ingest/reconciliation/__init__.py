"""
Reconciliation Module for the Invoice Ingestion Engine.

This module provides:
    - ReconciliationEngine: hours/travel pairing, proration, standby tagging
    - BillableDay: the importable time entry it produces
    - Split-factor lookup on breakdown tables
"""

from .engine import ReconciliationEngine, Reconciliation, BillableDay
from .proration import locate_split_factor, clean_client_name

__all__ = [
    'ReconciliationEngine',
    'Reconciliation',
    'BillableDay',
    'locate_split_factor',
    'clean_client_name',
]
