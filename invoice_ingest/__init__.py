"""
Invoice Ingestion Engine - Source Package.

Imports locum invoices (digital PDFs or extracted text) into a local
administration database as invoices and per-day time entries.

Modules:
    - input_handler: File validation and text-layer extraction
    - normalization: Dutch dates and amounts, plausibility bounds
    - parsing: Layout classification and line-item grammars
    - reconciliation: Hours/travel pairing and split-payment proration
    - matching: Client resolution and duplicate detection
    - output_handler: SQLite persistence, document store, Excel report
    - pipeline: Import orchestration

Architecture:
    Input → Classify → Parse lines → Reconcile → Resolve client
          → Deduplicate → Persist → Store document
"""

__version__ = "1.0.0"
__author__ = "Administration Tooling Team"

__all__ = [
    'input_handler',
    'normalization',
    'parsing',
    'reconciliation',
    'matching',
    'output_handler',
    'pipeline',
    'utils'
]
