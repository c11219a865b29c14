"""
Import Result Data Classes.

Per-document outcome of an import and the per-run summary built from it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional


@dataclass
class ImportResult:
    """
    Outcome of importing one document.

    Attributes:
        success: Whether records were created for the document
        invoice_number: Invoice number, or the filename when unknown
        message: Human-readable outcome
        entries_created: Time entries created
        total_amount: Invoice amount due
        duplicate: The invoice was imported before and was skipped
        entries_skipped: Time entries skipped as duplicates
        source_file: Name of the source document
        format_variant: Layout grammar used
    """
    success: bool
    invoice_number: str
    message: str
    entries_created: int = 0
    total_amount: Decimal = Decimal("0")
    duplicate: bool = False
    entries_skipped: int = 0
    source_file: Optional[str] = None
    format_variant: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.success and not self.duplicate

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'invoice_number': self.invoice_number,
            'message': self.message,
            'entries_created': self.entries_created,
            'total_amount': self.total_amount,
            'duplicate': self.duplicate,
            'entries_skipped': self.entries_skipped,
            'source_file': self.source_file,
            'format_variant': self.format_variant,
        }


@dataclass
class ImportSummary:
    """Counts of one import run."""
    succeeded: int = 0
    duplicates: int = 0
    failed: int = 0
    entries_created: int = 0
    total_amount: Decimal = Decimal("0")

    @property
    def processed(self) -> int:
        return self.succeeded + self.duplicates + self.failed

    def __str__(self) -> str:
        return (
            f"{self.processed} documents: {self.succeeded} imported, "
            f"{self.duplicates} duplicates skipped, {self.failed} failed; "
            f"{self.entries_created} time entries, total EUR {self.total_amount}"
        )


def summarize(results: Iterable[ImportResult]) -> ImportSummary:
    """Aggregate ImportResults into an ImportSummary."""
    summary = ImportSummary()
    for result in results:
        if result.success:
            summary.succeeded += 1
            summary.entries_created += result.entries_created
            summary.total_amount += result.total_amount
        elif result.duplicate:
            summary.duplicates += 1
        else:
            summary.failed += 1
    return summary
