"""
Deduplication Gate Module.

Best-effort duplicate detection against already imported records. Source
rows carry no stable identifier, so time entries are matched on a soft
key: date, hours and client.
"""

from decimal import Decimal
from typing import Optional

from config import get_config
from invoice_ingest.output_handler import DatabaseHandler
from invoice_ingest.utils.logger import get_logger

logger = get_logger(__name__)


class DeduplicationGate:
    """
    Answers "was this imported before?" for invoices and time entries.

    Attributes:
        database: Persistence collaborator
        enabled: Master switch (deduplication.enabled)
        check_time_entries: Entry-level check (deduplication.time_entries)
    """

    def __init__(
        self,
        database: DatabaseHandler,
        enabled: Optional[bool] = None,
        check_time_entries: Optional[bool] = None
    ) -> None:
        self.database = database
        self.enabled = get_config("deduplication.enabled", True) if enabled is None else enabled
        self.check_time_entries = (
            get_config("deduplication.time_entries", True)
            if check_time_entries is None else check_time_entries
        )

    def is_duplicate_invoice(self, invoice_number: str) -> bool:
        if not self.enabled:
            return False
        duplicate = self.database.find_invoice_by_number(invoice_number) is not None
        if duplicate:
            logger.warning(f"Invoice {invoice_number} already imported; skipping")
        return duplicate

    def is_duplicate_entry(
        self,
        entry_date,
        hours: Decimal,
        client_id: Optional[int],
        exclude_invoice: Optional[str] = None
    ) -> bool:
        """
        Whether an entry with the same date, hours and client exists.

        Entries belonging to exclude_invoice are ignored, so a single
        invoice may list the same day twice.
        """
        if not (self.enabled and self.check_time_entries):
            return False
        matches = [
            entry for entry in self.database.find_time_entries(entry_date, hours, client_id)
            if exclude_invoice is None or entry.invoice_number != exclude_invoice
        ]
        if matches:
            logger.warning(
                f"Time entry {entry_date.isoformat()} ({hours} h, client {client_id}) "
                f"already imported with invoice {matches[0].invoice_number}; skipping"
            )
        return bool(matches)
