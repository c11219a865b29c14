"""
Import Orchestrator Module.

This module sequences one import:

    text -> layout -> line items -> reconciliation -> client ->
    duplicate checks -> invoice + time entries -> stored copy -> result

and repeats it over a directory, isolating each file's failure.

Author: Administration Tooling Team
"""

from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from invoice_ingest.input_handler import InputHandler
from invoice_ingest.matching import ClientResolver, DeduplicationGate
from invoice_ingest.output_handler import (
    DatabaseHandler,
    DocumentStore,
    InvoiceRecord,
    TimeEntryRecord,
)
from invoice_ingest.parsing import InvoiceTextParser, ParsedInvoice, ParsingRules
from invoice_ingest.reconciliation import Reconciliation, ReconciliationEngine
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.exceptions import InvoiceIngestError, StorageError
from .import_result import ImportResult, summarize

logger = get_logger(__name__)


class ImportOrchestrator:
    """
    Drives document imports end to end.

    Files are processed sequentially so every duplicate check sees the
    records written for the files before it.

    Attributes:
        database: Persistence collaborator
        document_store: Store for copies of the source documents
        input_handler: Text-extraction collaborator
        rules: Parsing rules, including the date plausibility window

    Example:
        >>> orchestrator = ImportOrchestrator(reference_date=date(2025, 6, 30))
        >>> results = orchestrator.import_directory("facturen/2025")
        >>> print(summarize(results))
    """

    def __init__(
        self,
        database: Optional[DatabaseHandler] = None,
        document_store: Optional[DocumentStore] = None,
        input_handler: Optional[InputHandler] = None,
        reference_date: Optional[date] = None,
        rules: Optional[ParsingRules] = None
    ) -> None:
        self.database = database or DatabaseHandler()
        self.document_store = document_store or DocumentStore()
        self.input_handler = input_handler or InputHandler()
        self.rules = rules or ParsingRules.from_config(reference_date)

        self.parser = InvoiceTextParser(self.rules)
        self.engine = ReconciliationEngine(self.rules.bounds, self.rules.default_km_rate)
        self.resolver = ClientResolver(self.database)
        self.gate = DeduplicationGate(self.database)

        self.payment_term_days = int(get_config("import.payment_term_days", 14))
        self.invoice_status = get_config("import.invoice_status", "Betaald")

    def import_document(self, filepath: Union[str, Path]) -> ImportResult:
        """
        Import a single document.

        Args:
            filepath: Path of a .pdf or .txt document.

        Returns:
            ImportResult; a duplicate invoice yields duplicate=True.

        Raises:
            InputError: Missing, unsupported, unreadable or text-less file.
            InvoiceNumberNotFoundError: No invoice number in text or filename.
            DatabaseError: Persisting the records failed.
        """
        document = self.input_handler.load(filepath)
        return self.import_text(document.text, document.filename, source_path=Path(document.filepath))

    def import_text(
        self,
        text: str,
        filename: str = "",
        source_path: Optional[Path] = None
    ) -> ImportResult:
        """
        Import an already extracted text layer.

        Args:
            text: Invoice text.
            filename: Name of the source document.
            source_path: Source file to keep a copy of, if any.
        """
        parsed = self.parser.parse(text, filename)
        variant = parsed.format_variant.value if parsed.format_variant else None

        if self.gate.is_duplicate_invoice(parsed.invoice_number):
            return ImportResult(
                success=False,
                invoice_number=parsed.invoice_number,
                message=f"Invoice {parsed.invoice_number} already imported",
                duplicate=True,
                source_file=filename or None,
                format_variant=variant,
            )

        with self.database.transaction():
            client = self.resolver.resolve(parsed).client
            reconciliation = self.engine.reconcile(parsed, client.name if client else None)
            created, skipped = self._persist(parsed, reconciliation, client.id if client else None, filename)

        if source_path is not None:
            self._store_document(parsed, source_path)

        message = f"Invoice {parsed.invoice_number} imported"
        if reconciliation.factor_located:
            percentage = int(reconciliation.split_factor * 100)
            message += f" (split: {percentage}%)"
        if skipped:
            message += f" ({skipped} duplicate entries skipped)"

        logger.info(f"{message}: {created} time entries, total {parsed.total_amount}")
        return ImportResult(
            success=True,
            invoice_number=parsed.invoice_number,
            message=message,
            entries_created=created,
            total_amount=parsed.total_amount,
            entries_skipped=skipped,
            source_file=filename or None,
            format_variant=variant,
        )

    def _persist(
        self,
        parsed: ParsedInvoice,
        reconciliation: Reconciliation,
        client_id: Optional[int],
        filename: str
    ):
        invoice = self.database.create_invoice(InvoiceRecord(
            invoice_number=parsed.invoice_number,
            invoice_date=parsed.invoice_date,
            due_date=parsed.invoice_date + timedelta(days=self.payment_term_days),
            status=self.invoice_status,
            total_amount=parsed.total_amount,
            client_id=client_id,
            notes=f"Geïmporteerd uit PDF: {filename}" if filename else None,
            is_split=parsed.is_split,
            split_factor=reconciliation.split_factor if reconciliation.factor_located else None,
            source_file=filename or None,
        ))

        created = skipped = 0
        for day in reconciliation.days:
            if self.gate.is_duplicate_entry(day.date, day.hours, client_id, exclude_invoice=parsed.invoice_number):
                skipped += 1
                continue

            self.database.create_time_entry(TimeEntryRecord(
                date=day.date,
                activity_code=day.activity_code,
                description=day.description,
                hours=day.hours,
                hourly_rate=day.hourly_rate,
                location=parsed.client_location,
                return_distance=day.return_distance,
                km_rate=day.km_rate,
                notes=day.notes,
                is_standby=day.is_standby,
                duty_code=day.duty_code,
                invoice_number=parsed.invoice_number,
                invoice_id=invoice.id,
                client_id=client_id,
            ))
            created += 1

        return created, skipped

    def _store_document(self, parsed: ParsedInvoice, source_path: Path) -> None:
        """Keep a copy of the source; a failure here does not fail the import."""
        try:
            stored = self.document_store.store(source_path, parsed.invoice_number, parsed.invoice_date.year)
            self.database.set_document_path(parsed.invoice_number, stored.relative_path, stored.sha256)
        except StorageError as e:
            logger.warning(f"Could not store document for {parsed.invoice_number}: {e}")

    def import_directory(self, directory: Union[str, Path]) -> List[ImportResult]:
        """
        Import every supported document in a directory.

        A failing document becomes a failed ImportResult and the batch
        continues.

        Raises:
            SourceNotFoundError: If the directory doesn't exist.
            InputError: If the path is not a listable directory.
        """
        paths = self.input_handler.list_documents(directory)

        results = []
        for index, path in enumerate(paths, 1):
            logger.info(f"Processing file {index}/{len(paths)}: {path.name}")
            try:
                result = self.import_document(path)
            except InvoiceIngestError as e:
                logger.error(f"Import failed for {path.name}: {e}")
                result = self._failed(path, str(e))
            except Exception as e:
                logger.exception(f"Unexpected error importing {path.name}: {e}")
                result = self._failed(path, f"Unexpected error: {e}")
            results.append(result)

        logger.info(f"Batch import complete: {summarize(results)}")
        return results

    def import_path(self, path: Union[str, Path]) -> List[ImportResult]:
        """Import a single file or every document in a directory."""
        if Path(path).is_dir():
            return self.import_directory(path)
        return [self.import_document(path)]

    @staticmethod
    def _failed(path: Path, message: str) -> ImportResult:
        return ImportResult(
            success=False,
            invoice_number=path.name,
            message=message,
            source_file=path.name,
        )
