"""
Excel Exporter Module.

This module writes the per-run import report to an Excel workbook.
Uses openpyxl for modern Excel format support.

Features:
    - One row per processed document
    - Formatted, frozen header row
    - Auto-column width
    - Summary sheet with run totals

Author: Administration Tooling Team
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from config import get_config
from invoice_ingest.utils.logger import get_logger
from invoice_ingest.utils.helpers import ensure_directory, generate_timestamp
from invoice_ingest.utils.exceptions import ReportExportError

# Initialize module logger
logger = get_logger(__name__)


class ReportExporter:
    """
    Exports import results to Excel format.

    Results are any objects with a to_dict() method returning the keys
    listed in COLUMNS (ImportResult does).

    Attributes:
        output_dir: Directory for output files
        sheet_name: Title of the results sheet

    Example:
        >>> exporter = ReportExporter()
        >>> filepath = exporter.export(results, summary)
        >>> print(f"Saved to: {filepath}")
    """

    # Column definitions
    COLUMNS = [
        ('Source File', 'source_file'),
        ('Invoice Number', 'invoice_number'),
        ('Success', 'success'),
        ('Duplicate', 'duplicate'),
        ('Layout', 'format_variant'),
        ('Entries Created', 'entries_created'),
        ('Entries Skipped', 'entries_skipped'),
        ('Total Amount', 'total_amount'),
        ('Message', 'message'),
    ]

    def __init__(self, output_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))
        self.sheet_name = get_config("output.excel.sheet_name", "Import Results")

        # Check for openpyxl
        self._check_dependencies()

        logger.debug(f"ReportExporter initialized (output_dir: {self.output_dir})")

    def _check_dependencies(self) -> None:
        """Check if required libraries are available."""
        try:
            import openpyxl
            self._openpyxl = openpyxl
        except ImportError:
            raise ImportError(
                "openpyxl is required for Excel export. "
                "Install with: pip install openpyxl"
            )

    def export(
        self,
        results: Sequence[Any],
        summary: Optional[Any] = None,
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Export import results to an Excel file.

        Args:
            results: ImportResult objects to export.
            summary: Optional ImportSummary written to a second sheet.
            filepath: Output path. If None, a timestamped file in output_dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ReportExportError: If there is nothing to export or saving fails.
        """
        if not results:
            raise ReportExportError(str(filepath or self.output_dir), "no results to export")

        path = Path(filepath) if filepath else self.output_dir / self.get_default_filename()
        ensure_directory(path.parent)

        rows = [result.to_dict() for result in results]

        try:
            workbook = self._openpyxl.Workbook()
            self._create_results_sheet(workbook, rows)
            if summary is not None:
                self._create_summary_sheet(workbook, summary)
            workbook.save(path)
        except (OSError, ValueError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ReportExportError(str(path), str(e)) from e

        logger.info(f"Import report saved: {path} ({len(rows)} documents)")
        return str(path)

    def _create_results_sheet(self, workbook, rows: List[Dict[str, Any]]) -> None:
        """
        Create the main sheet, one row per document.

        Args:
            workbook: openpyxl Workbook instance.
            rows: Result dictionaries.
        """
        from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
        from openpyxl.utils import get_column_letter

        sheet = workbook.active
        sheet.title = self.sheet_name

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        failed_fill = PatternFill(start_color="F8CBAD", end_color="F8CBAD", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        for col, (header_name, _) in enumerate(self.COLUMNS, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = thin_border

        for row_num, row in enumerate(rows, 2):
            failed = not row.get('success') and not row.get('duplicate')
            for col, (_, key) in enumerate(self.COLUMNS, 1):
                value = row.get(key)
                cell = sheet.cell(row=row_num, column=col, value='' if value is None else value)
                cell.border = thin_border
                if failed:
                    cell.fill = failed_fill

        for col, (header_name, key) in enumerate(self.COLUMNS, 1):
            longest = max([len(header_name)] + [len(str(row.get(key) or '')) for row in rows])
            sheet.column_dimensions[get_column_letter(col)].width = min(longest + 2, 60)

        sheet.freeze_panes = 'A2'

    def _create_summary_sheet(self, workbook, summary) -> None:
        from openpyxl.styles import Font

        sheet = workbook.create_sheet(title="Summary")
        entries = [
            ("Succeeded", summary.succeeded),
            ("Duplicates skipped", summary.duplicates),
            ("Failed", summary.failed),
            ("Time entries created", summary.entries_created),
            ("Total amount", summary.total_amount),
        ]
        for row_num, (label, value) in enumerate(entries, 1):
            sheet.cell(row=row_num, column=1, value=label).font = Font(bold=True)
            sheet.cell(row=row_num, column=2, value=value)

        sheet.column_dimensions['A'].width = 24
        sheet.column_dimensions['B'].width = 16

    def get_default_filename(self) -> str:
        """
        Generate a default filename with timestamp.

        Returns:
            Default filename string.
        """
        pattern = get_config("output.excel.filename_pattern", "import_report_{timestamp}.xlsx")
        return pattern.format(timestamp=generate_timestamp())
