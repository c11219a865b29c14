#!/usr/bin/env python3
"""
Invoice Ingestion Engine - Main Entry Point.

This is the main entry point for importing locum invoices into the
administration database. It provides both a command-line interface and
programmatic access to the import pipeline.

Usage:
    Command Line:
        python main.py --input factuur_2025-014.pdf
        python main.py --input ./facturen/ --report outputs/import.xlsx

    Python:
        from main import run_import
        results = run_import("facturen/")

Author: Administration Tooling Team
Version: 1.0.0
"""

import argparse
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager
from invoice_ingest.utils.logger import setup_logger_from_config, get_logger
from invoice_ingest.utils.exceptions import InvoiceIngestError


def _reference_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list; defaults to sys.argv.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Ingestion Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Import a single invoice:
        python main.py --input factuur_2025-014.pdf

    Import a directory and write a report:
        python main.py --input ./facturen/ --report

    Re-run an old batch against its own date window:
        python main.py --input ./facturen/2023/ --reference-date 2023-12-31
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Invoice file (.pdf, .txt) or directory of invoices"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--database", "-d",
        type=str,
        default=None,
        help="SQLite database file (default: paths.database)"
    )

    parser.add_argument(
        "--documents-dir",
        type=str,
        default=None,
        help="Directory for stored invoice copies (default: paths.documents_dir)"
    )

    parser.add_argument(
        "--report", "-r",
        type=str,
        nargs="?",
        const="",
        default=None,
        help="Write an Excel import report, optionally to the given path"
    )

    parser.add_argument(
        "--reference-date",
        type=_reference_date,
        default=None,
        help="Anchor of the date plausibility window (default: today)"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    level = None
    if args.debug:
        level = "DEBUG"
    elif args.quiet:
        level = "WARNING"
    logger = setup_logger_from_config(level)

    logger.info("=" * 60)
    logger.info("INVOICE INGESTION ENGINE")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")

    return config


def run_import(
    input_path: str,
    database_path: Optional[str] = None,
    documents_dir: Optional[str] = None,
    reference_date: Optional[date] = None,
    report_path: Optional[str] = None
):
    """
    Run the import pipeline over a file or directory.

    This is the main programmatic entry point.

    Args:
        input_path: Invoice file or directory.
        database_path: SQLite database file; defaults to configuration.
        documents_dir: Document store directory; defaults to configuration.
        reference_date: Anchor of the date plausibility window.
        report_path: Write an Excel report when not None; "" picks a
            timestamped name in the output directory.

    Returns:
        List of ImportResult.

    Example:
        >>> results = run_import("facturen/", reference_date=date(2025, 6, 30))
        >>> [r.invoice_number for r in results if r.success]
        ['2025-014', '2025-015']
    """
    from invoice_ingest.output_handler import DatabaseHandler, DocumentStore, ReportExporter
    from invoice_ingest.pipeline import ImportOrchestrator, summarize

    logger = get_logger(__name__)

    orchestrator = ImportOrchestrator(
        database=DatabaseHandler(database_path),
        document_store=DocumentStore(documents_dir),
        reference_date=reference_date,
    )
    results = orchestrator.import_path(input_path)
    summary = summarize(results)

    if report_path is not None:
        if results:
            ReportExporter().export(results, summary, filepath=report_path or None)
        else:
            logger.warning("Nothing imported; no report written")

    return results


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code: 0 when no document failed, 1 otherwise, 130 when
        interrupted.
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        from invoice_ingest.pipeline import summarize

        results = run_import(
            input_path=args.input,
            database_path=args.database,
            documents_dir=args.documents_dir,
            reference_date=args.reference_date,
            report_path=args.report,
        )
        summary = summarize(results)

        logger.info("=" * 60)
        logger.info(f"Import complete. {summary}")
        logger.info("=" * 60)

        return 1 if summary.failed else 0

    except InvoiceIngestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nImport interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
