"""
Utility Module for the Invoice Ingestion Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File operations
"""

from .logger import setup_logger, setup_logger_from_config, get_logger
from .helpers import (
    ensure_directory,
    get_file_extension,
    generate_timestamp,
    sanitize_identifier,
    sha256_digest,
    is_within_directory,
)

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp',
    'sanitize_identifier',
    'sha256_digest',
    'is_within_directory',
]
