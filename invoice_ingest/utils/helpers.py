"""
Helper Utilities Module.

Small filesystem and formatting helpers shared by the input handler,
the document store and the report exporter.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - generate_timestamp: Generate formatted timestamps
    - sanitize_identifier: Turn an invoice number into a safe file stem
    - sha256_digest: Content hash of a byte string
    - is_within_directory: Guard against paths escaping a base directory
"""

import hashlib
import re
from datetime import datetime
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Raises:
        PermissionError: If directory cannot be created due to permissions.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.

    Example:
        >>> get_file_extension("2025-001_Raupp.PDF")
        ".pdf"
    """
    return Path(filepath).suffix.lower()


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """Generate a formatted timestamp string."""
    return datetime.now().strftime(format_str)


def sanitize_identifier(identifier: str, max_length: int = 100) -> str:
    """
    Sanitize an identifier for use as a file stem.

    Path separators and colons become dashes, ".." sequences are removed
    and anything outside [A-Za-z0-9 ._-] is dropped.

    Example:
        >>> sanitize_identifier("../2025/001")
        "-2025-001"
    """
    safe = identifier.replace("..", "")
    safe = re.sub(r'[/\\:]', '-', safe)
    safe = re.sub(r'[^A-Za-z0-9 ._-]', '', safe).strip(' .')

    if not safe:
        safe = "document"

    return safe[:max_length]


def sha256_digest(data: bytes) -> str:
    """Return the hex SHA-256 digest of a byte string."""
    return hashlib.sha256(data).hexdigest()


def is_within_directory(path: Union[str, Path], base: Union[str, Path]) -> bool:
    """
    Check that a path resolves to a location inside base.

    Args:
        path: Candidate path.
        base: Directory the path must stay inside.

    Returns:
        True if the resolved path is base or one of its descendants.
    """
    resolved = Path(path).resolve()
    resolved_base = Path(base).resolve()
    return resolved == resolved_base or resolved_base in resolved.parents
