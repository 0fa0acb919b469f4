"""
Core extraction orchestrator for pdf2john.

Coordinates scanning, encryption dictionary resolution and hash formatting
for one document at a time.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Optional, Union

from pdf2john.encryption import EncryptionDictionary, resolve_encryption
from pdf2john.errors import ExtractionError, FileReadError
from pdf2john.formatter import format_hash
from pdf2john.scanner import scan

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Exit codes for extraction results."""
    OK = 0        # Hash extracted
    ERROR = 1     # Nothing extracted (not encrypted, malformed, unreadable)


@dataclass
class ExtractResult:
    """Result of extracting the hash of one document."""
    name: str
    exit_code: ExitCode
    descriptor: Optional[str] = None
    error: Optional[ExtractionError] = None
    encryption: Optional[EncryptionDictionary] = None

    @property
    def ok(self) -> bool:
        """Return True if a descriptor was produced."""
        return self.exit_code == ExitCode.OK

    @property
    def errored(self) -> bool:
        """Return True if an error occurred."""
        return self.exit_code == ExitCode.ERROR


def extract_hash(data: bytes, name: str = "<bytes>") -> ExtractResult:
    """
    Extract the `$pdf$` hash descriptor from the contents of a PDF.

    Args:
        data: Full file contents.
        name: File identity attached to the result.

    Returns:
        ExtractResult holding either the descriptor or the error that
        stopped extraction. A partial descriptor is never returned.
    """
    try:
        index = scan(data)
        encryption, document_id = resolve_encryption(data, index)
        descriptor = format_hash(encryption, document_id)
    except ExtractionError as e:
        return ExtractResult(name=name, exit_code=ExitCode.ERROR, error=e)
    except Exception as e:
        logger.debug("unexpected error in %s", name, exc_info=True)
        error = ExtractionError(f"Unexpected error reading PDF: {e}")
        return ExtractResult(name=name, exit_code=ExitCode.ERROR, error=error)

    return ExtractResult(
        name=name,
        exit_code=ExitCode.OK,
        descriptor=descriptor,
        encryption=encryption,
    )


def extract_file(path: Union[str, Path]) -> ExtractResult:
    """Read a file from disk and extract its hash descriptor."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        error = FileReadError(f"I/O error: {e.strerror or e}", cause=e)
        return ExtractResult(name=str(path), exit_code=ExitCode.ERROR, error=error)

    return extract_hash(data, name=str(path))
