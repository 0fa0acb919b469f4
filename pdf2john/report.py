"""
Output formatting for pdf2john.

Generates hash lines, JSON reports and encryption dictionary dumps from
extraction results.
"""

import json
from datetime import datetime, timezone
from typing import List

from pdf2john.core import ExtractResult
from pdf2john.encryption import EncryptionDictionary
from pdf2john.errors import DecodeError
from pdf2john.values import (
    PdfArray,
    PdfBoolean,
    PdfDictionary,
    PdfHexString,
    PdfInteger,
    PdfLiteralString,
    PdfName,
    PdfNull,
    PdfReal,
    PdfReference,
    PdfValue,
)


def format_hash_line(result: ExtractResult, show_filename: bool = False) -> str:
    """Return the descriptor line of a successful result."""
    if show_filename:
        return f"{result.name}:{result.descriptor}"
    return result.descriptor


def format_error(result: ExtractResult) -> str:
    """Return the one-line diagnostic of a failed result."""
    return f"{result.name}: {result.error.kind}: {result.error}"


def format_json(results: List[ExtractResult]) -> str:
    """
    Format extraction results as JSON.

    Args:
        results: Extraction results in input order.

    Returns:
        JSON string representation.
    """
    output = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "summary": {
            "total": len(results),
            "extracted": sum(1 for r in results if r.ok),
            "errors": sum(1 for r in results if r.errored),
        },
        "files": [],
    }

    for result in results:
        file_report = {
            "path": result.name,
            "status": "ok" if result.ok else "error",
            "exit_code": result.exit_code.value,
        }

        if result.descriptor:
            file_report["hash"] = result.descriptor

        if result.encryption:
            file_report["revision"] = result.encryption.revision

        if result.error:
            file_report["error"] = str(result.error)
            file_report["error_kind"] = result.error.kind
            if isinstance(result.error, DecodeError):
                file_report["offset"] = result.error.offset

        output["files"].append(file_report)

    return json.dumps(output, indent=2)


def format_value(value: PdfValue) -> str:
    """Render a decoded value in PDF-like syntax."""
    if isinstance(value, PdfDictionary):
        inner = " ".join(f"/{k} {format_value(v)}" for k, v in value.entries.items())
        return f"<< {inner} >>"
    if isinstance(value, PdfArray):
        return "[" + " ".join(format_value(v) for v in value.items) + "]"
    if isinstance(value, (PdfLiteralString, PdfHexString)):
        return f"<{value.value.hex()}>"
    if isinstance(value, PdfName):
        return str(value)
    if isinstance(value, PdfReference):
        return str(value.reference)
    if isinstance(value, PdfBoolean):
        return "true" if value.value else "false"
    if isinstance(value, (PdfInteger, PdfReal)):
        return str(value.value)
    if isinstance(value, PdfNull):
        return "null"
    raise TypeError(f"Not a PDF value: {value!r}")


def format_encryption(encryption: EncryptionDictionary) -> str:
    """Dump the decoded encryption dictionary, one key per line."""
    lines = ["Encryption Dictionary:"]
    if encryption.source is not None:
        for key, value in encryption.source.entries.items():
            lines.append(f"/{key}: {format_value(value)}")
    return "\n".join(lines)
