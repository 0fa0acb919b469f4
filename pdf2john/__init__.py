"""
pdf2john: extract password hashes from encrypted PDF documents.

Finds the standard security handler parameters in a PDF's trailer and
encryption dictionary and writes them as a `$pdf$` descriptor line for
John the Ripper or hashcat.
"""

__version__ = "0.1.0"
__author__ = "pdf2john contributors"

from pdf2john.core import extract_file, extract_hash, ExtractResult, ExitCode

__all__ = ["extract_file", "extract_hash", "ExtractResult", "ExitCode", "__version__"]
