"""
Command-line interface for pdf2john.

Handles argument parsing, glob expansion, and runs extraction over each file.
"""

import argparse
import glob
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pdf2john import __version__
from pdf2john.core import ExitCode, extract_file
from pdf2john.report import format_encryption, format_error, format_hash_line, format_json

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pdf2john",
        description="Extract password hashes from encrypted PDFs for John the Ripper.",
        epilog="Exit codes: 0=all hashes extracted, 1=at least one file failed",
    )

    parser.add_argument(
        "pdf_files",
        nargs="+",
        metavar="FILE",
        help="PDF file(s) to extract information from. Supports glob patterns.",
    )

    parser.add_argument(
        "-s",
        "--show-filename",
        action="store_true",
        help="Prefix output with the filename.",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Print the encryption dictionary after each hash.",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output JSON report to stdout.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log scanning and resolution details to stderr.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def expand_globs(patterns: List[str]) -> List[Path]:
    """Expand glob patterns into a list of file paths."""
    files: List[Path] = []
    for pattern in patterns:
        if any(c in pattern for c in ["*", "?", "["]):
            matches = sorted(glob.glob(pattern, recursive=True))
            files.extend(Path(m) for m in matches)
        else:
            files.append(Path(pattern))
    return files


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
    )

    files = expand_globs(args.pdf_files)

    if not files:
        logger.error("Error: No files found matching the provided patterns.")
        return ExitCode.ERROR.value

    results = []
    worst_exit = ExitCode.OK

    # Files are independent: a failure is reported and the batch continues
    for file_path in files:
        result = extract_file(file_path)
        results.append(result)
        if result.exit_code.value > worst_exit.value:
            worst_exit = result.exit_code

        if args.json_output:
            continue

        if result.ok:
            print(format_hash_line(result, args.show_filename))
            if args.debug:
                print(format_encryption(result.encryption))
        else:
            logger.error(format_error(result))

    if args.json_output:
        print(format_json(results))

    return worst_exit.value


if __name__ == "__main__":
    sys.exit(main())
