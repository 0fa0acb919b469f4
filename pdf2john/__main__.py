"""
Entry point for running pdf2john as a module.

Usage:
    python -m pdf2john [options] file.pdf
"""

import sys

from pdf2john.cli import main

if __name__ == "__main__":
    sys.exit(main())
