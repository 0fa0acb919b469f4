"""
Error types for pdf2john.

Every failure of the extraction pipeline is an ExtractionError subclass, so a
caller handling one file at a time can catch the base class and move on.
"""

from typing import Optional


class ExtractionError(Exception):
    """Raised when no hash descriptor can be produced for a document."""

    @property
    def kind(self) -> str:
        """Short error name used in diagnostics."""
        return type(self).__name__


class NotEncrypted(ExtractionError):
    """The trailer has no /Encrypt entry."""

    def __init__(self, message: str = "File is not encrypted"):
        super().__init__(message)


class MalformedDocument(ExtractionError):
    """The buffer is not a PDF or has no usable trailer."""
    pass


class DecodeError(ExtractionError):
    """PDF value syntax violated at a byte offset."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


class InvalidEncryptionDictionary(ExtractionError):
    """A required security handler field is missing or mis-sized."""
    pass


class UnsupportedRevision(ExtractionError):
    """The /R value has no descriptor layout."""

    def __init__(self, revision: int):
        super().__init__(f"Unsupported security handler revision: {revision}")
        self.revision = revision


class FileReadError(ExtractionError):
    """The file could not be read from disk."""

    def __init__(self, message: str, cause: Optional[OSError] = None):
        super().__init__(message)
        self.cause = cause
