"""
Standard security handler lookup for pdf2john.

Follows the latest trailer's /Encrypt entry to the encryption dictionary and
pulls out the fields a password cracker needs, plus the first /ID string.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pdf2john.errors import (
    DecodeError,
    InvalidEncryptionDictionary,
    MalformedDocument,
    NotEncrypted,
    UnsupportedRevision,
)
from pdf2john.scanner import ScanIndex, TrailerSpan
from pdf2john.values import (
    PdfArray,
    PdfBoolean,
    PdfDictionary,
    PdfInteger,
    PdfName,
    PdfNull,
    PdfReference,
    PdfString,
    PdfValue,
    decode_value,
)

logger = logging.getLogger(__name__)


class SecurityRevision:
    """Standard security handler revisions and the size of their /O and /U
    entries.

    Revision 5 extended /O and /U to 48 bytes: a 32 byte verification hash,
    an 8 byte validation salt and an 8 byte key salt. /OE and /UE only
    exist from revision 5 on and are always 32 bytes.
    """

    password_lengths = {
        2: 32,  # RC4 40-bit
        3: 32,  # RC4 up to 128-bit
        4: 32,  # RC4 or AES-128 crypt filters
        5: 48,  # AES-256, Adobe extension level 3
        6: 48,  # AES-256, PDF 2.0
    }
    seed_length = 32

    @classmethod
    def is_supported(cls, revision: int) -> bool:
        return revision in cls.password_lengths

    @classmethod
    def has_seeds(cls, revision: int) -> bool:
        return revision >= 5

    @classmethod
    def password_length(cls, revision: int) -> int:
        if not cls.is_supported(revision):
            raise UnsupportedRevision(revision)
        return cls.password_lengths[revision]


@dataclass(frozen=True)
class EncryptionDictionary:
    """Resolved standard security handler parameters."""
    algorithm: int  # /V
    revision: int  # /R
    length: int  # /Length, in bits
    permissions: int  # /P, signed 32-bit
    encrypt_metadata: bool
    owner_password: bytes  # /O
    user_password: bytes  # /U
    owner_encryption_seed: Optional[bytes] = None  # /OE
    user_encryption_seed: Optional[bytes] = None  # /UE
    source: Optional[PdfDictionary] = None


def check_encryption(encryption: EncryptionDictionary) -> None:
    """
    Verify revision and string sizes of an EncryptionDictionary.

    Raises:
        UnsupportedRevision: If /R has no descriptor layout.
        InvalidEncryptionDictionary: If a password string has the wrong size
            or the /OE and /UE seeds required by revisions 5 and 6 are missing.
    """
    revision = encryption.revision
    expected = SecurityRevision.password_length(revision)

    for key, data in (("/O", encryption.owner_password), ("/U", encryption.user_password)):
        if len(data) != expected:
            raise InvalidEncryptionDictionary(
                f"{key} must be {expected} bytes for revision {revision}, got {len(data)}"
            )

    if SecurityRevision.has_seeds(revision):
        seeds = (("/OE", encryption.owner_encryption_seed), ("/UE", encryption.user_encryption_seed))
        for key, data in seeds:
            if data is None:
                raise InvalidEncryptionDictionary(f"Missing {key} for revision {revision}")
            if len(data) != SecurityRevision.seed_length:
                raise InvalidEncryptionDictionary(
                    f"{key} must be {SecurityRevision.seed_length} bytes, got {len(data)}"
                )


def to_signed32(value: int) -> int:
    """Reinterpret an integer as a signed 32-bit value."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def decode_trailer(data: bytes, span: TrailerSpan) -> PdfDictionary:
    value, _ = decode_value(data, span.start, span.end)
    if not isinstance(value, PdfDictionary):
        raise DecodeError("Trailer is not a dictionary", span.start)
    return value


def select_trailer(data: bytes, index: ScanIndex) -> PdfDictionary:
    """
    Pick the authoritative trailer dictionary.

    Incremental updates append, so the trailer written last is the one that
    appears latest in the file. The /Size-only trailer closing a linearized
    file carries neither /Root nor /Encrypt; such trailers are passed over in
    favor of the one before them.

    Raises:
        MalformedDocument: If the index holds no trailer.
    """
    if not index.trailers:
        raise MalformedDocument("No trailer or cross-reference stream found")

    latest = None
    for span in reversed(index.trailers):
        trailer = decode_trailer(data, span)
        if latest is None:
            latest = (span, trailer)
        if "Root" in trailer or "Encrypt" in trailer:
            logger.debug("using trailer at offset %d (xref stream: %s)", span.start, span.xref_stream)
            return trailer

    span, trailer = latest
    logger.debug("no trailer has /Root or /Encrypt, using latest at offset %d", span.start)
    return trailer


class _Resolver:
    """Resolves indirect values through a scan index."""

    # Guards against reference cycles such as `1 0 obj 1 0 R endobj`
    max_hops = 32

    def __init__(self, data: bytes, index: ScanIndex):
        self.data = data
        self.index = index

    def resolve(self, value: Optional[PdfValue]) -> Optional[PdfValue]:
        """Follow references; null, direct or referenced, reads as absent."""
        hops = 0
        while isinstance(value, PdfReference):
            if hops >= self.max_hops:
                raise MalformedDocument(f"Reference chain too long at {value.reference}")
            obj = self.index.lookup(value.reference)
            if obj is None:
                raise MalformedDocument(f"Object {value.reference} not found")
            value, _ = decode_value(self.data, obj.start, obj.end)
            hops += 1
        if isinstance(value, PdfNull):
            return None
        return value

    def integer(self, entries: PdfDictionary, key: str, default: Optional[int] = None) -> int:
        value = self.resolve(entries.get(key))
        if value is None:
            if default is None:
                raise InvalidEncryptionDictionary(f"Missing field: /{key}")
            return default
        if not isinstance(value, PdfInteger):
            raise InvalidEncryptionDictionary(f"Invalid field: /{key} is not an integer")
        return value.value

    def boolean(self, entries: PdfDictionary, key: str, default: bool) -> bool:
        value = self.resolve(entries.get(key))
        if value is None:
            return default
        if not isinstance(value, PdfBoolean):
            raise InvalidEncryptionDictionary(f"Invalid field: /{key} is not a boolean")
        return value.value

    def string(self, entries: PdfDictionary, key: str, size: int) -> bytes:
        """Read a byte string, truncated to size; shorter strings are invalid."""
        value = self.resolve(entries.get(key))
        if value is None:
            raise InvalidEncryptionDictionary(f"Missing field: /{key}")
        if not isinstance(value, PdfString):
            raise InvalidEncryptionDictionary(f"Invalid field: /{key} is not a string")
        if len(value.value) < size:
            raise InvalidEncryptionDictionary(
                f"Invalid field: /{key} must be {size} bytes, got {len(value.value)}"
            )
        if len(value.value) > size:
            logger.debug("truncating /%s from %d to %d bytes", key, len(value.value), size)
        return value.value[:size]


def read_document_id(resolver: _Resolver, trailer: PdfDictionary) -> bytes:
    """Return the first /ID string, or b"" when the trailer has no /ID."""
    ids = resolver.resolve(trailer.get("ID"))
    if ids is None:
        logger.debug("trailer has no /ID, using an empty document id")
        return b""
    if not isinstance(ids, PdfArray) or not ids.items:
        raise MalformedDocument("Invalid /ID: expected a non-empty array")
    first = resolver.resolve(ids.items[0])
    if not isinstance(first, PdfString):
        raise MalformedDocument("Invalid /ID: first element is not a string")
    return first.value


def read_encryption_dictionary(resolver: _Resolver, entries: PdfDictionary) -> EncryptionDictionary:
    """Extract and validate standard security handler fields."""
    handler = resolver.resolve(entries.get("Filter"))
    if handler is not None and handler != PdfName("Standard"):
        raise InvalidEncryptionDictionary(f"Unsupported security handler: {handler}")

    algorithm = resolver.integer(entries, "V")
    revision = resolver.integer(entries, "R")
    if not SecurityRevision.is_supported(revision):
        raise UnsupportedRevision(revision)

    length = resolver.integer(entries, "Length", default=40)
    permissions = to_signed32(resolver.integer(entries, "P"))
    encrypt_metadata = resolver.boolean(entries, "EncryptMetadata", default=True)

    size = SecurityRevision.password_length(revision)
    owner = resolver.string(entries, "O", size)
    user = resolver.string(entries, "U", size)

    owner_seed = user_seed = None
    if SecurityRevision.has_seeds(revision):
        owner_seed = resolver.string(entries, "OE", SecurityRevision.seed_length)
        user_seed = resolver.string(entries, "UE", SecurityRevision.seed_length)

    encryption = EncryptionDictionary(
        algorithm=algorithm,
        revision=revision,
        length=length,
        permissions=permissions,
        encrypt_metadata=encrypt_metadata,
        owner_password=owner,
        user_password=user,
        owner_encryption_seed=owner_seed,
        user_encryption_seed=user_seed,
        source=entries,
    )
    check_encryption(encryption)
    return encryption


def resolve_encryption(data: bytes, index: ScanIndex) -> Tuple[EncryptionDictionary, bytes]:
    """
    Resolve the encryption dictionary and document id of a scanned PDF.

    Args:
        data: Full file contents.
        index: Result of scanner.scan(data).

    Returns:
        (EncryptionDictionary, document id bytes).

    Raises:
        NotEncrypted: If the chosen trailer has no /Encrypt.
        MalformedDocument: If /Encrypt points at a missing object or /ID is
            malformed.
        InvalidEncryptionDictionary: If a required field is missing,
            mistyped or too short.
        UnsupportedRevision: If /R is outside 2..6.
        DecodeError: If a dictionary cannot be decoded.
    """
    trailer = select_trailer(data, index)
    resolver = _Resolver(data, index)

    encrypt = trailer.get("Encrypt")
    if isinstance(encrypt, PdfReference):
        logger.debug("encryption dictionary is object %s", encrypt.reference)

    entries = resolver.resolve(encrypt)
    if entries is None:
        raise NotEncrypted()
    if not isinstance(entries, PdfDictionary):
        raise InvalidEncryptionDictionary("/Encrypt is not a dictionary")

    encryption = read_encryption_dictionary(resolver, entries)
    document_id = read_document_id(resolver, trailer)
    return encryption, document_id
