"""
Raw byte scanning for pdf2john.

Incrementally updated PDFs carry several xref sections and trailers, and
damaged files often have a cross-reference table that points nowhere. The
scanner therefore ignores xref offsets entirely and searches the whole buffer
for object definitions and trailer dictionaries.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional

from pdf2john.errors import MalformedDocument

logger = logging.getLogger(__name__)

# How far into the file the %PDF- header may start (Acrobat tolerates junk
# in front of it).
HEADER_SEARCH_LIMIT = 1024

# Object numbers fit in 10 digits and generations in 5; longer digit runs
# are not object headers.
_OBJ_HEADER = re.compile(rb"(?<![0-9])(\d{1,10})[\x00\t\n\x0c\r ]+(\d{1,5})[\x00\t\n\x0c\r ]+obj(?![A-Za-z0-9])")
_ENDOBJ = re.compile(rb"endobj(?![A-Za-z0-9])")
_TRAILER = re.compile(rb"(?<![A-Za-z0-9])trailer(?![A-Za-z0-9])")
_STARTXREF = re.compile(rb"(?<![A-Za-z0-9])startxref(?![A-Za-z0-9])")
_XREF_TYPE = re.compile(rb"/Type[\x00\t\n\x0c\r ]*/XRef(?![A-Za-z0-9])")
_STREAM = re.compile(rb"(?<![A-Za-z0-9])stream(?![A-Za-z0-9])")


class ObjectReference(NamedTuple):
    """Indirect object identifier."""
    number: int
    generation: int

    def __str__(self) -> str:
        return f"{self.number} {self.generation} R"


@dataclass(frozen=True)
class ScannedObject:
    """An indirect object definition and the byte span of its body."""
    reference: ObjectReference
    start: int
    end: int


@dataclass(frozen=True)
class TrailerSpan:
    """Byte span of a trailer (or cross-reference stream) dictionary."""
    start: int
    end: int
    xref_stream: bool = False


@dataclass
class ScanIndex:
    """Everything the scanner found, in document order."""
    occurrences: List[ScannedObject] = field(default_factory=list)
    trailers: List[TrailerSpan] = field(default_factory=list)
    objects: Dict[ObjectReference, ScannedObject] = field(default_factory=dict)

    def lookup(self, reference: ObjectReference) -> Optional[ScannedObject]:
        """Return the latest definition of an object, if any."""
        return self.objects.get(reference)


def find_dictionary(data: bytes, pos: int, end: int) -> int:
    """Return the offset of `<<` after whitespace and comments, or -1."""
    while pos < end:
        c = data[pos]
        if c in b"\x00\t\n\x0c\r ":
            pos += 1
        elif c == 0x25:  # %
            while pos < end and data[pos] not in b"\r\n":
                pos += 1
        else:
            break
    return pos if data[pos:pos + 2] == b"<<" else -1


def check_header(data: bytes) -> None:
    """Raise MalformedDocument unless the buffer starts like a PDF."""
    if not data:
        raise MalformedDocument("Empty file")
    if data.find(b"%PDF-", 0, HEADER_SEARCH_LIMIT) < 0:
        raise MalformedDocument("Not a PDF file (no %PDF- header)")


def scan_objects(data: bytes) -> List[ScannedObject]:
    """Find every `n g obj ... endobj` definition in the buffer."""
    headers = list(_OBJ_HEADER.finditer(data))
    found: List[ScannedObject] = []

    for i, match in enumerate(headers):
        start = match.end()
        limit = headers[i + 1].start() if i + 1 < len(headers) else len(data)
        end_match = _ENDOBJ.search(data, start, limit)
        # A missing endobj is common in truncated files; the body then runs
        # up to the next object header.
        end = end_match.start() if end_match else limit
        reference = ObjectReference(int(match.group(1)), int(match.group(2)))
        found.append(ScannedObject(reference, start, end))

    return found


def scan_trailers(data: bytes) -> List[TrailerSpan]:
    """Find every `trailer << ... >>` dictionary in the buffer."""
    keywords = list(_TRAILER.finditer(data))
    spans: List[TrailerSpan] = []

    for i, match in enumerate(keywords):
        limit = keywords[i + 1].start() if i + 1 < len(keywords) else len(data)
        start = find_dictionary(data, match.end(), limit)
        if start < 0:
            logger.debug("trailer keyword at %d is not followed by a dictionary", match.start())
            continue
        startxref = _STARTXREF.search(data, start, limit)
        end = startxref.start() if startxref else limit
        spans.append(TrailerSpan(start, end))

    return spans


def scan_xref_streams(data: bytes, occurrences: List[ScannedObject]) -> List[TrailerSpan]:
    """Find cross-reference stream dictionaries, which double as trailers."""
    spans: List[TrailerSpan] = []

    for obj in occurrences:
        start = find_dictionary(data, obj.start, obj.end)
        if start < 0:
            continue
        stream = _STREAM.search(data, start, obj.end)
        end = stream.start() if stream else obj.end
        if _XREF_TYPE.search(data, start, end):
            spans.append(TrailerSpan(start, end, xref_stream=True))

    return spans


def scan(data: bytes) -> ScanIndex:
    """
    Index the objects and trailers of a PDF buffer.

    Args:
        data: Full file contents.

    Returns:
        ScanIndex with all object occurrences, a lookup map where later
        definitions win, and trailer spans sorted by file offset.

    Raises:
        MalformedDocument: If the buffer is not a PDF or holds no trailer
            and no cross-reference stream.
    """
    check_header(data)

    index = ScanIndex()
    index.occurrences = scan_objects(data)
    for obj in index.occurrences:
        index.objects[obj.reference] = obj

    trailers = scan_trailers(data)
    trailers.extend(scan_xref_streams(data, index.occurrences))
    trailers.sort(key=lambda span: span.start)
    index.trailers = trailers

    logger.debug(
        "scanned %d object definitions (%d distinct), %d trailer candidates",
        len(index.occurrences),
        len(index.objects),
        len(index.trailers),
    )

    if not index.trailers:
        raise MalformedDocument("No trailer or cross-reference stream found")

    return index
