"""
PDF primitive value decoding for pdf2john.

Only the object syntax needed to read trailer and encryption dictionaries is
supported: numbers, names, strings, references, dictionaries, arrays,
booleans and null. Streams are never decoded.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from pdf2john.errors import DecodeError
from pdf2john.scanner import ObjectReference

WHITESPACE = b"\x00\t\n\x0c\r "
DELIMITERS = b"()<>[]{}/%"
HEX_DIGITS = b"0123456789abcdefABCDEF"

# Literal string escapes other than octal and line continuation
ESCAPES = {
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("("): b"(",
    ord(")"): b")",
    ord("\\"): b"\\",
}

MAX_NESTING = 64

# Numeric tokens longer than this are rejected instead of converted
MAX_NUMBER_LENGTH = 32

_INTEGER = re.compile(rb"[+-]?[0-9]+")
_REAL = re.compile(rb"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)")


@dataclass(frozen=True)
class PdfInteger:
    value: int


@dataclass(frozen=True)
class PdfReal:
    value: float


@dataclass(frozen=True)
class PdfName:
    name: str

    def __str__(self) -> str:
        return f"/{self.name}"


@dataclass(frozen=True)
class PdfLiteralString:
    value: bytes


@dataclass(frozen=True)
class PdfHexString:
    value: bytes


@dataclass(frozen=True)
class PdfReference:
    reference: ObjectReference


@dataclass(frozen=True)
class PdfDictionary:
    entries: Dict[str, "PdfValue"]

    def get(self, key: str) -> Optional["PdfValue"]:
        return self.entries.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self.entries


@dataclass(frozen=True)
class PdfArray:
    items: Tuple["PdfValue", ...]


@dataclass(frozen=True)
class PdfBoolean:
    value: bool


@dataclass(frozen=True)
class PdfNull:
    pass


PdfValue = Union[
    PdfInteger,
    PdfReal,
    PdfName,
    PdfLiteralString,
    PdfHexString,
    PdfReference,
    PdfDictionary,
    PdfArray,
    PdfBoolean,
    PdfNull,
]

PdfString = (PdfLiteralString, PdfHexString)


def decode_value(data: bytes, offset: int = 0, end: Optional[int] = None) -> Tuple[PdfValue, int]:
    """
    Decode exactly one PDF value.

    Args:
        data: Buffer holding the value.
        offset: Position where the value (or whitespace before it) starts.
        end: Exclusive limit of the region to read; defaults to len(data).

    Returns:
        (value, position just after the value).

    Raises:
        DecodeError: On any syntax violation, with the offending offset.
    """
    decoder = _Decoder(data, len(data) if end is None else min(end, len(data)))
    return decoder.value(offset, 0)


class _Decoder:
    """Recursive descent over a bounded region of a buffer."""

    def __init__(self, data: bytes, end: int):
        self.data = data
        self.end = end

    def skip(self, pos: int) -> int:
        """Skip whitespace and comments."""
        data, end = self.data, self.end
        while pos < end:
            c = data[pos]
            if c in WHITESPACE:
                pos += 1
            elif c == 0x25:  # %
                while pos < end and data[pos] not in b"\r\n":
                    pos += 1
            else:
                break
        return pos

    def regular(self, pos: int) -> int:
        """Return the end of the run of regular characters starting at pos."""
        data, end = self.data, self.end
        while pos < end and data[pos] not in WHITESPACE and data[pos] not in DELIMITERS:
            pos += 1
        return pos

    def value(self, pos: int, depth: int) -> Tuple[PdfValue, int]:
        pos = self.skip(pos)
        if pos >= self.end:
            raise DecodeError("Unexpected end of data", pos)
        if depth > MAX_NESTING:
            raise DecodeError("Nesting too deep", pos)

        data = self.data
        c = data[pos]

        if c == 0x2F:  # /
            return self.name(pos)
        if c == 0x28:  # (
            return self.literal_string(pos)
        if c == 0x3C:  # <
            if data[pos + 1:pos + 2] == b"<":
                return self.dictionary(pos, depth)
            return self.hex_string(pos)
        if c == 0x5B:  # [
            return self.array(pos, depth)
        if c in b"+-.0123456789":
            return self.number_or_reference(pos)
        if c in DELIMITERS:
            raise DecodeError(f"Unexpected delimiter {chr(c)!r}", pos)

        token_end = self.regular(pos)
        token = data[pos:token_end]
        if token == b"true":
            return PdfBoolean(True), token_end
        if token == b"false":
            return PdfBoolean(False), token_end
        if token == b"null":
            return PdfNull(), token_end
        raise DecodeError(f"Unknown keyword {token.decode('latin-1')!r}", pos)

    def name(self, pos: int) -> Tuple[PdfName, int]:
        data = self.data
        token_end = self.regular(pos + 1)
        raw = bytearray()
        i = pos + 1
        while i < token_end:
            c = data[i]
            if c == 0x23:  # #
                digits = data[i + 1:i + 3]
                if len(digits) != 2 or i + 3 > token_end or any(d not in HEX_DIGITS for d in digits):
                    raise DecodeError("Invalid #xx escape in name", i)
                raw.append(int(digits, 16))
                i += 3
            else:
                raw.append(c)
                i += 1
        return PdfName(raw.decode("latin-1")), token_end

    def number_or_reference(self, pos: int) -> Tuple[PdfValue, int]:
        data = self.data
        token_end = self.regular(pos)
        token = data[pos:token_end]
        if len(token) > MAX_NUMBER_LENGTH:
            raise DecodeError(f"Invalid number ({len(token)} characters)", pos)
        text = token.decode("latin-1")

        if _REAL.fullmatch(token):
            return PdfReal(float(text)), token_end
        if not _INTEGER.fullmatch(token):
            raise DecodeError(f"Invalid number {text!r}", pos)

        number = int(text)

        if token.isdigit():
            reference = self.reference_tail(token_end, number)
            if reference is not None:
                return reference
        return PdfInteger(number), token_end

    def reference_tail(self, pos: int, number: int) -> Optional[Tuple[PdfReference, int]]:
        """Match `<gen> R` after an object number, without consuming on failure."""
        data = self.data
        gen_start = self.skip(pos)
        gen_end = self.regular(gen_start)
        generation = data[gen_start:gen_end]
        if gen_start == pos or not generation.isdigit() or len(generation) > MAX_NUMBER_LENGTH:
            return None
        r_start = self.skip(gen_end)
        r_end = self.regular(r_start)
        if r_start == gen_end or data[r_start:r_end] != b"R":
            return None
        return PdfReference(ObjectReference(number, int(generation))), r_end

    def literal_string(self, pos: int) -> Tuple[PdfLiteralString, int]:
        data, end = self.data, self.end
        out = bytearray()
        depth = 1
        i = pos + 1

        while i < end:
            c = data[i]
            if c == 0x5C:  # backslash
                i += 1
                if i >= end:
                    raise DecodeError("Dangling escape in literal string", i - 1)
                e = data[i]
                if e in ESCAPES:
                    out += ESCAPES[e]
                    i += 1
                elif 0x30 <= e <= 0x37:
                    j = i
                    while j < end and j < i + 3 and 0x30 <= data[j] <= 0x37:
                        j += 1
                    out.append(int(data[i:j], 8) & 0xFF)
                    i = j
                elif e == 0x0D:
                    i += 2 if data[i + 1:i + 2] == b"\n" else 1
                elif e == 0x0A:
                    i += 1
                else:
                    # Unknown escapes keep the character and drop the backslash
                    out.append(e)
                    i += 1
            elif c == 0x28:
                depth += 1
                out.append(c)
                i += 1
            elif c == 0x29:
                depth -= 1
                if depth == 0:
                    return PdfLiteralString(bytes(out)), i + 1
                out.append(c)
                i += 1
            else:
                out.append(c)
                i += 1

        raise DecodeError("Unterminated literal string", pos)

    def hex_string(self, pos: int) -> Tuple[PdfHexString, int]:
        data = self.data
        close = data.find(b">", pos + 1, self.end)
        if close < 0:
            raise DecodeError("Unterminated hex string", pos)

        digits = bytearray()
        for i in range(pos + 1, close):
            c = data[i]
            if c in HEX_DIGITS:
                digits.append(c)
            elif c not in WHITESPACE:
                raise DecodeError(f"Invalid hex digit {chr(c)!r}", i)
        if len(digits) % 2:
            digits.append(0x30)
        return PdfHexString(bytes.fromhex(digits.decode("ascii"))), close + 1

    def dictionary(self, pos: int, depth: int) -> Tuple[PdfDictionary, int]:
        data = self.data
        entries: Dict[str, PdfValue] = {}
        i = pos + 2

        while True:
            i = self.skip(i)
            if i >= self.end:
                raise DecodeError("Unterminated dictionary", pos)
            if data[i:i + 2] == b">>":
                return PdfDictionary(entries), i + 2
            if data[i] != 0x2F:
                raise DecodeError("Dictionary key is not a name", i)
            key, i = self.name(i)
            value_start = self.skip(i)
            if data[value_start:value_start + 2] == b">>":
                raise DecodeError(f"Missing value for key /{key.name}", value_start)
            value, i = self.value(i, depth + 1)
            entries[key.name] = value

    def array(self, pos: int, depth: int) -> Tuple[PdfArray, int]:
        data = self.data
        items = []
        i = pos + 1

        while True:
            i = self.skip(i)
            if i >= self.end:
                raise DecodeError("Unterminated array", pos)
            if data[i] == 0x5D:  # ]
                return PdfArray(tuple(items)), i + 1
            value, i = self.value(i, depth + 1)
            items.append(value)
