import pytest

from pdf2john.errors import DecodeError
from pdf2john.scanner import ObjectReference
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
    decode_value,
)


def decode(data: bytes):
    value, _ = decode_value(data)
    return value


# --- numbers and references ---

def test_integers():
    assert decode(b"42") == PdfInteger(42)
    assert decode(b"-44") == PdfInteger(-44)
    assert decode(b"+7") == PdfInteger(7)


def test_real():
    assert decode(b"-1.5") == PdfReal(-1.5)
    assert decode(b".25") == PdfReal(0.25)


def test_invalid_number():
    with pytest.raises(DecodeError) as exc:
        decode(b"  1-2")
    assert exc.value.offset == 2


def test_reference():
    value, end = decode_value(b"5 0 R /Next")
    assert value == PdfReference(ObjectReference(5, 0))
    assert end == 5


def test_integer_not_followed_by_reference():
    value, end = decode_value(b"5 0 obj")
    assert value == PdfInteger(5)
    assert end == 1


def test_negative_integer_is_never_a_reference():
    value, end = decode_value(b"-5 0 R")
    assert value == PdfInteger(-5)
    assert end == 2


# --- names ---

def test_name():
    value, end = decode_value(b"/Encrypt 5 0 R")
    assert value == PdfName("Encrypt")
    assert end == 8


def test_name_hex_escape():
    assert decode(b"/A#20B") == PdfName("A B")


def test_name_bad_escape():
    with pytest.raises(DecodeError) as exc:
        decode(b"/A#zz")
    assert exc.value.offset == 2


# --- literal strings ---

def test_literal_octal_and_backslash():
    assert decode(rb"(\050\051\\)") == PdfLiteralString(b"()\\")


def test_literal_escapes():
    assert decode(rb"(a\nb\rc\td\be\ff\(\))") == PdfLiteralString(b"a\nb\rc\td\be\ff()")


def test_literal_short_octal():
    assert decode(rb"(\0)") == PdfLiteralString(b"\x00")
    assert decode(rb"(\1234)") == PdfLiteralString(b"S4")


def test_literal_balanced_parentheses():
    value, end = decode_value(b"(a(b)c) rest")
    assert value == PdfLiteralString(b"a(b)c")
    assert end == 7


def test_literal_line_continuation():
    assert decode(b"(ab\\\r\ncd)") == PdfLiteralString(b"abcd")
    assert decode(b"(ab\\\ncd)") == PdfLiteralString(b"abcd")


def test_literal_unknown_escape_drops_backslash():
    assert decode(rb"(\q)") == PdfLiteralString(b"q")


def test_literal_keeps_binary_bytes():
    assert decode(b"(\x00\xff\r)") == PdfLiteralString(b"\x00\xff\r")


def test_literal_unterminated():
    with pytest.raises(DecodeError) as exc:
        decode(b"(abc(def)")
    assert exc.value.offset == 0


def test_literal_dangling_escape():
    with pytest.raises(DecodeError):
        decode(b"(abc\\")


# --- hex strings ---

def test_hex_string():
    assert decode(b"<41 42>") == PdfHexString(b"AB")
    assert decode(b"<6a6B>") == PdfHexString(b"jk")


def test_hex_odd_nibble_padded():
    assert decode(b"<414>") == PdfHexString(b"A@")


def test_hex_empty():
    assert decode(b"<>") == PdfHexString(b"")


def test_hex_invalid_digit():
    with pytest.raises(DecodeError) as exc:
        decode(b"<4G>")
    assert exc.value.offset == 2


def test_hex_unterminated():
    with pytest.raises(DecodeError):
        decode(b"<4142")


# --- containers and keywords ---

def test_dictionary():
    value = decode(b"<< /V 2 /Sub << /A [1 (x) <00>] >> /Ref 3 0 R >>")
    assert isinstance(value, PdfDictionary)
    assert value.get("V") == PdfInteger(2)
    assert value.get("Ref") == PdfReference(ObjectReference(3, 0))
    sub = value.get("Sub")
    assert sub.get("A") == PdfArray(
        (PdfInteger(1), PdfLiteralString(b"x"), PdfHexString(b"\x00"))
    )


def test_dictionary_without_spaces():
    value = decode(b"<</R 4/O<00>/P -1>>")
    assert value.entries == {
        "R": PdfInteger(4),
        "O": PdfHexString(b"\x00"),
        "P": PdfInteger(-1),
    }


def test_array_of_references():
    value = decode(b"[1 0 R 2 0 R 3]")
    assert value.items == (
        PdfReference(ObjectReference(1, 0)),
        PdfReference(ObjectReference(2, 0)),
        PdfInteger(3),
    )


def test_keywords():
    assert decode(b"true") == PdfBoolean(True)
    assert decode(b"false") == PdfBoolean(False)
    assert decode(b"null") == PdfNull()


def test_comments_are_skipped():
    value = decode(b"% header\n<< /A % inline\n 1 >>")
    assert value.get("A") == PdfInteger(1)


def test_offset_and_end_arguments():
    data = b"garbage << /A 1 >> more"
    value, end = decode_value(data, 7)
    assert value.get("A") == PdfInteger(1)
    assert data[end:] == b" more"
    with pytest.raises(DecodeError):
        decode_value(data, 7, 14)


def test_unterminated_dictionary():
    with pytest.raises(DecodeError) as exc:
        decode(b"<< /A 1")
    assert exc.value.offset == 0


def test_dictionary_missing_value():
    with pytest.raises(DecodeError):
        decode(b"<< /A >>")


def test_dictionary_key_not_name():
    with pytest.raises(DecodeError) as exc:
        decode(b"<< 1 2 >>")
    assert exc.value.offset == 3


def test_unbalanced_closing_delimiter():
    with pytest.raises(DecodeError) as exc:
        decode(b"   ]")
    assert exc.value.offset == 3


def test_unterminated_array():
    with pytest.raises(DecodeError):
        decode(b"[1 2")


def test_unknown_keyword():
    with pytest.raises(DecodeError):
        decode(b"obj")


def test_empty_input():
    with pytest.raises(DecodeError):
        decode(b"  ")


def test_nesting_limit():
    with pytest.raises(DecodeError):
        decode(b"[" * 200 + b"]" * 200)


def test_overlong_number():
    with pytest.raises(DecodeError) as exc:
        decode(b" " + b"9" * 5000)
    assert exc.value.offset == 1


def test_overlong_generation_is_not_a_reference():
    value, end = decode_value(b"5 " + b"0" * 5000 + b" R")
    assert value == PdfInteger(5)
    assert end == 1
