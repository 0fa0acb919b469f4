"""Builders for small synthetic PDF buffers."""

from typing import Dict, Optional

OWNER = bytes(range(0x00, 0x20))
USER = bytes(range(0x20, 0x40))
OWNER_48 = bytes(range(0x40, 0x70))
USER_48 = bytes(range(0x70, 0xA0))
OWNER_SEED = bytes(range(0xA0, 0xC0))
USER_SEED = bytes(range(0xC0, 0xE0))


def hexstr(data: bytes) -> bytes:
    return b"<" + data.hex().upper().encode("ascii") + b">"


def encrypt_dict(
    v: int = 2,
    r: int = 3,
    length: Optional[int] = 128,
    p: int = -44,
    owner: bytes = OWNER,
    user: bytes = USER,
    extra: bytes = b"",
) -> bytes:
    parts = [b"<< /Filter /Standard", b"/V %d" % v, b"/R %d" % r]
    if length is not None:
        parts.append(b"/Length %d" % length)
    parts.append(b"/P %d" % p)
    parts.append(b"/O " + hexstr(owner))
    parts.append(b"/U " + hexstr(user))
    if extra:
        parts.append(extra)
    parts.append(b">>")
    return b" ".join(parts)


def section(objects: Dict[int, bytes], trailer: Optional[bytes]) -> bytes:
    """Object definitions followed by an xref stub and a trailer."""
    out = b""
    for number, body in objects.items():
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    out += b"xref\n0 1\n0000000000 65535 f \n"
    if trailer is not None:
        out += b"trailer\n" + trailer + b"\n"
    out += b"startxref\n0\n%%EOF\n"
    return out


def build_pdf(objects: Dict[int, bytes], trailer: Optional[bytes], *updates: bytes) -> bytes:
    """A one-section PDF, optionally followed by incremental update sections."""
    data = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n"
    data += b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    data += b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\n"
    data += section(objects, trailer)
    for update in updates:
        data += update
    return data


def encrypted_pdf(encrypt: bytes = None, doc_id: bytes = b"<ABCD>") -> bytes:
    """PDF whose trailer points /Encrypt at object 5."""
    if encrypt is None:
        encrypt = encrypt_dict()
    trailer = b"<< /Size 6 /Root 1 0 R /Encrypt 5 0 R"
    if doc_id:
        trailer += b" /ID [" + doc_id + b" " + doc_id + b"]"
    trailer += b" >>"
    return build_pdf({5: encrypt}, trailer)
