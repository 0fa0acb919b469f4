"""
Hash descriptor formatting for pdf2john.

The `$pdf$` layout is the one read by John the Ripper's and hashcat's PDF
formats; field order and lowercase hex must not change.
"""

from typing import List

from pdf2john.encryption import EncryptionDictionary, SecurityRevision, check_encryption

HASH_PREFIX = "$pdf$"


def _field(data: bytes) -> List[str]:
    """Length-prefixed hex field."""
    return [str(len(data)), data.hex()]


def format_hash(encryption: EncryptionDictionary, document_id: bytes) -> str:
    """
    Build the `$pdf$` descriptor for a resolved encryption dictionary.

    Args:
        encryption: Resolved security handler parameters.
        document_id: First /ID string, possibly empty.

    Returns:
        `$pdf$V*R*Length*P*EncryptMetadata*id_len*id*u_len*u*o_len*o`, with
        `*oe_len*oe*ue_len*ue` appended for revisions 5 and 6.

    Raises:
        UnsupportedRevision: If the revision has no descriptor layout.
        InvalidEncryptionDictionary: If a field has the wrong size or the
            revision 5/6 seeds are missing.
    """
    check_encryption(encryption)

    fields = [
        f"{HASH_PREFIX}{encryption.algorithm}",
        str(encryption.revision),
        str(encryption.length),
        str(encryption.permissions),
        "1" if encryption.encrypt_metadata else "0",
    ]
    fields += _field(document_id)
    fields += _field(encryption.user_password)
    fields += _field(encryption.owner_password)

    if SecurityRevision.has_seeds(encryption.revision):
        fields += _field(encryption.owner_encryption_seed)
        fields += _field(encryption.user_encryption_seed)

    return "*".join(fields)
