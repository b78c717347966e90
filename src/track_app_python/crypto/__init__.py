"""Cryptographic primitives for the envelope protocol.

- Triple-DES CBC cipher with zero padding and hex transport encoding
- CRC-32 checksum for the legacy pipe-delimited handshakes
"""

from track_app_python.crypto.checksum import (
    CRC32_TABLE,
    FIELD_SEPARATOR,
    checksum_matches,
    compute_checksum,
    crc32,
    join_fields,
)
from track_app_python.crypto.cipher import (
    BLOCK_SIZE,
    IV_SIZE,
    KEY_SIZE,
    TripleDesCodec,
    decrypt_hex,
    encrypt_hex,
    zero_pad,
)

__all__ = [
    "BLOCK_SIZE",
    "CRC32_TABLE",
    "FIELD_SEPARATOR",
    "IV_SIZE",
    "KEY_SIZE",
    "TripleDesCodec",
    "checksum_matches",
    "compute_checksum",
    "crc32",
    "decrypt_hex",
    "encrypt_hex",
    "join_fields",
    "zero_pad",
]
