"""CRC-32 checksum for the legacy pipe-delimited handshakes.

Reflected CRC-32 (polynomial 0xEDB88320, seed 0xFFFFFFFF, inverted
output), table driven so the result matches the table implementation used
by the deployed counterpart byte for byte.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

POLYNOMIAL = 0xEDB88320
SEED = 0xFFFFFFFF
FIELD_SEPARATOR = "|"


def _build_table(polynomial: int = POLYNOMIAL) -> tuple[int, ...]:
    table = []
    for value in range(256):
        entry = value
        for _ in range(8):
            if entry & 1:
                entry = (entry >> 1) ^ polynomial
            else:
                entry >>= 1
        table.append(entry)
    return tuple(table)


CRC32_TABLE = _build_table()


def crc32(data: bytes, seed: int = SEED) -> int:
    """Compute the CRC-32 of raw bytes as an unsigned 32-bit integer."""
    crc = seed
    for byte in data:
        crc = (crc >> 8) ^ CRC32_TABLE[(crc ^ byte) & 0xFF]
    return crc ^ 0xFFFFFFFF


def compute_checksum(text: str) -> str:
    """Compute the checksum of a string, rendered as a decimal string.

    Example:
        >>> compute_checksum("123456789")
        '3421780262'
    """
    return str(crc32(text.encode("utf-8")))


def join_fields(fields: Iterable[str], separator: str = FIELD_SEPARATOR) -> str:
    """Join payload fields with the protocol separator."""
    return separator.join(fields)


def checksum_matches(text: str, supplied: str) -> bool:
    """Check a supplied decimal checksum against the computed one."""
    return compute_checksum(text) == supplied.strip()
