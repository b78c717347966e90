"""Triple-DES envelope cipher.

Implements the symmetric codec shared by the portal and every department:
three-key Triple-DES in CBC mode with zero-byte padding, ciphertext carried
as uppercase hex digit pairs.
"""

from __future__ import annotations

import binascii
from typing import TYPE_CHECKING

from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from track_app_python.errors import CipherError, DecryptionError, EncryptionError

if TYPE_CHECKING:
    from track_app_python.config import ProtocolConfig

KEY_SIZE = 24
IV_SIZE = 8
BLOCK_SIZE = 8


def _check_key_material(key: bytes, iv: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise CipherError(f"Encryption key must be {KEY_SIZE} bytes, got {len(key)}")
    if len(iv) != IV_SIZE:
        raise CipherError(f"Encryption IV must be {IV_SIZE} bytes, got {len(iv)}")


def zero_pad(data: bytes) -> bytes:
    """Pad with NUL bytes up to the block size.

    Block-aligned input (including empty input) is returned unchanged.
    """
    remainder = len(data) % BLOCK_SIZE
    if remainder == 0:
        return data
    return data + b"\x00" * (BLOCK_SIZE - remainder)


def encrypt_hex(plaintext: str, key: bytes, iv: bytes) -> str:
    """Encrypt text and return uppercase hex ciphertext.

    Args:
        plaintext: Text to encrypt (encoded as UTF-8)
        key: 24 bytes of key material
        iv: 8-byte initialization vector

    Returns:
        Uppercase hex string without separators

    Raises:
        EncryptionError: If key material is invalid or encryption fails
    """
    try:
        _check_key_material(key, iv)
        encryptor = Cipher(TripleDES(key), modes.CBC(iv)).encryptor()
        data = zero_pad(plaintext.encode("utf-8"))
        encrypted = encryptor.update(data) + encryptor.finalize()
    except CipherError as e:
        raise EncryptionError(f"Failed to encrypt data: {e.message}", cause=e) from e
    except (ValueError, UnicodeEncodeError) as e:
        raise EncryptionError(f"Failed to encrypt data: {e}", cause=e) from e
    return encrypted.hex().upper()


def decrypt_hex(hex_ciphertext: str, key: bytes, iv: bytes) -> str:
    """Decrypt uppercase (or lowercase) hex ciphertext back to text.

    Trailing NUL characters are stripped after UTF-8 decoding, so plaintext
    that legitimately ends in NUL bytes does not survive a round trip.

    Args:
        hex_ciphertext: Hex digit pairs, no separators
        key: 24 bytes of key material
        iv: 8-byte initialization vector

    Returns:
        Decrypted text

    Raises:
        DecryptionError: On malformed hex, misaligned ciphertext, bad key
            material or undecodable plaintext
    """
    try:
        _check_key_material(key, iv)
        data = binascii.unhexlify(hex_ciphertext)
        if len(data) % BLOCK_SIZE != 0:
            raise CipherError(
                f"Ciphertext length {len(data)} is not a multiple of {BLOCK_SIZE}"
            )
        decryptor = Cipher(TripleDES(key), modes.CBC(iv)).decryptor()
        decrypted = decryptor.update(data) + decryptor.finalize()
        return decrypted.decode("utf-8").rstrip("\x00")
    except CipherError as e:
        raise DecryptionError(f"Failed to decrypt data: {e.message}", cause=e) from e
    except (binascii.Error, ValueError, UnicodeDecodeError) as e:
        raise DecryptionError(f"Failed to decrypt data: {e}", cause=e) from e


class TripleDesCodec:
    """Cipher codec bound to the configured key and IV.

    Key and IV are the raw UTF-8 bytes of the configuration strings.

    Example:
        >>> codec = TripleDesCodec.from_config(config)
        >>> hex_text = codec.encrypt('{"AppID": "INC12345678"}')
        >>> codec.decrypt(hex_text)
        '{"AppID": "INC12345678"}'
    """

    def __init__(self, key: str | bytes, iv: str | bytes) -> None:
        self._key = key.encode("utf-8") if isinstance(key, str) else bytes(key)
        self._iv = iv.encode("utf-8") if isinstance(iv, str) else bytes(iv)
        _check_key_material(self._key, self._iv)

    @classmethod
    def from_config(cls, config: ProtocolConfig) -> TripleDesCodec:
        return cls(config.encryption_key, config.encryption_iv)

    def encrypt(self, plaintext: str) -> str:
        return encrypt_hex(plaintext, self._key, self._iv)

    def decrypt(self, hex_ciphertext: str) -> str:
        return decrypt_hex(hex_ciphertext, self._key, self._iv)

    def __repr__(self) -> str:
        return "TripleDesCodec(key=***REDACTED***, iv=***REDACTED***)"
