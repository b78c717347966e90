"""
Envelope codec: wire model <-> ``{"data": "<hex>"}``.

Shared by the client role (seal request, open response) and the
conformance checker. The server pipeline performs the same steps stage by
stage in :mod:`track_app_python.protocol.handler`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from track_app_python.crypto.cipher import TripleDesCodec
from track_app_python.errors import FormatError
from track_app_python.types.envelope import EncryptedEnvelope
from track_app_python.types.serialization import serialize

if TYPE_CHECKING:
    from pydantic import BaseModel

    from track_app_python.config import ProtocolConfig


class EnvelopeCodec:
    """Encrypts wire models into envelopes and opens envelopes back to text.

    Example:
        >>> envelope = EnvelopeCodec.from_config(config)
        >>> body = envelope.seal(request)
        >>> body
        {'data': '9F3A...'}
    """

    def __init__(self, cipher: TripleDesCodec) -> None:
        self._cipher = cipher

    @classmethod
    def from_config(cls, config: ProtocolConfig) -> EnvelopeCodec:
        return cls(TripleDesCodec.from_config(config))

    @property
    def cipher(self) -> TripleDesCodec:
        return self._cipher

    def seal_text(self, plaintext: str) -> dict[str, str]:
        """Encrypt JSON text into an envelope body."""
        return EncryptedEnvelope(data=self._cipher.encrypt(plaintext)).to_dict()

    def seal(self, model: BaseModel) -> dict[str, str]:
        """Serialize and encrypt a wire model.

        Raises:
            EncryptionError: Encryption failed
        """
        return self.seal_text(serialize(model))

    def open(self, body: dict[str, Any] | str | bytes) -> str:
        """Decrypt an envelope body to its inner JSON text.

        Args:
            body: Decoded JSON object or raw response text

        Raises:
            FormatError: No ``data`` field
            DecryptionError: Ciphertext could not be decrypted
        """
        if isinstance(body, dict):
            data = body.get("data")
            if not isinstance(data, str) or not data:
                raise FormatError("Response does not contain encrypted data")
            envelope = EncryptedEnvelope(data=data)
        else:
            envelope = EncryptedEnvelope.parse(body)
        return self._cipher.decrypt(envelope.data)
