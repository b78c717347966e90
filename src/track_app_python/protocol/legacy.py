"""
Legacy pipe-delimited handshakes.

Two payloads predate the JSON envelope and are kept bit-exact for the
deployed counterparts:

- ``PushRequestToken`` (portal -> department authentication)::

    UserId|TimeStamp|SessionID|ClientChecksum|AuthorizationToken

- ``PullRequestPayload`` (department -> portal status push), twenty data
  fields followed by the checksum::

    TrackID|ClientCode|...|UD5|Checksum

Both are carried as Triple-DES hex ciphertext and authenticated with the
CRC-32 checksum mixed with the shared checksum key. A mismatch rejects
the whole payload before any business processing.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import astuple, dataclass, fields
from typing import TYPE_CHECKING, Any, ClassVar

from track_app_python.config import PushChecksumMode
from track_app_python.crypto.checksum import FIELD_SEPARATOR, compute_checksum, join_fields
from track_app_python.crypto.cipher import TripleDesCodec
from track_app_python.errors import (
    ChecksumMismatchError,
    CipherError,
    FormatError,
)
from track_app_python.errors.classification import ErrorKind
from track_app_python.protocol.handler import HandlerResponse
from track_app_python.protocol.stages import Failure, Ok, Stage, StageResult
from track_app_python.telemetry.logger import LogContext, StageLogger, set_log_context
from track_app_python.utils.formatting import error_timestamp

if TYPE_CHECKING:
    from track_app_python.config import ProtocolConfig

PUSH_CHECKSUM_PLACEHOLDER = "Checksum"


def _split(text: str, expected: int, name: str) -> list[str]:
    parts = text.split(FIELD_SEPARATOR)
    if len(parts) != expected:
        raise FormatError(f"{name} must have {expected} fields, got {len(parts)}")
    return parts


def _check_no_separator(values: tuple[str, ...], names: tuple[str, ...]) -> None:
    for name, value in zip(names, values):
        if FIELD_SEPARATOR in value:
            raise FormatError(f"{name} must not contain '{FIELD_SEPARATOR}'")


@dataclass(frozen=True)
class PushRequestToken:
    """Decrypted push-authentication token.

    The checksum is re-derived over
    ``UserId|TimeStamp|SessionID|<K>|AuthorizationToken`` where ``<K>`` is
    the shared checksum key, or the literal ``Checksum`` when the
    counterpart runs in :attr:`PushChecksumMode.FIELD_NAME` mode.
    """

    FIELD_NAMES: ClassVar[tuple[str, ...]] = (
        "UserId",
        "TimeStamp",
        "SessionID",
        "ClientChecksum",
        "AuthorizationToken",
    )

    user_id: str
    timestamp: str
    session_id: str
    checksum: str
    authorization_token: str

    @classmethod
    def parse(cls, text: str) -> PushRequestToken:
        """Parse the decrypted pipe-delimited token.

        Raises:
            FormatError: Wrong number of fields
        """
        return cls(*_split(text, len(cls.FIELD_NAMES), "PushRequestToken"))

    @classmethod
    def build(
        cls,
        user_id: str,
        timestamp: str,
        session_id: str,
        authorization_token: str,
        *,
        checksum_key: str,
        mode: PushChecksumMode = PushChecksumMode.SHARED_KEY,
    ) -> PushRequestToken:
        """Create a token with its checksum computed."""
        values = (user_id, timestamp, session_id, authorization_token)
        _check_no_separator(values, ("UserId", "TimeStamp", "SessionID", "AuthorizationToken"))
        token = cls(user_id, timestamp, session_id, "", authorization_token)
        return cls(
            user_id,
            timestamp,
            session_id,
            compute_checksum(token.checksum_input(checksum_key, mode)),
            authorization_token,
        )

    def checksum_input(
        self,
        checksum_key: str,
        mode: PushChecksumMode = PushChecksumMode.SHARED_KEY,
    ) -> str:
        """Raw string the checksum is computed over."""
        slot = checksum_key if mode == PushChecksumMode.SHARED_KEY else PUSH_CHECKSUM_PLACEHOLDER
        return join_fields(
            (self.user_id, self.timestamp, self.session_id, slot, self.authorization_token)
        )

    def expected_checksum(
        self,
        checksum_key: str,
        mode: PushChecksumMode = PushChecksumMode.SHARED_KEY,
    ) -> str:
        return compute_checksum(self.checksum_input(checksum_key, mode))

    def verify(
        self,
        checksum_key: str,
        mode: PushChecksumMode = PushChecksumMode.SHARED_KEY,
    ) -> None:
        """Check the embedded checksum.

        Raises:
            ChecksumMismatchError: Checksum does not match
        """
        expected = self.expected_checksum(checksum_key, mode)
        if expected != self.checksum.strip():
            raise ChecksumMismatchError(expected=expected, actual=self.checksum)

    def is_valid(
        self,
        checksum_key: str,
        mode: PushChecksumMode = PushChecksumMode.SHARED_KEY,
    ) -> bool:
        return self.expected_checksum(checksum_key, mode) == self.checksum.strip()

    def to_pipe(self) -> str:
        return join_fields(astuple(self))

    def seal(self, cipher: TripleDesCodec) -> str:
        """Encrypt the token for the query string (hex ciphertext)."""
        return cipher.encrypt(self.to_pipe())

    @classmethod
    def open_sealed(cls, hex_ciphertext: str, cipher: TripleDesCodec) -> PushRequestToken:
        """Decrypt and parse a sealed token.

        Raises:
            DecryptionError: Ciphertext could not be decrypted
            FormatError: Wrong number of fields
        """
        return cls.parse(cipher.decrypt(hex_ciphertext))


@dataclass(frozen=True)
class PullRequestPayload:
    """Department -> portal status update (twenty fields plus checksum)."""

    FIELD_NAMES: ClassVar[tuple[str, ...]] = (
        "TrackID",
        "ClientCode",
        "UserID",
        "ServiceID",
        "ApplicationID",
        "PaymentStatus",
        "PaymentDate",
        "DigitalSignStatus",
        "DigitalSignDate",
        "EstimatedServiceDays",
        "EstimatedServiceDate",
        "Amount",
        "RequestFlag",
        "ApplicationStatus",
        "Remark",
        "UD1",
        "UD2",
        "UD3",
        "UD4",
        "UD5",
        "Checksum",
    )

    track_id: str = ""
    client_code: str = ""
    user_id: str = ""
    service_id: str = ""
    application_id: str = ""
    payment_status: str = ""
    payment_date: str = ""
    digital_sign_status: str = ""
    digital_sign_date: str = ""
    estimated_service_days: str = ""
    estimated_service_date: str = ""
    amount: str = ""
    request_flag: str = ""
    application_status: str = ""
    remark: str = ""
    ud1: str = ""
    ud2: str = ""
    ud3: str = ""
    ud4: str = ""
    ud5: str = ""
    checksum: str = ""

    @classmethod
    def parse(cls, text: str) -> PullRequestPayload:
        """Parse the decrypted pipe-delimited payload.

        Raises:
            FormatError: Wrong number of fields
        """
        return cls(*_split(text, len(cls.FIELD_NAMES), "PullRequestPayload"))

    @classmethod
    def build(cls, *, checksum_key: str, **values: str) -> PullRequestPayload:
        """Create a payload from field values and append its checksum.

        Example:
            >>> payload = PullRequestPayload.build(
            ...     checksum_key="shared-secret",
            ...     track_id="TRK001",
            ...     application_id="INC12345678",
            ...     application_status="Approved",
            ... )
            >>> payload.is_valid("shared-secret")
            True
        """
        if "checksum" in values:
            raise TypeError("checksum is computed, not supplied")
        unsigned = cls(**values)
        _check_no_separator(unsigned.data_fields(), cls.FIELD_NAMES[:-1])
        return cls(**values, checksum=unsigned.expected_checksum(checksum_key))

    def data_fields(self) -> tuple[str, ...]:
        """The twenty fields preceding the checksum, in wire order."""
        return tuple(getattr(self, f.name) for f in fields(self))[:-1]

    def checksum_input(self, checksum_key: str) -> str:
        return join_fields((*self.data_fields(), checksum_key))

    def expected_checksum(self, checksum_key: str) -> str:
        return compute_checksum(self.checksum_input(checksum_key))

    def verify(self, checksum_key: str) -> None:
        """Check the trailing checksum.

        Raises:
            ChecksumMismatchError: Checksum does not match
        """
        expected = self.expected_checksum(checksum_key)
        if expected != self.checksum.strip():
            raise ChecksumMismatchError(expected=expected, actual=self.checksum)

    def is_valid(self, checksum_key: str) -> bool:
        return self.expected_checksum(checksum_key) == self.checksum.strip()

    def to_pipe(self) -> str:
        return join_fields(astuple(self))

    def seal(self, cipher: TripleDesCodec) -> str:
        return cipher.encrypt(self.to_pipe())

    @classmethod
    def open_sealed(cls, hex_ciphertext: str, cipher: TripleDesCodec) -> PullRequestPayload:
        return cls.parse(cipher.decrypt(hex_ciphertext))


StatusCallback = Callable[[PullRequestPayload], Any]


class PullStatusHandler:
    """Receives encrypted pull-status payloads.

    Decrypts, parses and authenticates the payload, then hands it to the
    business callback. A checksum mismatch is logged as a security event
    and answered with 401; the callback is never invoked for it.
    """

    def __init__(self, config: ProtocolConfig, *, cipher: TripleDesCodec | None = None) -> None:
        self._config = config
        self._cipher = cipher or TripleDesCodec.from_config(config)
        self._log = StageLogger(config, "track_app_python.legacy")

    async def handle(self, raw: str, on_status: StatusCallback) -> HandlerResponse:
        """Process one sealed payload.

        Args:
            raw: Hex ciphertext of the pipe-delimited payload
            on_status: Business callback, sync or async

        Returns:
            HandlerResponse, ``{"status": "accepted", ...}`` on success
        """
        set_log_context(LogContext(role="legacy"))
        stage = Stage.RECEIVED_ENVELOPE
        try:
            stage = Stage.DECRYPTED
            plaintext = self._decrypt(raw.strip())
            if isinstance(plaintext, Failure):
                return self._fail(plaintext, stage)

            stage = Stage.PARSED_REQUEST
            payload = self._parse(plaintext.value)
            if isinstance(payload, Failure):
                return self._fail(payload, stage)

            stage = Stage.VALIDATED_REQUEST
            verified = self._verify(payload.value)
            if isinstance(verified, Failure):
                self._log.security_event(
                    f"Pull payload rejected: checksum mismatch for TrackID {payload.value.track_id}"
                )
                return HandlerResponse.failure(verified, stage)

            stage = Stage.DATA_FETCHED
            try:
                outcome = on_status(verified.value)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                return self._fail(Failure(ErrorKind.PROVIDER_FAILED, cause=e), stage)

            stage = Stage.SENT
            self._log.stage(stage, f"Pull payload accepted for TrackID {verified.value.track_id}")
            return HandlerResponse(
                status_code=200,
                body={"status": "accepted", "timestamp": error_timestamp()},
                stage=stage,
            )
        except Exception as e:
            return self._fail(Failure(ErrorKind.UNEXPECTED, cause=e), stage)

    def _fail(self, failure: Failure, stage: Stage) -> HandlerResponse:
        self._log.failure(
            f"{failure.error_message} at stage {stage.value}: {failure.cause}",
            error_kind=failure.kind.value,
        )
        return HandlerResponse.failure(failure, stage)

    def _decrypt(self, raw: str) -> StageResult[str]:
        try:
            return Ok(self._cipher.decrypt(raw))
        except CipherError as e:
            return Failure(ErrorKind.DECRYPT_FAILED, cause=e)

    def _parse(self, plaintext: str) -> StageResult[PullRequestPayload]:
        try:
            return Ok(PullRequestPayload.parse(plaintext))
        except FormatError as e:
            return Failure(ErrorKind.INVALID_FORMAT, cause=e)

    def _verify(self, payload: PullRequestPayload) -> StageResult[PullRequestPayload]:
        try:
            payload.verify(self._config.checksum_key)
        except ChecksumMismatchError as e:
            return Failure(ErrorKind.CHECKSUM_MISMATCH, cause=e)
        return Ok(payload)
