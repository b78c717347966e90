"""
Server-side envelope handler.

Runs one inbound request through the pipeline::

    RECEIVED_ENVELOPE -> DECRYPTED -> PARSED_REQUEST -> VALIDATED_REQUEST
    -> DATA_FETCHED -> VALIDATED_RESPONSE -> NORMALIZED -> SERIALIZED
    -> ENCRYPTED -> SENT

Every stage returns a tagged result; the first ``Failure`` ends the
request with an unencrypted ``{"error", "timestamp"}`` body. Nothing is
retried here. The handler keeps no per-request state on ``self``, so one
instance serves any number of concurrent requests.
"""

from __future__ import annotations

import inspect
import json
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from track_app_python.crypto.cipher import TripleDesCodec
from track_app_python.errors import (
    ApplicationNotFoundError,
    CipherError,
    FormatError,
)
from track_app_python.errors.classification import ErrorKind
from track_app_python.protocol.stages import Failure, Ok, Stage, StageResult
from track_app_python.protocol.validator import validate_request, validate_response
from track_app_python.telemetry.logger import LogContext, StageLogger, set_log_context
from track_app_python.types.envelope import EncryptedEnvelope, ErrorBody
from track_app_python.types.response import StatusResponse, normalize_response
from track_app_python.types.serialization import deserialize_request, serialize

if TYPE_CHECKING:
    from track_app_python.config import ProtocolConfig
    from track_app_python.server.provider import DepartmentDataProvider
    from track_app_python.types.request import StatusRequest


@dataclass
class HandlerResponse:
    """Outcome of processing one request.

    Attributes:
        status_code: HTTP status to return
        body: ``{"data": ...}`` on success, ``{"error", "timestamp"}`` otherwise
        stage: Last stage reached
        error_kind: Failure kind, None on success
    """

    status_code: int
    body: dict[str, str] = field(default_factory=dict)
    stage: Stage = Stage.SENT
    error_kind: ErrorKind | None = None

    @property
    def is_success(self) -> bool:
        return self.status_code == 200 and self.error_kind is None

    @property
    def error_message(self) -> str | None:
        return self.body.get("error")

    def to_json(self) -> str:
        return json.dumps(self.body, ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def failure(cls, failure: Failure, stage: Stage) -> HandlerResponse:
        return cls(
            status_code=failure.status_code,
            body=ErrorBody(error=failure.error_message).to_dict(),
            stage=stage,
            error_kind=failure.kind,
        )


class EnvelopeHandler:
    """Processes encrypted status requests for a department.

    Example:
        >>> handler = EnvelopeHandler(config, provider)
        >>> result = await handler.process(request_body)
        >>> result.status_code, result.body
        (200, {'data': '5C1F...'})
    """

    def __init__(
        self,
        config: ProtocolConfig,
        provider: DepartmentDataProvider,
        *,
        cipher: TripleDesCodec | None = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._cipher = cipher or TripleDesCodec.from_config(config)
        self._log = StageLogger(config, "track_app_python.server")

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    async def process(self, raw_body: str | bytes) -> HandlerResponse:
        """Process one encrypted request body.

        Never raises for request-related problems; every failure is
        returned as a HandlerResponse with the matching status code.

        Args:
            raw_body: Raw HTTP request body

        Returns:
            HandlerResponse ready to be written to the transport
        """
        set_log_context(LogContext(request_id=uuid.uuid4().hex[:12], role="server"))
        stage = Stage.RECEIVED_ENVELOPE
        try:
            self._log.stage(stage, "Processing incoming status request")

            envelope = self._parse_envelope(raw_body)
            if isinstance(envelope, Failure):
                return self._fail(envelope, stage)

            stage = Stage.DECRYPTED
            plaintext = self._decrypt(envelope.value)
            if isinstance(plaintext, Failure):
                return self._fail(plaintext, stage)
            self._log.payload("Request decrypted", plaintext.value)

            stage = Stage.PARSED_REQUEST
            request = self._parse_request(plaintext.value)
            if isinstance(request, Failure):
                return self._fail(request, stage)

            stage = Stage.VALIDATED_REQUEST
            validated = self._validate_request(request.value)
            if isinstance(validated, Failure):
                return self._fail(validated, stage)
            self._log.stage(
                stage,
                "Request validated",
                app_id=validated.value.app_id,
                service_id=validated.value.service_id,
            )

            stage = Stage.DATA_FETCHED
            fetched = await self._fetch(validated.value)
            if isinstance(fetched, Failure):
                return self._fail(fetched, stage)

            stage = Stage.VALIDATED_RESPONSE
            checked = self._validate_response(fetched.value, validated.value)
            if isinstance(checked, Failure):
                return self._fail(checked, stage)

            stage = Stage.NORMALIZED
            normalized = normalize_response(checked.value)

            stage = Stage.SERIALIZED
            response_json = serialize(normalized)
            self._log.payload("Response JSON", response_json)

            stage = Stage.ENCRYPTED
            encrypted = self._encrypt(response_json)
            if isinstance(encrypted, Failure):
                return self._fail(encrypted, stage)

            stage = Stage.SENT
            self._log.stage(stage, "Request processed successfully")
            return HandlerResponse(
                status_code=200,
                body=EncryptedEnvelope(data=encrypted.value).to_dict(),
                stage=stage,
            )
        except Exception as e:
            return self._fail(Failure(ErrorKind.UNEXPECTED, cause=e), stage)

    def _fail(self, failure: Failure, stage: Stage) -> HandlerResponse:
        detail = f": {failure.cause}" if failure.cause is not None else ""
        if failure.kind == ErrorKind.NOT_FOUND:
            self._log.info(f"Application not found at stage {stage.value}")
        else:
            self._log.failure(
                f"{failure.error_message} at stage {stage.value}{detail}",
                exc_info=failure.kind == ErrorKind.UNEXPECTED,
                error_kind=failure.kind.value,
            )
        return HandlerResponse.failure(failure, stage)

    def _parse_envelope(self, raw_body: str | bytes) -> StageResult[EncryptedEnvelope]:
        try:
            return Ok(EncryptedEnvelope.parse(raw_body))
        except FormatError as e:
            return Failure(ErrorKind.INVALID_FORMAT, cause=e)

    def _decrypt(self, envelope: EncryptedEnvelope) -> StageResult[str]:
        try:
            return Ok(self._cipher.decrypt(envelope.data))
        except CipherError as e:
            return Failure(ErrorKind.DECRYPT_FAILED, cause=e)

    def _parse_request(self, plaintext: str) -> StageResult[StatusRequest]:
        try:
            return Ok(deserialize_request(plaintext))
        except FormatError as e:
            return Failure(ErrorKind.INVALID_FORMAT, cause=e)

    def _validate_request(self, request: StatusRequest) -> StageResult[StatusRequest]:
        result = validate_request(request)
        if not result.valid:
            return Failure(
                ErrorKind.REQUEST_INVALID,
                f"{ErrorKind.REQUEST_INVALID.default_message}: {result.joined()}",
            )
        return Ok(request)

    async def _fetch(self, request: StatusRequest) -> StageResult[Any]:
        try:
            outcome = self._provider.get_application_status(
                request.app_id,
                request.service_id,
                request.dept_name,
                request.language,
            )
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return Ok(outcome)
        except ApplicationNotFoundError as e:
            return Failure(ErrorKind.NOT_FOUND, e.message or None, cause=e)
        except Exception as e:
            return Failure(ErrorKind.PROVIDER_FAILED, cause=e)

    def _validate_response(
        self, response: Any, request: StatusRequest
    ) -> StageResult[StatusResponse]:
        if not isinstance(response, StatusResponse):
            return Failure(
                ErrorKind.RESPONSE_INVALID,
                cause=TypeError(f"Provider returned {type(response).__name__}, not StatusResponse"),
            )
        result = validate_response(response, request)
        for warning in result.warnings:
            self._log.info(f"Response warning: {warning}")
        if not result.valid:
            return Failure(
                ErrorKind.RESPONSE_INVALID,
                cause=ValueError(result.joined()),
            )
        return Ok(response)

    def _encrypt(self, response_json: str) -> StageResult[str]:
        try:
            return Ok(self._cipher.encrypt(response_json))
        except CipherError as e:
            return Failure(ErrorKind.ENCRYPT_FAILED, cause=e)
