"""
Conformance checker for department endpoints.

Runs twelve probes against a live department deployment and reports
PASS / FAIL / WARN per probe. Intended for onboarding a department before
it is connected to the portal.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from track_app_python.crypto.cipher import TripleDesCodec
from track_app_python.errors import TrackAppError
from track_app_python.protocol.envelope import EnvelopeCodec
from track_app_python.protocol.validator import desk_sort_key
from track_app_python.telemetry.logger import get_logger
from track_app_python.types.request import Language
from track_app_python.utils.formatting import DATE_PATTERN, is_valid_date

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from track_app_python.config import ProtocolConfig

logger = get_logger("track_app_python.conformance")

DEVANAGARI_RANGE = (0x0900, 0x097F)

RESPONSE_FIELDS = (
    "ApplicationID",
    "ServiceName",
    "ApplicantName",
    "EstimatedDisbursalDays",
    "ApplicationSubmissionDate",
    "ApplicationPaymentDate",
    "NextActionRequiredDetails",
    "FinalDecision",
    "DepartmentRedirectionURL",
    "TotalNumberOfDesks",
    "CurrentDeskNumber",
    "NextDeskNumber",
    "DeskDetails",
)


class CheckStatus(str, Enum):
    """Outcome of one probe."""

    PASS = "PASS"
    FAIL = "FAIL"
    WARN = "WARN"


@dataclass
class CheckResult:
    """Result of one probe.

    Attributes:
        name: Probe name
        status: PASS, FAIL or WARN
        message: Summary line
        notes: Individual observations made by the probe
        latency_ms: Probe duration in milliseconds
    """

    name: str
    status: CheckStatus
    message: str = ""
    notes: list[str] = field(default_factory=list)
    latency_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "notes": self.notes,
            "latency_ms": self.latency_ms,
        }


@dataclass
class ConformanceReport:
    """Aggregated probe results."""

    base_url: str
    results: list[CheckResult] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)

    def _count(self, status: CheckStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed_count(self) -> int:
        return self._count(CheckStatus.PASS)

    @property
    def failed_count(self) -> int:
        return self._count(CheckStatus.FAIL)

    @property
    def warning_count(self) -> int:
        return self._count(CheckStatus.WARN)

    @property
    def passed(self) -> bool:
        """True when no probe failed (warnings allowed)."""
        return self.failed_count == 0

    def get(self, name: str) -> CheckResult | None:
        return next((r for r in self.results if r.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "base_url": self.base_url,
            "passed": self.passed,
            "total": self.total,
            "passed_count": self.passed_count,
            "failed_count": self.failed_count,
            "warning_count": self.warning_count,
            "results": [r.to_dict() for r in self.results],
        }

    def render_text(self) -> str:
        """Human-readable report."""
        lines = [f"Conformance report for {self.base_url}"]
        for result in self.results:
            lines.append(f"[{result.status.value}] {result.name}: {result.message}")
            lines.extend(f"    - {note}" for note in result.notes)
        verdict = "PASSED" if self.passed else "FAILED"
        lines.append(
            f"{verdict}: {self.passed_count} passed, {self.failed_count} failed, "
            f"{self.warning_count} warnings ({self.total} checks)"
        )
        return "\n".join(lines)


class ConformanceChecker:
    """Probes a department endpoint for protocol conformance.

    Example:
        >>> async with ConformanceChecker(config, "https://dept.example.gov.in") as checker:
        ...     report = await checker.run()
        >>> print(report.render_text())
    """

    def __init__(
        self,
        config: ProtocolConfig,
        base_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        sample_app_id: str = "INC12345678",
        service_id: str = "4111",
        dept_name: str = "Revenue Department",
        missing_app_id: str = "NONEXISTENT999",
    ) -> None:
        self._config = config
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(base_url=self._base_url, timeout=config.timeout)
        self._owns_client = http_client is None
        self._envelope = EnvelopeCodec(TripleDesCodec.from_config(config))
        self._sample_app_id = sample_app_id
        self._service_id = service_id
        self._dept_name = dept_name
        self._missing_app_id = missing_app_id
        self._sample: dict[str, Any] | None = None
        self._sample_error: str | None = None

    def _request(self, **overrides: Any) -> dict[str, Any]:
        body: dict[str, Any] = {
            "AppID": self._sample_app_id,
            "ServiceID": self._service_id,
            "DeptName": self._dept_name,
            "Language": Language.ENGLISH.value,
        }
        body.update(overrides)
        return {k: v for k, v in body.items() if v is not None}

    async def _post(self, request: dict[str, Any]) -> httpx.Response:
        plaintext = json.dumps(request, ensure_ascii=False, separators=(",", ":"))
        return await self._client.post(
            f"{self._base_url}{self._config.api_endpoint}",
            json=self._envelope.seal_text(plaintext),
        )

    async def _fetch(self, request: dict[str, Any]) -> dict[str, Any]:
        response = await self._post(request)
        response.raise_for_status()
        decoded = json.loads(self._envelope.open(response.json()))
        if not isinstance(decoded, dict):
            raise ValueError("Decrypted response is not a JSON object")
        return decoded

    async def _sample_response(self) -> dict[str, Any]:
        if self._sample is None and self._sample_error is None:
            try:
                self._sample = await self._fetch(self._request())
            except (httpx.HTTPError, TrackAppError, ValueError) as e:
                self._sample_error = str(e)
        if self._sample is None:
            raise ValueError(f"No sample response: {self._sample_error}")
        return self._sample

    async def run(self) -> ConformanceReport:
        """Run every probe in order.

        Returns:
            ConformanceReport
        """
        report = ConformanceReport(base_url=self._base_url)
        self._sample = None
        self._sample_error = None
        probes: list[tuple[str, Callable[[], Awaitable[CheckResult]]]] = [
            ("Basic Connectivity", self.check_connectivity),
            ("Valid Request", self.check_valid_request),
            ("Marathi Language Support", self.check_marathi),
            ("Missing Required Fields", self.check_missing_field),
            ("Invalid Language Value", self.check_invalid_language),
            ("Response Format", self.check_response_format),
            ("Empty String Convention", self.check_empty_strings),
            ("Date Format", self.check_date_format),
            ("FinalDecision Values", self.check_final_decision),
            ("Desk Details Ordering", self.check_desk_ordering),
            ("Encryption Round Trip", self.check_cipher_round_trip),
            ("Application Not Found", self.check_not_found),
        ]
        for name, probe in probes:
            start = time.time()
            try:
                result = await probe()
            except (httpx.HTTPError, TrackAppError, ValueError, KeyError, TypeError) as e:
                result = CheckResult(name, CheckStatus.FAIL, f"{type(e).__name__}: {e}")
            result.name = name
            result.latency_ms = (time.time() - start) * 1000
            logger.info(f"{result.status.value} {name}: {result.message}")
            report.results.append(result)
        return report

    async def check_connectivity(self) -> CheckResult:
        try:
            response = await self._client.get(f"{self._base_url}/")
        except httpx.HTTPError as e:
            return CheckResult("", CheckStatus.FAIL, f"Cannot reach API: {e}")
        return CheckResult("", CheckStatus.PASS, f"API is reachable (status {response.status_code})")

    async def check_valid_request(self) -> CheckResult:
        sample = await self._sample_response()
        result = CheckResult("", CheckStatus.PASS, "Valid request processed successfully")

        app_id = sample.get("ApplicationID")
        if not app_id:
            _fail(result, "ApplicationID is missing or empty")
        elif app_id != self._sample_app_id:
            _warn(result, f"ApplicationID mismatch: sent '{self._sample_app_id}', got '{app_id}'")
        for name in ("ServiceName", "ApplicantName"):
            if not sample.get(name):
                _fail(result, f"{name} is missing or empty")

        days = sample.get("EstimatedDisbursalDays")
        if not isinstance(days, int) or days <= 0:
            _warn(result, f"EstimatedDisbursalDays seems low: {days}")
        return result

    async def check_marathi(self) -> CheckResult:
        response = await self._fetch(self._request(Language=Language.MARATHI.value))
        service_name = response.get("ServiceName") or ""
        low, high = DEVANAGARI_RANGE
        if any(low <= ord(ch) <= high for ch in service_name):
            return CheckResult("", CheckStatus.PASS, f"Marathi text detected: {service_name}")
        return CheckResult(
            "", CheckStatus.WARN, f"Language=MR but ServiceName has no Marathi text: {service_name}"
        )

    async def _expect_rejection(self, request: dict[str, Any], what: str) -> CheckResult:
        response = await self._post(request)
        if response.is_success:
            return CheckResult("", CheckStatus.FAIL, f"API accepted {what} (should reject)")
        return CheckResult("", CheckStatus.PASS, f"Correctly rejected {what} (status {response.status_code})")

    async def check_missing_field(self) -> CheckResult:
        return await self._expect_rejection(self._request(AppID=None), "request with missing AppID")

    async def check_invalid_language(self) -> CheckResult:
        return await self._expect_rejection(self._request(Language="FR"), "invalid language 'FR'")

    async def check_response_format(self) -> CheckResult:
        sample = await self._sample_response()
        result = CheckResult("", CheckStatus.PASS, "All required fields present")
        for name in RESPONSE_FIELDS:
            if name not in sample:
                _fail(result, f"{name} is missing")
        if not isinstance(sample.get("DeskDetails", []), list):
            _fail(result, "DeskDetails must be an array")
        return result

    async def check_empty_strings(self) -> CheckResult:
        sample = await self._sample_response()
        result = CheckResult("", CheckStatus.PASS, "Empty string convention followed")
        for name, value in sample.items():
            if value is None:
                _fail(result, f"{name} is null (should be empty string)")
        for index, desk in enumerate(sample.get("DeskDetails") or []):
            for name, value in desk.items():
                if value is None:
                    _fail(result, f"DeskDetails[{index}].{name} is null (should be empty string)")
        return result

    async def check_date_format(self) -> CheckResult:
        sample = await self._sample_response()
        result = CheckResult("", CheckStatus.PASS, f"Dates use {DATE_PATTERN}")
        dates = [
            ("ApplicationSubmissionDate", sample.get("ApplicationSubmissionDate")),
            ("ApplicationPaymentDate", sample.get("ApplicationPaymentDate")),
        ]
        dates.extend(
            (desk.get("DeskNumber") or f"DeskDetails[{i}]", desk.get("ReviewActionDateTime"))
            for i, desk in enumerate(sample.get("DeskDetails") or [])
        )
        for name, value in dates:
            if value and not is_valid_date(value):
                _fail(result, f"{name} wrong format: {value} (expected {DATE_PATTERN})")
        return result

    async def check_final_decision(self) -> CheckResult:
        sample = await self._sample_response()
        value = sample.get("FinalDecision")
        if not value:
            return CheckResult("", CheckStatus.PASS, "FinalDecision is empty string (not decided)")
        if value in ("0", "1", "2"):
            return CheckResult("", CheckStatus.PASS, f"FinalDecision value correct: '{value}'")
        return CheckResult(
            "", CheckStatus.FAIL, f"FinalDecision invalid value: '{value}' (must be '0', '1', '2', or empty)"
        )

    async def check_desk_ordering(self) -> CheckResult:
        sample = await self._sample_response()
        desks = sample.get("DeskDetails") or []
        if len(desks) < 2:
            return CheckResult("", CheckStatus.PASS, "Ordering check skipped (0-1 desks)")
        labels = [desk.get("DeskNumber") for desk in desks]
        positions = [desk_sort_key(label) for label in labels]
        if any(p is None for p in positions):
            return CheckResult("", CheckStatus.FAIL, f"DeskNumber without desk number in {labels}")
        for current, following, label, next_label in zip(positions, positions[1:], labels, labels[1:]):
            if current > following:  # type: ignore[operator]
                return CheckResult(
                    "", CheckStatus.FAIL, f"DeskDetails not in order: {label} comes before {next_label}"
                )
        return CheckResult("", CheckStatus.PASS, f"DeskDetails in ascending order ({len(desks)} desks)")

    async def check_cipher_round_trip(self) -> CheckResult:
        text = "Test encryption"
        decrypted = self._envelope.cipher.decrypt(self._envelope.cipher.encrypt(text))
        if decrypted == text:
            return CheckResult("", CheckStatus.PASS, "Encryption/decryption working correctly")
        return CheckResult("", CheckStatus.FAIL, f"Round trip failed: '{text}' != '{decrypted}'")

    async def check_not_found(self) -> CheckResult:
        response = await self._post(self._request(AppID=self._missing_app_id))
        if response.status_code == 404:
            return CheckResult("", CheckStatus.PASS, "Correctly returns 404 for non-existent application")
        if response.is_success:
            return CheckResult(
                "", CheckStatus.WARN, "Returns 200 for non-existent application (consider returning 404)"
            )
        return CheckResult(
            "", CheckStatus.PASS, f"Returns error status {response.status_code} for non-existent application"
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> ConformanceChecker:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


def _fail(result: CheckResult, note: str) -> None:
    result.notes.append(note)
    result.status = CheckStatus.FAIL
    result.message = note


def _warn(result: CheckResult, note: str) -> None:
    result.notes.append(note)
    if result.status != CheckStatus.FAIL:
        result.status = CheckStatus.WARN
        result.message = note
