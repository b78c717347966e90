"""
Request and response validators.

Both validators collect every violation instead of stopping at the first
one, so a single round trip reports everything a counterpart got wrong.
Neither validator mutates its input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from track_app_python.types.request import Language
from track_app_python.types.response import FinalDecision
from track_app_python.utils.formatting import DATE_PATTERN, is_valid_date

if TYPE_CHECKING:
    from track_app_python.types.request import StatusRequest
    from track_app_python.types.response import DeskDetail, StatusResponse

_DESK_NUMBER_RE = re.compile(r"(\d+)\s*$")


@dataclass
class ValidationResult:
    """Result of request or response validation."""

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid

    def add_error(self, error: str) -> None:
        """Add an error."""
        self.errors.append(error)
        self.valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning."""
        self.warnings.append(warning)

    def joined(self, separator: str = ", ") -> str:
        return separator.join(self.errors)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def desk_sort_key(label: str | None) -> int | None:
    """Numeric position of a desk label ("Desk 10" -> 10).

    The trailing integer is compared so that "Desk 10" sorts after
    "Desk 9". Returns None when the label carries no number.
    """
    if not label:
        return None
    match = _DESK_NUMBER_RE.search(label)
    if match is None:
        return None
    return int(match.group(1))


def validate_request(request: StatusRequest) -> ValidationResult:
    """Validate a decrypted status request.

    Args:
        request: Request to check

    Returns:
        ValidationResult with one error per violated field
    """
    result = ValidationResult()

    if _is_blank(request.app_id):
        result.add_error("AppID is required")
    if _is_blank(request.service_id):
        result.add_error("ServiceID is required")
    if _is_blank(request.dept_name):
        result.add_error("DeptName is required")

    if _is_blank(request.language):
        result.add_error("Language is required")
    elif request.language not in Language.values():
        result.add_error("Language must be 'EN' or 'MR'")

    return result


def _check_date(result: ValidationResult, name: str, value: str | None) -> None:
    if value and not is_valid_date(value):
        result.add_error(f"{name} must be in format {DATE_PATTERN}")


def _check_desks(result: ValidationResult, desks: list[DeskDetail]) -> None:
    previous: int | None = None
    for index, desk in enumerate(desks):
        path = f"DeskDetails[{index}]"
        _check_date(result, f"{path}.ReviewActionDateTime", desk.review_action_date_time)

        if _is_blank(desk.desk_number):
            result.add_error(f"{path}.DeskNumber is required")
            continue

        position = desk_sort_key(desk.desk_number)
        if position is None:
            result.add_error(f"{path}.DeskNumber '{desk.desk_number}' has no desk number")
            continue
        if previous is not None and position < previous:
            result.add_error("DeskDetails must be in ascending order by DeskNumber")
        previous = position


def validate_response(
    response: StatusResponse,
    request: StatusRequest | None = None,
) -> ValidationResult:
    """Validate a status response before it is sent or after it is received.

    Args:
        response: Response to check
        request: Originating request; when given, a mismatched
            ApplicationID is reported as a warning

    Returns:
        ValidationResult with every violation found
    """
    result = ValidationResult()

    if _is_blank(response.application_id):
        result.add_error("ApplicationID is required")
    if _is_blank(response.service_name):
        result.add_error("ServiceName is required")
    if _is_blank(response.applicant_name):
        result.add_error("ApplicantName is required")

    if (response.final_decision or "") not in FinalDecision.values():
        result.add_error("FinalDecision must be '0', '1', '2', or empty string")

    _check_date(result, "ApplicationSubmissionDate", response.application_submission_date)
    _check_date(result, "ApplicationPaymentDate", response.application_payment_date)

    for name, value in (
        ("EstimatedDisbursalDays", response.estimated_disbursal_days),
        ("TotalNumberOfDesks", response.total_number_of_desks),
        ("CurrentDeskNumber", response.current_desk_number),
        ("NextDeskNumber", response.next_desk_number),
    ):
        if value < 0:
            result.add_error(f"{name} must not be negative")

    _check_desks(result, response.desk_details or [])

    if (
        request is not None
        and request.app_id
        and response.application_id
        and response.application_id != request.app_id
    ):
        result.add_warning(
            f"ApplicationID '{response.application_id}' does not match requested AppID '{request.app_id}'"
        )

    return result
