"""
Status response returned by the department.

Every optional string travels as ``""``, never ``null``. Python code may
build responses with ``None`` for missing values; :func:`normalize_response`
converts them at the wire boundary.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FinalDecision(str, Enum):
    """Terminal outcome of an application's review."""

    APPROVED = "0"
    REJECTED = "1"
    PENDING = "2"
    UNDECIDED = ""

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


class DeskDetail(BaseModel):
    """One workflow review stage."""

    model_config = ConfigDict(populate_by_name=True)

    desk_number: str | None = Field(default="", alias="DeskNumber", description='Label, e.g. "Desk 1"')
    review_action_by: str | None = Field(default="", alias="ReviewActionBy")
    review_action_date_time: str | None = Field(
        default="", alias="ReviewActionDateTime", description="DD-MMM-YYYY,HH:mm:ss or empty"
    )
    review_action_details: str | None = Field(default="", alias="ReviewActionDetails")


class StatusResponse(BaseModel):
    """Application status details.

    Example:
        >>> response = StatusResponse(
        ...     application_id="INC12345678",
        ...     service_name="Income Certificate",
        ...     applicant_name="Ramesh Patil",
        ...     final_decision=FinalDecision.PENDING.value,
        ... )
        >>> response.is_final_decision_made
        True
    """

    model_config = ConfigDict(populate_by_name=True)

    application_id: str | None = Field(default="", alias="ApplicationID")
    service_name: str | None = Field(default="", alias="ServiceName")
    applicant_name: str | None = Field(default="", alias="ApplicantName")
    estimated_disbursal_days: int = Field(default=0, alias="EstimatedDisbursalDays")
    application_submission_date: str | None = Field(default="", alias="ApplicationSubmissionDate")
    application_payment_date: str | None = Field(default="", alias="ApplicationPaymentDate")
    next_action_required_details: str | None = Field(default="", alias="NextActionRequiredDetails")
    final_decision: str | None = Field(default="", alias="FinalDecision")
    department_redirection_url: str | None = Field(default="", alias="DepartmentRedirectionURL")
    total_number_of_desks: int = Field(default=0, alias="TotalNumberOfDesks")
    current_desk_number: int = Field(default=0, alias="CurrentDeskNumber", description="0 = unassigned")
    next_desk_number: int = Field(default=0, alias="NextDeskNumber", description="0 = final desk")
    desk_details: list[DeskDetail] | None = Field(default_factory=list, alias="DeskDetails")

    @property
    def is_paid(self) -> bool:
        return bool(self.application_payment_date)

    @property
    def is_action_required(self) -> bool:
        return bool(self.next_action_required_details)

    @property
    def is_final_decision_made(self) -> bool:
        return bool(self.final_decision)

    @property
    def final_decision_status(self) -> FinalDecision | None:
        """FinalDecision as enum; None when undecided or unrecognized."""
        if not self.final_decision:
            return None
        try:
            return FinalDecision(self.final_decision)
        except ValueError:
            return None

    @property
    def progress_percentage(self) -> int:
        """Share of desks with review details, rounded to a whole percent."""
        if self.total_number_of_desks <= 0:
            return 0
        completed = len(self.desk_details or [])
        return round(completed / self.total_number_of_desks * 100)


def _normalize_desk(desk: DeskDetail) -> DeskDetail:
    return desk.model_copy(
        update={
            "desk_number": desk.desk_number or "",
            "review_action_by": desk.review_action_by or "",
            "review_action_date_time": desk.review_action_date_time or "",
            "review_action_details": desk.review_action_details or "",
        }
    )


def normalize_response(response: StatusResponse) -> StatusResponse:
    """Return a copy with every null-equivalent replaced by ``""``.

    ``DeskDetails`` of None becomes an empty list. Applying it twice gives
    the same result as applying it once.
    """
    return response.model_copy(
        update={
            "application_id": response.application_id or "",
            "service_name": response.service_name or "",
            "applicant_name": response.applicant_name or "",
            "application_submission_date": response.application_submission_date or "",
            "application_payment_date": response.application_payment_date or "",
            "next_action_required_details": response.next_action_required_details or "",
            "final_decision": response.final_decision or "",
            "department_redirection_url": response.department_redirection_url or "",
            "desk_details": [_normalize_desk(d) for d in response.desk_details or []],
        }
    )
