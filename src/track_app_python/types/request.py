"""
Status request sent by the initiating side.

Decrypted form of the request body:
``{"AppID": ..., "ServiceID": ..., "DeptName": ..., "Language": "EN"|"MR"}``
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    """Response language requested by the portal."""

    ENGLISH = "EN"
    MARATHI = "MR"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


class StatusRequest(BaseModel):
    """Application status inquiry.

    Fields are optional at parse time so that a missing value is reported
    by request validation ("AppID is required") rather than as a format
    error.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    app_id: str | None = Field(default=None, alias="AppID", description="Application ID, e.g. INC12345678")
    service_id: str | None = Field(default=None, alias="ServiceID", description="Department service code")
    dept_name: str | None = Field(default=None, alias="DeptName", description="Department name")
    language: str | None = Field(default=None, alias="Language", description="EN or MR")

    @classmethod
    def create(
        cls,
        app_id: str,
        service_id: str,
        dept_name: str,
        language: Language | str = Language.ENGLISH,
    ) -> StatusRequest:
        """Create a request with the language given as enum or code."""
        code = language.value if isinstance(language, Language) else language
        return cls(app_id=app_id, service_id=service_id, dept_name=dept_name, language=code)
