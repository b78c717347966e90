"""Root pytest fixtures for track-app-python tests."""

from __future__ import annotations

import pytest

from track_app_python.config import ProtocolConfig
from track_app_python.crypto import TripleDesCodec
from track_app_python.server import StaticDataProvider
from track_app_python.types import DeskDetail, StatusRequest, StatusResponse

TEST_KEY = "ABCDEFGHIJKLMNOPQRSTUVWX"
TEST_IV = "12345678"
TEST_CHECKSUM_KEY = "shared-secret"
TEST_BASE_URL = "https://dept.example.gov.in"


@pytest.fixture
def config() -> ProtocolConfig:
    """Protocol configuration with a known key/IV and no backoff."""
    return ProtocolConfig(
        encryption_key=TEST_KEY,
        encryption_iv=TEST_IV,
        checksum_key=TEST_CHECKSUM_KEY,
        max_retries=2,
        retry_delay=0,
        timeout=5,
        api_base_url=TEST_BASE_URL,
        department_name="Revenue Department",
    )


@pytest.fixture
def codec(config: ProtocolConfig) -> TripleDesCodec:
    return TripleDesCodec.from_config(config)


@pytest.fixture
def status_request() -> StatusRequest:
    return StatusRequest.create(
        app_id="INC12345678",
        service_id="4111",
        dept_name="Revenue Department",
        language="EN",
    )


@pytest.fixture
def status_response() -> StatusResponse:
    """A response with some missing values left as None."""
    return StatusResponse(
        application_id="INC12345678",
        service_name="Income Certificate",
        applicant_name="Ramesh Patil",
        estimated_disbursal_days=7,
        application_submission_date="18-Sep-2025,17:30:00",
        application_payment_date=None,
        next_action_required_details=None,
        final_decision="2",
        department_redirection_url=None,
        total_number_of_desks=3,
        current_desk_number=2,
        next_desk_number=3,
        desk_details=[
            DeskDetail(
                desk_number="Desk 1",
                review_action_by="Clerk",
                review_action_date_time="19-Sep-2025,10:15:00",
                review_action_details="Documents verified",
            ),
            DeskDetail(
                desk_number="Desk 2",
                review_action_by=None,
                review_action_date_time=None,
                review_action_details=None,
            ),
        ],
    )


@pytest.fixture
def provider(status_response: StatusResponse) -> StaticDataProvider:
    return StaticDataProvider({"INC12345678": status_response})
