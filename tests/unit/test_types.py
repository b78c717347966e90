"""Tests for the wire model."""

import json
from datetime import datetime

import pytest

from track_app_python.errors import DeserializationError, FormatError
from track_app_python.types import (
    DeskDetail,
    EncryptedEnvelope,
    ErrorBody,
    FinalDecision,
    Language,
    StatusRequest,
    StatusResponse,
    deserialize_request,
    deserialize_response,
    normalize_response,
    serialize,
)
from track_app_python.utils import (
    decision_from_bool,
    error_timestamp,
    final_decision_text,
    format_date,
    is_valid_date,
    parse_date,
)


class TestStatusRequest:
    """Tests for StatusRequest."""

    def test_create_with_enum(self) -> None:
        request = StatusRequest.create("INC1", "4111", "Revenue Department", Language.MARATHI)
        assert request.language == "MR"

    def test_serialize_uses_contract_names(self, status_request: StatusRequest) -> None:
        data = json.loads(serialize(status_request))
        assert data == {
            "AppID": "INC12345678",
            "ServiceID": "4111",
            "DeptName": "Revenue Department",
            "Language": "EN",
        }

    def test_deserialize(self) -> None:
        request = deserialize_request(
            '{"AppID":"INC1","ServiceID":"4111","DeptName":"Revenue","Language":"MR"}'
        )
        assert request.app_id == "INC1"
        assert request.language == "MR"

    def test_missing_fields_parse_as_none(self) -> None:
        request = deserialize_request('{"ServiceID":"4111"}')
        assert request.app_id is None
        assert request.language is None

    def test_field_names_are_case_sensitive(self) -> None:
        request = deserialize_request('{"appid":"INC1"}')
        assert request.app_id is None

    @pytest.mark.parametrize("text", ["not json", "[]", '"text"', ""])
    def test_deserialize_rejects_non_objects(self, text: str) -> None:
        with pytest.raises(DeserializationError):
            deserialize_request(text)

    def test_deserialization_error_is_format_error(self) -> None:
        with pytest.raises(FormatError):
            deserialize_request("{")

    def test_language_values(self) -> None:
        assert Language.values() == ("EN", "MR")


class TestNormalizeResponse:
    """Tests for null-to-empty normalization."""

    def test_replaces_none(self, status_response: StatusResponse) -> None:
        normalized = normalize_response(status_response)
        assert normalized.application_payment_date == ""
        assert normalized.next_action_required_details == ""
        assert normalized.department_redirection_url == ""
        desk = normalized.desk_details[1]
        assert desk.review_action_by == ""
        assert desk.review_action_date_time == ""
        assert desk.review_action_details == ""

    def test_keeps_values(self, status_response: StatusResponse) -> None:
        normalized = normalize_response(status_response)
        assert normalized.application_id == "INC12345678"
        assert normalized.desk_details[0].review_action_by == "Clerk"
        assert normalized.estimated_disbursal_days == 7

    def test_idempotent(self, status_response: StatusResponse) -> None:
        once = normalize_response(status_response)
        assert normalize_response(once) == once

    def test_does_not_mutate_input(self, status_response: StatusResponse) -> None:
        normalize_response(status_response)
        assert status_response.application_payment_date is None
        assert status_response.desk_details[1].review_action_by is None

    def test_none_desk_list(self) -> None:
        response = StatusResponse(application_id="INC1", desk_details=None)
        assert normalize_response(response).desk_details == []

    def test_serialized_output_has_no_nulls(self, status_response: StatusResponse) -> None:
        text = serialize(normalize_response(status_response))
        assert "null" not in text
        data = json.loads(text)
        assert data["ApplicationPaymentDate"] == ""
        assert data["DeskDetails"][1] == {
            "DeskNumber": "Desk 2",
            "ReviewActionBy": "",
            "ReviewActionDateTime": "",
            "ReviewActionDetails": "",
        }

    def test_serialize_keeps_unicode(self) -> None:
        response = StatusResponse(service_name="उत्पन्न प्रमाणपत्र")
        assert "उत्पन्न प्रमाणपत्र" in serialize(response)


class TestStatusResponse:
    """Tests for response helpers."""

    def test_helpers(self, status_response: StatusResponse) -> None:
        assert not status_response.is_paid
        assert not status_response.is_action_required
        assert status_response.is_final_decision_made
        assert status_response.final_decision_status == FinalDecision.PENDING

    def test_progress_percentage(self, status_response: StatusResponse) -> None:
        assert status_response.progress_percentage == 67

    def test_progress_without_desks(self) -> None:
        assert StatusResponse(total_number_of_desks=0).progress_percentage == 0

    def test_undecided(self) -> None:
        response = StatusResponse(final_decision="")
        assert not response.is_final_decision_made
        assert response.final_decision_status is None

    def test_unknown_decision_code(self) -> None:
        assert StatusResponse(final_decision="9").final_decision_status is None

    def test_deserialize_round_trip(self, status_response: StatusResponse) -> None:
        normalized = normalize_response(status_response)
        assert deserialize_response(serialize(normalized)) == normalized

    def test_deserialize_wrong_type(self) -> None:
        with pytest.raises(DeserializationError):
            deserialize_response('{"EstimatedDisbursalDays": "seven"}')

    def test_desk_detail_defaults(self) -> None:
        desk = DeskDetail(desk_number="Desk 1")
        assert desk.review_action_by == ""

    def test_final_decision_values(self) -> None:
        assert FinalDecision.values() == ("0", "1", "2", "")


class TestEnvelope:
    """Tests for the outer bodies."""

    def test_parse(self) -> None:
        assert EncryptedEnvelope.parse('{"data": "ABCD"}').data == "ABCD"

    def test_parse_bytes(self) -> None:
        assert EncryptedEnvelope.parse(b'{"data": "ABCD"}').data == "ABCD"

    @pytest.mark.parametrize(
        "raw",
        ["", "not json", "[]", "{}", '{"data": ""}', '{"data": 12}', '{"payload": "AB"}'],
    )
    def test_parse_rejects(self, raw: str) -> None:
        with pytest.raises(FormatError):
            EncryptedEnvelope.parse(raw)

    def test_error_body(self) -> None:
        body = ErrorBody(error="Application not found").to_dict()
        assert body["error"] == "Application not found"
        assert datetime.strptime(body["timestamp"], "%Y-%m-%dT%H:%M:%S")


class TestDateFormatting:
    """Tests for the wire date format."""

    def test_format_date(self) -> None:
        assert format_date(datetime(2025, 9, 18, 17, 30, 0)) == "18-Sep-2025,17:30:00"

    def test_format_date_pads(self) -> None:
        assert format_date(datetime(2025, 1, 5, 7, 3, 9)) == "05-Jan-2025,07:03:09"

    def test_format_none(self) -> None:
        assert format_date(None) == ""

    def test_parse_date(self) -> None:
        assert parse_date("18-Sep-2025,17:30:00") == datetime(2025, 9, 18, 17, 30, 0)

    @pytest.mark.parametrize(
        "text",
        [
            "2025-09-18 17:30:00",
            "18-SEP-2025,17:30:00",
            "18-sep-2025,17:30:00",
            "18-Sep-2025 17:30:00",
            "8-Sep-2025,17:30:00",
            "31-Feb-2025,10:00:00",
            "18-Sep-2025,25:00:00",
            "18-Foo-2025,10:00:00",
            "18-Sep-2025,17:30:00\n",
            " 18-Sep-2025,17:30:00",
            "१८-Sep-२०२५,१७:३०:००",
        ],
    )
    def test_invalid_dates(self, text: str) -> None:
        assert parse_date(text) is None
        assert not is_valid_date(text)

    def test_blank_parses_to_none(self) -> None:
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_error_timestamp(self) -> None:
        assert error_timestamp(datetime(2025, 9, 18, 17, 30, 5)) == "2025-09-18T17:30:05"


class TestDecisionHelpers:
    """Tests for FinalDecision helpers."""

    def test_decision_from_bool(self) -> None:
        assert decision_from_bool(True) == "0"
        assert decision_from_bool(False) == "1"
        assert decision_from_bool(None) == ""

    def test_final_decision_text(self) -> None:
        assert final_decision_text("0") == "Approved"
        assert final_decision_text("0", "MR") == "मंजूर"
        assert final_decision_text("") == "Pending"
        assert final_decision_text("7") == "Unknown"
