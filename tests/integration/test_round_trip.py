"""
End-to-end tests: portal client against an in-process department.
"""

import json

import pytest

from track_app_python import ProtocolConfig, ServerAdapter, StatusRequest, TrackAppClient
from track_app_python.errors import RemoteError
from track_app_python.protocol import PullRequestPayload, PullStatusHandler, PushRequestToken
from track_app_python.types import normalize_response


class TestRoundTrip:
    """Client and server sharing one configuration."""

    @pytest.mark.asyncio
    async def test_english_status(self, config, department_client, status_response) -> None:
        async with department_client:
            client = TrackAppClient.create(config, http_client=department_client)
            result = await client.get_application_status("INC12345678", "4111")

        assert result == normalize_response(status_response)
        assert result.progress_percentage == 67

    @pytest.mark.asyncio
    async def test_marathi_status(self, config, department_client) -> None:
        async with department_client:
            client = TrackAppClient.create(config, http_client=department_client)
            result = await client.get_application_status("INC12345678", "4111", "MR")

        assert result.service_name == "उत्पन्न प्रमाणपत्र"
        assert result.applicant_name == "रमेश पाटील"

    @pytest.mark.asyncio
    async def test_not_found(self, config, department_client) -> None:
        async with department_client:
            client = TrackAppClient.create(config, http_client=department_client)
            with pytest.raises(RemoteError) as exc_info:
                await client.get_application_status("NONEXISTENT999", "4111")

        assert exc_info.value.is_not_found
        assert exc_info.value.error_message == "Application not found"

    @pytest.mark.asyncio
    async def test_mismatched_keys(self, config, bilingual_provider, serve_department, status_request) -> None:
        """A department with a different key cannot read the request."""
        other = ProtocolConfig(encryption_key="ZYXWVUTSRQPONMLKJIHGFEDC", encryption_iv="87654321")
        adapter = ServerAdapter(other, bilingual_provider)

        async with serve_department(adapter) as http:
            client = TrackAppClient.create(config, http_client=http)
            with pytest.raises(RemoteError) as exc_info:
                await client.fetch_status(status_request)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_server_rejects_what_client_would_not_send(self, config, codec, department_client) -> None:
        """Requests that bypass client validation are rejected by the department."""
        request = StatusRequest(app_id="INC12345678", service_id="4111", dept_name="Revenue", language="FR")
        body = {"data": codec.encrypt(request.model_dump_json(by_alias=True))}

        async with department_client:
            response = await department_client.post(
                f"{config.api_base_url}{config.api_endpoint}", json=body
            )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed: Language must be 'EN' or 'MR'"


class TestLegacyHandshakes:
    """Push token and pull payload exchanged between the two roles."""

    def test_push_token(self, codec) -> None:
        sealed = PushRequestToken.build(
            "USR01", "20250918173000", "SESS42", "AUTH-TOKEN", checksum_key="shared-secret"
        ).seal(codec)

        token = PushRequestToken.open_sealed(sealed, codec)
        token.verify("shared-secret")
        assert token.session_id == "SESS42"

    @pytest.mark.asyncio
    async def test_pull_payload(self, config, codec) -> None:
        received: list[PullRequestPayload] = []
        payload = PullRequestPayload.build(
            checksum_key=config.checksum_key,
            track_id="TRK001",
            application_id="INC12345678",
            application_status="Approved",
            remark="प्रमाणपत्र जारी",
        )

        result = await PullStatusHandler(config).handle(payload.seal(codec), received.append)

        assert result.status_code == 200
        assert json.loads(result.to_json())["status"] == "accepted"
        assert received[0].remark == "प्रमाणपत्र जारी"
