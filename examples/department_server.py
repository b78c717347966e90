#!/usr/bin/env python3
"""
Department-side example.

Implements a data provider and answers portal requests through the
ServerAdapter. To keep the example self-contained the "portal" is a
TrackAppClient wired to the adapter through an in-process httpx
transport; in production the host framework passes the raw request body
to ``adapter.handle`` and writes the reply back.

Usage:
    python examples/department_server.py
"""

import asyncio
from datetime import datetime

import httpx

from track_app_python import (
    ApplicationNotFoundError,
    DeskDetail,
    ProtocolConfig,
    ServerAdapter,
    StatusResponse,
    TrackAppClient,
)
from track_app_python.utils import format_date

SERVICE_NAMES = {"EN": "Income Certificate", "MR": "उत्पन्न प्रमाणपत्र"}


class RevenueDepartment:
    """Answers from an in-memory table; a real department would query its database."""

    def __init__(self) -> None:
        self._applications = {
            "INC12345678": {
                "applicant": "Ramesh Patil",
                "submitted": datetime(2025, 9, 18, 17, 30),
                "paid": None,
                "reviews": [("Desk 1", "Clerk", datetime(2025, 9, 19, 10, 15), "Documents verified")],
            }
        }

    async def get_application_status(
        self, application_id: str, service_id: str, department_name: str, language: str
    ) -> StatusResponse:
        record = self._applications.get(application_id)
        if record is None:
            raise ApplicationNotFoundError(application_id=application_id)

        desks = [
            DeskDetail(
                desk_number=label,
                review_action_by=by,
                review_action_date_time=format_date(when),
                review_action_details=details,
            )
            for label, by, when, details in record["reviews"]
        ]
        return StatusResponse(
            application_id=application_id,
            service_name=SERVICE_NAMES.get(language, SERVICE_NAMES["EN"]),
            applicant_name=record["applicant"],
            estimated_disbursal_days=7,
            application_submission_date=format_date(record["submitted"]),
            application_payment_date=format_date(record["paid"]),
            final_decision="",
            total_number_of_desks=3,
            current_desk_number=len(desks) + 1,
            next_desk_number=len(desks) + 2,
            desk_details=desks,
        )


async def main() -> None:
    """Serve two lookups from the in-process department."""
    config = ProtocolConfig(
        encryption_key="ABCDEFGHIJKLMNOPQRSTUVWX",
        encryption_iv="12345678",
        enable_logging=True,
        department_name="Revenue Department",
    )
    adapter = ServerAdapter(config, RevenueDepartment())

    async def route(request: httpx.Request) -> httpx.Response:
        reply = await adapter.handle(request.content)
        return httpx.Response(reply.status_code, content=reply.body_bytes, headers=reply.headers)

    async with httpx.AsyncClient(transport=httpx.MockTransport(route)) as http_client:
        client = TrackAppClient.create(
            config, base_url="https://dept.example.gov.in", http_client=http_client
        )
        for language in ("EN", "MR"):
            status = await client.get_application_status("INC12345678", "4111", language)
            print(f"[{language}] {status.service_name}: {status.progress_percentage}% reviewed")

        reply = await adapter.handle(b'{"data": "not-hex"}')
        print(f"Malformed request -> {reply.status_code} {reply.body}")


if __name__ == "__main__":
    asyncio.run(main())
