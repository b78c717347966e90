#!/usr/bin/env python3
"""
Portal-side status lookup example.

Fetches the status of one application from a department endpoint and
prints the review progress.

Usage:
    export TRACK_APP_ENCRYPTION_KEY="<24 characters>"
    export TRACK_APP_ENCRYPTION_IV="<8 characters>"
    export TRACK_APP_API_BASE_URL="https://dept.example.gov.in"
    export TRACK_APP_DEPARTMENT_NAME="Revenue Department"
    python examples/portal_client.py INC12345678 4111 MR
"""

import asyncio
import sys

from track_app_python import ProtocolConfig, RemoteError, RequestFailedError, TrackAppClient
from track_app_python.utils import final_decision_text


async def main(app_id: str, service_id: str, language: str) -> None:
    """Look up one application and print a summary."""
    config = ProtocolConfig.from_env()

    async with TrackAppClient.create(config) as client:
        try:
            status = await client.get_application_status(app_id, service_id, language)
        except RemoteError as e:
            if e.is_not_found:
                print(f"Application {app_id} not found")
                return
            print(f"Department rejected the request ({e.status_code}): {e.error_message}")
            return
        except RequestFailedError as e:
            print(f"Department unreachable after {e.attempts} attempts: {e.last_error}")
            return

    print(f"{status.application_id}: {status.service_name}")
    print(f"Applicant: {status.applicant_name}")
    print(f"Decision: {final_decision_text(status.final_decision, language)}")
    print(f"Progress: {status.progress_percentage}% ({status.current_desk_number}/{status.total_number_of_desks} desks)")
    for desk in status.desk_details or []:
        print(f"  {desk.desk_number}: {desk.review_action_by or '-'} {desk.review_action_date_time}")
        if desk.review_action_details:
            print(f"      {desk.review_action_details}")
    if status.is_action_required:
        print(f"Action required: {status.next_action_required_details}")


if __name__ == "__main__":
    args = sys.argv[1:] or ["INC12345678", "4111", "EN"]
    if len(args) == 2:
        args.append("EN")
    asyncio.run(main(*args[:3]))
