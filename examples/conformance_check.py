#!/usr/bin/env python3
"""
Department onboarding conformance check.

Runs the twelve protocol probes against a department deployment and
prints the report. Exits non-zero when any probe fails.

Usage:
    export TRACK_APP_ENCRYPTION_KEY="<24 characters>"
    export TRACK_APP_ENCRYPTION_IV="<8 characters>"
    python examples/conformance_check.py https://dept.example.gov.in
"""

import asyncio
import sys

from track_app_python import ProtocolConfig
from track_app_python.conformance import ConformanceChecker


async def main(base_url: str) -> int:
    """Run the checks and print the report."""
    config = ProtocolConfig.from_env()
    async with ConformanceChecker(config, base_url) as checker:
        report = await checker.run()
    print(report.render_text())
    return 0 if report.passed else 1


if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:5000"
    sys.exit(asyncio.run(main(url)))
