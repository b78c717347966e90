#!/usr/bin/env python3
"""
Envelope pipeline performance benchmarks.

Measures cipher, checksum and full handler throughput.
"""

import asyncio
import json
import time
from typing import Any

from track_app_python import (
    DeskDetail,
    EnvelopeHandler,
    ProtocolConfig,
    StatusRequest,
    StatusResponse,
    TripleDesCodec,
    compute_checksum,
)
from track_app_python.server import StaticDataProvider
from track_app_python.types import serialize

CONFIG = ProtocolConfig(encryption_key="ABCDEFGHIJKLMNOPQRSTUVWX", encryption_iv="12345678")

RESPONSE = StatusResponse(
    application_id="INC12345678",
    service_name="Income Certificate",
    applicant_name="Ramesh Patil",
    estimated_disbursal_days=7,
    application_submission_date="18-Sep-2025,17:30:00",
    final_decision="2",
    total_number_of_desks=3,
    current_desk_number=2,
    next_desk_number=3,
    desk_details=[
        DeskDetail(desk_number=f"Desk {i}", review_action_by="Clerk", review_action_date_time="19-Sep-2025,10:15:00")
        for i in range(1, 3)
    ],
)


def _result(name: str, iterations: int, elapsed: float) -> dict[str, Any]:
    return {
        "name": name,
        "iterations": iterations,
        "elapsed_seconds": elapsed,
        "throughput_ops": iterations / elapsed,
        "latency_us": (elapsed / iterations) * 1_000_000,
    }


def benchmark_cipher(iterations: int = 5000) -> dict[str, Any]:
    """Benchmark encrypt + decrypt of a typical response body."""
    codec = TripleDesCodec.from_config(CONFIG)
    text = serialize(RESPONSE)

    start = time.perf_counter()
    for _ in range(iterations):
        codec.decrypt(codec.encrypt(text))
    return _result("Triple-DES round trip", iterations, time.perf_counter() - start)


def benchmark_checksum(iterations: int = 5000) -> dict[str, Any]:
    """Benchmark CRC-32 over a pull payload sized string."""
    text = "|".join(["TRK001", "MH", "USR01", "4111", "INC12345678"] + ["value"] * 15 + ["secret"])

    start = time.perf_counter()
    for _ in range(iterations):
        compute_checksum(text)
    return _result("CRC-32 checksum", iterations, time.perf_counter() - start)


async def benchmark_handler(iterations: int = 2000) -> dict[str, Any]:
    """Benchmark the full server pipeline."""
    handler = EnvelopeHandler(CONFIG, StaticDataProvider({"INC12345678": RESPONSE}))
    codec = TripleDesCodec.from_config(CONFIG)
    request = StatusRequest.create("INC12345678", "4111", "Revenue Department")
    body = json.dumps({"data": codec.encrypt(serialize(request))})

    start = time.perf_counter()
    for _ in range(iterations):
        await handler.process(body)
    return _result("EnvelopeHandler.process", iterations, time.perf_counter() - start)


async def run_benchmarks() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("track-app-python Envelope Benchmarks")
    print("=" * 60)
    print()

    for result in (benchmark_cipher(), benchmark_checksum(), await benchmark_handler()):
        print(f"{result['name']}:")
        print(f"  Throughput: {result['throughput_ops']:.0f} ops/sec")
        print(f"  Latency: {result['latency_us']:.2f} µs/op")
        print()


if __name__ == "__main__":
    asyncio.run(run_benchmarks())
