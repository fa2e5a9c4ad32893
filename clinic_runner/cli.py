from __future__ import annotations

import argparse
import os
from pathlib import Path


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the smoke runner."""
    parser = argparse.ArgumentParser(description="Clinic queue smoke runner")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:5000"))
    parser.add_argument(
        "--patients",
        default=str(Path(__file__).resolve().parents[1] / "fixtures" / "patients.json"),
        help="JSON list of {patientName, phoneNumber, isVIP} written by tools/fixtures.py",
    )
    parser.add_argument("--concurrency", type=int, default=10, help="parallel create requests")
    parser.add_argument("--timeout", type=float, default=20.0, help="seconds to wait for /api/health")
    return parser.parse_args(argv)
