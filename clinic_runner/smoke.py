#!/usr/bin/env python3
"""High-level smoke runner against a live server.

Steps:
- wait for server health
- create every fixture patient concurrently (tolerates per-request failures)
- advance the queue until it reports empty, checking /current after each step
- fetch all tokens and emit a compact summary and exit code
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from clinic_runner.cli import parse_args
from clinic_runner.client import create_all, drain_queue, fetch_tokens, wait_for_health
from clinic_runner.logging_conf import get_logger, setup_logging
from clinic_runner.utils import load_patients, summarize

setup_logging()
logger = get_logger("runner")


async def run_smoke(
    *, base_url: str, patients_path: Path, concurrency: int = 10, timeout_s: float = 20.0
) -> int:
    await wait_for_health(base_url, timeout_s=timeout_s)
    patients = load_patients(patients_path)
    created = await create_all(base_url, patients, concurrency=concurrency)
    # Tokens left waiting by earlier runs are drained too.
    before = await fetch_tokens(base_url)
    served = await drain_queue(base_url, max_steps=len(before) + 1)
    final_tokens = await fetch_tokens(base_url)
    summary, exit_code = summarize(created=created, served=served, final_tokens=final_tokens)
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv or sys.argv[1:])
    code = asyncio.run(
        run_smoke(
            base_url=args.base_url,
            patients_path=Path(args.patients),
            concurrency=args.concurrency,
            timeout_s=args.timeout,
        )
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
