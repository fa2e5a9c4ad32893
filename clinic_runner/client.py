from __future__ import annotations

import asyncio
import time

import httpx

from clinic_runner.logging_conf import get_logger
from clinic_runner.types import AdvanceError, Created, CreateTokenError, Served, SmokeError, now_ms

logger = get_logger("runner.client")

TOKENS_PATH = "/api/tokens"


async def wait_for_health(base_url: str, timeout_s: float = 20.0) -> None:
    """Ping /api/health until the store is connected or raise after a timeout."""
    deadline = time.monotonic() + timeout_s
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
        while time.monotonic() < deadline:
            try:
                r = await client.get("/api/health")
                if r.status_code == 200 and r.json().get("store") == "connected":
                    logger.info("health.ok", extra={"event": "health_ok"})
                    return
            except httpx.HTTPError:
                pass
            await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def create_one(
    client: httpx.AsyncClient, patient: dict, *, retries: int = 3
) -> Created:
    """Create one token, retrying transport errors and 5xx answers.

    4xx answers are the caller's fault and are not retried.
    """
    last_err: str | None = None
    for attempt in range(retries):
        try:
            r = await client.post(TOKENS_PATH, json=patient)
        except httpx.TransportError as e:
            last_err = str(e)
        else:
            if r.status_code == 201:
                data = r.json()["data"]
                return Created(
                    token_id=data["id"],
                    token_number=data["tokenNumber"],
                    patient_name=data["patientName"],
                    is_vip=data["isVIP"],
                )
            if r.status_code < 500:
                raise CreateTokenError(f"rejected {patient.get('patientName')!r}: {r.text}")
            last_err = f"HTTP {r.status_code}: {r.text}"
        logger.warning(
            "create.retry",
            extra={"event": "create_retry", "attempt": attempt + 1, "error": last_err},
        )
    raise CreateTokenError(last_err or "create failed")


async def create_all(base_url: str, patients: list[dict], *, concurrency: int = 10) -> list[Created]:
    """Create tokens concurrently and return the ones that succeeded.

    Failures are logged and skipped so the run can still check the rest.
    """
    sem = asyncio.Semaphore(max(1, concurrency))

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:

        async def _bounded(p: dict) -> Created:
            async with sem:
                return await create_one(client, p)

        results = await asyncio.gather(*(_bounded(p) for p in patients), return_exceptions=True)

    created: list[Created] = []
    for res in results:
        if isinstance(res, BaseException):
            logger.warning("create.failed", extra={"event": "create_failed", "error": str(res)})
            continue
        created.append(res)
    logger.info(
        "create.summary",
        extra={
            "event": "create_summary",
            "requested": len(patients),
            "succeeded": len(created),
            "failed": len(results) - len(created),
        },
    )
    return created


async def drain_queue(base_url: str, *, max_steps: int) -> list[Served]:
    """Advance until the server reports an empty queue.

    After every advance the current-token endpoint must agree with the token
    the advance returned.
    """
    served: list[Served] = []
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        for _ in range(max_steps):
            r = await client.patch(f"{TOKENS_PATH}/next")
            r.raise_for_status()
            data = r.json()["data"]
            if data is None:
                return served
            served.append(
                Served(
                    token_id=data["id"],
                    token_number=data["tokenNumber"],
                    is_vip=data["isVIP"],
                    served_at_ms=now_ms(),
                )
            )
            cur = await client.get(f"{TOKENS_PATH}/current")
            cur.raise_for_status()
            current = cur.json()["data"]
            if current is None or current["id"] != data["id"]:
                raise AdvanceError(f"current token disagrees with advance result {data['id']}")
    raise AdvanceError(f"queue still not empty after {max_steps} advances")


async def fetch_tokens(base_url: str) -> list[dict]:
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        r = await client.get(TOKENS_PATH)
        r.raise_for_status()
        return r.json()["data"]
