from __future__ import annotations

import json
from collections import Counter
from pathlib import Path

from clinic_runner.types import Created, Served, SmokeError


def load_patients(path: Path, minimum: int = 1) -> list[dict]:
    """Read the patient fixture list, checking its basic shape."""
    if not path.exists():
        raise SmokeError(f"patients file not found: {path}")
    try:
        patients = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SmokeError(f"patients file is not valid JSON: {path}") from e
    if not isinstance(patients, list) or len(patients) < minimum:
        raise SmokeError(f"expected a list of at least {minimum} patients in {path}")
    for p in patients:
        if not isinstance(p, dict) or "patientName" not in p or "phoneNumber" not in p:
            raise SmokeError(f"patient entry missing patientName/phoneNumber: {p!r}")
    return patients


def out_of_order(served: list[Served]) -> list[int]:
    """Token numbers served before a token that should have gone first.

    With no creates during the drain, the served sequence must already be
    sorted by (VIP first, lowest number).
    """
    bad: list[int] = []
    for prev, cur in zip(served, served[1:]):
        if (not prev.is_vip, prev.token_number) > (not cur.is_vip, cur.token_number):
            bad.append(prev.token_number)
    return bad


def summarize(
    created: list[Created], served: list[Served], final_tokens: list[dict]
) -> tuple[dict, int]:
    """Compute the summary dict and an exit code from what the run observed."""
    counts = Counter(t["tokenNumber"] for t in final_tokens)
    duplicates = sorted(n for n, c in counts.items() if c > 1)
    still_serving = [t["tokenNumber"] for t in final_tokens if t["status"] == "serving"]
    created_ids = {c.token_id for c in created}
    served_ids = {s.token_id for s in served}
    never_served = sorted(c.token_number for c in created if c.token_id not in served_ids)
    misordered = out_of_order(served)

    summary = {
        "component": "runner",
        "event": "summary",
        "created_count": len(created),
        "served_count": len(served),
        "served_from_run": len(created_ids & served_ids),
        "vip_served": sum(1 for s in served if s.is_vip),
        "duplicate_numbers": duplicates,
        "serving_after_drain": still_serving,
        "never_served": never_served,
        "out_of_order": misordered,
    }
    ok = (
        len(created) > 0
        and not duplicates
        and len(still_serving) <= 1
        and not never_served
        and not misordered
    )
    return summary, 0 if ok else 1
