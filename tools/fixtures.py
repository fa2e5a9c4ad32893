#!/usr/bin/env python3
"""Write fixtures/patients.json for the smoke runner.

The mix is deliberate: VIPs appear late in the list so a correct server has to
serve them ahead of earlier regular tokens, and phone numbers use the
separators real users type.
"""
from __future__ import annotations

import json
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
FX = ROOT / "fixtures"
OUT = FX / "patients.json"

PATIENTS = [
    {"patientName": "Amina Yusuf", "phoneNumber": "(555) 010-2001", "isVIP": False},
    {"patientName": "Bruno Costa", "phoneNumber": "555-010-2002", "isVIP": False},
    {"patientName": "Chen Wei", "phoneNumber": "+1 555 010 2003", "isVIP": False},
    {"patientName": "Dana Levi", "phoneNumber": "5550102004", "isVIP": False},
    {"patientName": "Emeka Obi", "phoneNumber": "555.010.2005", "isVIP": True},
    {"patientName": "Farah Haddad", "phoneNumber": "(555) 010-2006", "isVIP": False},
    {"patientName": "Goran Petrov", "phoneNumber": "555 010 2007", "isVIP": False},
    {"patientName": "Hana Sato", "phoneNumber": "+44 20 7946 0958", "isVIP": True},
    {"patientName": "Ivan Horvat", "phoneNumber": "555-010-2009", "isVIP": False},
    {"patientName": "Julia Nowak", "phoneNumber": "5550102010", "isVIP": False},
]


def main() -> None:
    FX.mkdir(parents=True, exist_ok=True)
    OUT.write_text(json.dumps(PATIENTS, indent=2) + "\n", encoding="utf-8")
    vips = sum(1 for p in PATIENTS if p["isVIP"])
    print(f"Wrote {len(PATIENTS)} patients ({vips} VIP) to {OUT.relative_to(ROOT)}")


if __name__ == "__main__":
    main()
