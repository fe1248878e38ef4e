#!/usr/bin/env python3
"""Generate a deterministic role assignments file for local runs of the role resolver."""

from __future__ import annotations

import json
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = ROOT / "data"
OUTPUT_PATH = DATA_DIR / "role_assignments.json"

ROLE_CALL_REDIRECTION_APP = "android.app.role.PROXY_CALLING_APP"
ROLE_CAR_MODE_DIALER = "android.app.role.CAR_MODE_DIALER_APP"
ROLE_CALL_SCREENING = "android.app.role.CALL_SCREENING_APP"
ROLE_CALL_COMPANION_APP = "android.app.role.CALL_COMPANION_APP"

USER_ASSIGNMENTS = {
    0: {
        ROLE_CALL_REDIRECTION_APP: ["com.example.redirector"],
        ROLE_CALL_SCREENING: ["com.example.screener", "com.example.screener.backup"],
        ROLE_CAR_MODE_DIALER: ["com.example.cardialer"],
        ROLE_CALL_COMPANION_APP: ["com.example.watch", "com.example.hearingaid"],
    },
    # Secondary user with a partial setup: no redirection app, empty screening role.
    10: {
        ROLE_CALL_SCREENING: [],
        ROLE_CAR_MODE_DIALER: ["com.example.work.cardialer"],
        ROLE_CALL_COMPANION_APP: None,
    },
}


def build_payload() -> dict[str, object]:
    users = []
    for user_id in sorted(USER_ASSIGNMENTS):
        roles = USER_ASSIGNMENTS[user_id]
        users.append(
            {
                "user_id": user_id,
                "roles": {role_name: roles[role_name] for role_name in sorted(roles)},
            }
        )
    return {"users": users}


def main() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    OUTPUT_PATH.write_text(json.dumps(build_payload(), indent=2) + "\n", encoding="utf-8")
    print(f"Wrote {OUTPUT_PATH}")


if __name__ == "__main__":
    main()
