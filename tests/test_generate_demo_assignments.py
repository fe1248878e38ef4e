from __future__ import annotations

import json
import os
import subprocess
import sys
import unittest
from pathlib import Path

from services.role_resolver.app.authority import StaticRoleAuthority
from services.role_resolver.app.roles import (
    ALL_ROLES,
    ROLE_CALL_COMPANION_APP,
    ROLE_CALL_SCREENING,
    UserHandle,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
GENERATOR_SCRIPT = PROJECT_ROOT / "scripts" / "generate_demo_assignments.py"
DUMP_SCRIPT = PROJECT_ROOT / "scripts" / "dump_roles.py"
ASSIGNMENTS_PATH = PROJECT_ROOT / "data" / "role_assignments.json"


class DemoAssignmentsGenerationTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        subprocess.run(
            [sys.executable, str(GENERATOR_SCRIPT)],
            cwd=PROJECT_ROOT,
            check=True,
        )
        cls.payload = json.loads(ASSIGNMENTS_PATH.read_text(encoding="utf-8"))

    def test_system_user_holds_every_role(self) -> None:
        system_user = next(entry for entry in self.payload["users"] if entry["user_id"] == 0)
        self.assertEqual(sorted(system_user["roles"]), sorted(ALL_ROLES))
        for role_name in ALL_ROLES:
            self.assertGreaterEqual(len(system_user["roles"][role_name]), 1, role_name)

    def test_secondary_user_covers_empty_and_null_holders(self) -> None:
        authority = StaticRoleAuthority.from_file(ASSIGNMENTS_PATH)
        self.assertEqual(authority.get_role_holders_as_user(ROLE_CALL_SCREENING, UserHandle(10)), [])
        self.assertIsNone(authority.get_role_holders_as_user(ROLE_CALL_COMPANION_APP, UserHandle(10)))

    def test_output_is_deterministic(self) -> None:
        first = ASSIGNMENTS_PATH.read_text(encoding="utf-8")
        subprocess.run([sys.executable, str(GENERATOR_SCRIPT)], cwd=PROJECT_ROOT, check=True)
        self.assertEqual(ASSIGNMENTS_PATH.read_text(encoding="utf-8"), first)

    def test_dump_script_prints_generated_assignments(self) -> None:
        env = dict(os.environ)
        env["ROLE_RESOLVER_ASSIGNMENTS_PATH"] = str(ASSIGNMENTS_PATH)
        env["ROLE_RESOLVER_USER_ID"] = "0"
        env.pop("ROLE_AUTHORITY_BASE_URL", None)
        result = subprocess.run(
            [sys.executable, str(DUMP_SCRIPT)],
            cwd=PROJECT_ROOT,
            env=env,
            check=True,
            capture_output=True,
            text=True,
        )
        lines = result.stdout.splitlines()
        self.assertEqual(lines[0], "RoleResolver (UserHandle{0}):")
        self.assertIn(
            "  DefaultCallCompanionApps: (override ) com.example.watch, com.example.hearingaid",
            lines,
        )


if __name__ == "__main__":
    unittest.main()
