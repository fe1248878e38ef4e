#!/usr/bin/env python3
from __future__ import annotations

import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from services.role_resolver.app.config import build_resolver, load_config  # noqa: E402
from services.role_resolver.app.dump import IndentingWriter  # noqa: E402


def main() -> None:
    config = load_config()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    resolver = build_resolver(config)
    writer = IndentingWriter(sys.stdout)
    writer.write_line(f"RoleResolver ({resolver.current_user_handle}):")
    writer.increase_indent()
    resolver.dump(writer)
    writer.decrease_indent()


if __name__ == "__main__":
    main()
