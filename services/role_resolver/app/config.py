from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from services.role_resolver.app.authority import (
    DEFAULT_TIMEOUT_SECONDS,
    HttpRoleAuthority,
    StaticRoleAuthority,
)
from services.role_resolver.app.roles import RoleAuthority, RoleResolver, UserHandle

ASSIGNMENTS_FILE_NAME = "role_assignments.json"


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    assignments_path: Path
    authority_base_url: Optional[str] = None
    authority_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    user_id: int = 0
    log_level: str = "INFO"


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer. Received '{raw}'.") from exc
    if value < 0:
        raise ValueError(f"{name} must be >= 0. Received {value}.")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number. Received '{raw}'.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than 0. Received {value}.")
    return value


def load_config() -> AppConfig:
    data_dir = Path(os.getenv("ROLE_RESOLVER_DATA_DIR", str(_project_root() / "data"))).resolve()
    assignments_path = Path(
        os.getenv("ROLE_RESOLVER_ASSIGNMENTS_PATH", str(data_dir / ASSIGNMENTS_FILE_NAME))
    ).resolve()
    base_url = os.getenv("ROLE_AUTHORITY_BASE_URL", "").strip() or None
    return AppConfig(
        data_dir=data_dir,
        assignments_path=assignments_path,
        authority_base_url=base_url,
        authority_timeout_seconds=_float_env("ROLE_AUTHORITY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        user_id=_int_env("ROLE_RESOLVER_USER_ID", 0),
        log_level=os.getenv("ROLE_RESOLVER_LOG_LEVEL", "INFO").upper(),
    )


def build_authority(config: AppConfig) -> RoleAuthority:
    if config.authority_base_url:
        return HttpRoleAuthority(
            base_url=config.authority_base_url,
            timeout_seconds=config.authority_timeout_seconds,
        )
    return StaticRoleAuthority.from_file(config.assignments_path)


def build_resolver(config: Optional[AppConfig] = None) -> RoleResolver:
    config = config or load_config()
    return RoleResolver(
        authority=build_authority(config),
        current_user_handle=UserHandle(config.user_id),
    )
