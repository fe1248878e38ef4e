from __future__ import annotations

from pathlib import Path

import pytest

from services.role_resolver.app.authority import HttpRoleAuthority, StaticRoleAuthority
from services.role_resolver.app.config import AppConfig, build_authority, build_resolver, load_config
from services.role_resolver.app.roles import UserHandle

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_ENV_VARS = [
    "ROLE_RESOLVER_DATA_DIR",
    "ROLE_RESOLVER_ASSIGNMENTS_PATH",
    "ROLE_AUTHORITY_BASE_URL",
    "ROLE_AUTHORITY_TIMEOUT_SECONDS",
    "ROLE_RESOLVER_USER_ID",
    "ROLE_RESOLVER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_point_at_repo_data_dir():
    config = load_config()
    assert config.data_dir == (PROJECT_ROOT / "data").resolve()
    assert config.assignments_path == (PROJECT_ROOT / "data" / "role_assignments.json").resolve()
    assert config.authority_base_url is None
    assert config.user_id == 0
    assert config.log_level == "INFO"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("ROLE_RESOLVER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ROLE_AUTHORITY_BASE_URL", "http://roles.local")
    monkeypatch.setenv("ROLE_AUTHORITY_TIMEOUT_SECONDS", "1.5")
    monkeypatch.setenv("ROLE_RESOLVER_USER_ID", "10")
    monkeypatch.setenv("ROLE_RESOLVER_LOG_LEVEL", "debug")

    config = load_config()

    assert config.assignments_path == (tmp_path / "role_assignments.json").resolve()
    assert config.authority_base_url == "http://roles.local"
    assert config.authority_timeout_seconds == 1.5
    assert config.user_id == 10
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["ten", "-1"])
def test_invalid_user_id_rejected(monkeypatch, raw):
    monkeypatch.setenv("ROLE_RESOLVER_USER_ID", raw)
    with pytest.raises(ValueError, match="ROLE_RESOLVER_USER_ID"):
        load_config()


def test_invalid_timeout_rejected(monkeypatch):
    monkeypatch.setenv("ROLE_AUTHORITY_TIMEOUT_SECONDS", "0")
    with pytest.raises(ValueError, match="ROLE_AUTHORITY_TIMEOUT_SECONDS"):
        load_config()


def test_build_authority_prefers_http_when_base_url_set(tmp_path):
    config = AppConfig(
        data_dir=tmp_path,
        assignments_path=tmp_path / "missing.json",
        authority_base_url="http://roles.local",
    )
    authority = build_authority(config)
    assert isinstance(authority, HttpRoleAuthority)
    assert authority.base_url == "http://roles.local"


def test_build_authority_requires_assignments_file(tmp_path):
    config = AppConfig(data_dir=tmp_path, assignments_path=tmp_path / "missing.json")
    with pytest.raises(FileNotFoundError):
        build_authority(config)


def test_build_resolver_from_bundled_assignments():
    config = AppConfig(
        data_dir=PROJECT_ROOT / "data",
        assignments_path=PROJECT_ROOT / "data" / "role_assignments.json",
        user_id=10,
    )
    resolver = build_resolver(config)

    assert isinstance(build_authority(config), StaticRoleAuthority)
    assert resolver.current_user_handle == UserHandle(10)
    assert resolver.get_car_mode_dialer_app() == "com.example.work.cardialer"
    assert resolver.get_default_call_screening_app() is None
    assert resolver.get_call_companion_apps() == []
