from __future__ import annotations

from typing import Any, Optional

from services.role_resolver.app.dump import render_dump
from services.role_resolver.app.roles import (
    ROLE_CALL_COMPANION_APP,
    ROLE_CALL_REDIRECTION_APP,
    ROLE_CALL_SCREENING,
    ROLE_CAR_MODE_DIALER,
    RoleResolver,
    UserHandle,
)

ROLE_KEYS = {
    "call_redirection": ROLE_CALL_REDIRECTION_APP,
    "call_screening": ROLE_CALL_SCREENING,
    "car_mode_dialer": ROLE_CAR_MODE_DIALER,
    "call_companion": ROLE_CALL_COMPANION_APP,
}
SINGLE_HOLDER_ROLE_KEYS = {"call_redirection", "call_screening", "car_mode_dialer"}


def _validate_role_key(role: str) -> str:
    normalized = role.lower().strip()
    if normalized not in ROLE_KEYS:
        raise ValueError(f"Invalid role '{role}'. Expected one of: {sorted(ROLE_KEYS)}")
    return normalized


def _validate_single_holder_role_key(role: str) -> str:
    normalized = _validate_role_key(role)
    if normalized not in SINGLE_HOLDER_ROLE_KEYS:
        raise ValueError(
            f"Role '{role}' does not take a single override. "
            "Use set_call_companion_override for call companion apps."
        )
    return normalized


def _validate_package_name(package_name: str) -> str:
    if not package_name.strip():
        raise ValueError("package_name must not be empty.")
    return package_name


def _current_user_id(resolver: RoleResolver) -> Optional[int]:
    user = resolver.current_user_handle
    return user.identifier if user is not None else None


def role_holders_snapshot(resolver: RoleResolver) -> dict[str, Any]:
    return {
        "user_id": _current_user_id(resolver),
        "call_redirection": resolver.get_default_call_redirection_app(),
        "call_screening": resolver.get_default_call_screening_app(),
        "car_mode_dialer": resolver.get_car_mode_dialer_app(),
        "call_companion": resolver.get_call_companion_apps(),
    }


def set_role_override_action(
    resolver: RoleResolver,
    role: str,
    package_name: Optional[str] = None,
) -> dict[str, Any]:
    normalized_role = _validate_single_holder_role_key(role)
    if normalized_role == "call_redirection":
        resolver.set_test_default_call_redirection_app(package_name)
        resolved = resolver.get_default_call_redirection_app()
    elif normalized_role == "call_screening":
        resolver.set_test_default_call_screening_app(package_name)
        resolved = resolver.get_default_call_screening_app()
    else:
        resolver.set_test_auto_mode_app(package_name)
        resolved = resolver.get_car_mode_dialer_app()

    return {
        "role": normalized_role,
        "role_name": ROLE_KEYS[normalized_role],
        "override": package_name,
        "resolved": resolved,
    }


def set_call_companion_override_action(
    resolver: RoleResolver,
    package_name: str,
    is_added: bool,
) -> dict[str, Any]:
    package_name = _validate_package_name(package_name)
    resolver.add_or_remove_test_call_companion_app(package_name, is_added)
    return {
        "role": "call_companion",
        "role_name": ROLE_CALL_COMPANION_APP,
        "overrides": resolver.override_companion_apps,
        "resolved": resolver.get_call_companion_apps(),
    }


def reset_overrides_action(resolver: RoleResolver) -> dict[str, Any]:
    resolver.reset_test_overrides()
    return role_holders_snapshot(resolver)


def set_current_user_action(resolver: RoleResolver, user_id: int) -> dict[str, Any]:
    if user_id < 0:
        raise ValueError(f"user_id must be >= 0. Received {user_id}.")
    resolver.set_current_user_handle(UserHandle(user_id))
    return role_holders_snapshot(resolver)


def dump_action(resolver: RoleResolver) -> dict[str, Any]:
    return {"dump": render_dump(resolver)}
