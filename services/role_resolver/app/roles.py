from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from services.role_resolver.app.dump import IndentingWriter

ROLE_CALL_REDIRECTION_APP = "android.app.role.PROXY_CALLING_APP"
ROLE_CAR_MODE_DIALER = "android.app.role.CAR_MODE_DIALER_APP"
ROLE_CALL_SCREENING = "android.app.role.CALL_SCREENING_APP"
ROLE_CALL_COMPANION_APP = "android.app.role.CALL_COMPANION_APP"

ALL_ROLES = (
    ROLE_CALL_REDIRECTION_APP,
    ROLE_CALL_SCREENING,
    ROLE_CAR_MODE_DIALER,
    ROLE_CALL_COMPANION_APP,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserHandle:
    identifier: int

    def __post_init__(self) -> None:
        if self.identifier < 0:
            raise ValueError(f"user identifier must be >= 0. Received {self.identifier}.")

    def __str__(self) -> str:
        return f"UserHandle{{{self.identifier}}}"


USER_SYSTEM = UserHandle(0)


class RoleAuthority(Protocol):
    def get_role_holders_as_user(
        self,
        role_name: str,
        user: Optional[UserHandle],
    ) -> Optional[list[str]]:
        ...


def first_holder(holders: Optional[list[str]]) -> Optional[str]:
    if not holders:
        return None
    return holders[0]


class RoleResolver:
    """Answers which package holds a telephony role for the active user.

    Test overrides win over the authority for the single-holder roles. For
    call companion apps the overrides are appended to the authority's holders.
    Not thread-safe; callers serialize access.
    """

    def __init__(
        self,
        authority: RoleAuthority,
        current_user_handle: Optional[UserHandle] = None,
    ) -> None:
        self._authority = authority
        self._current_user_handle = current_user_handle
        self._override_redirection_app: Optional[str] = None
        self._override_screening_app: Optional[str] = None
        self._override_car_mode_app: Optional[str] = None
        self._override_companion_apps: list[str] = []

    @property
    def current_user_handle(self) -> Optional[UserHandle]:
        return self._current_user_handle

    @property
    def override_companion_apps(self) -> list[str]:
        return list(self._override_companion_apps)

    def get_default_call_redirection_app(self) -> Optional[str]:
        if self._override_redirection_app is not None:
            return self._override_redirection_app
        return self._authority_call_redirection_app()

    def set_test_default_call_redirection_app(self, package_name: Optional[str]) -> None:
        logger.info("Call redirection override set to %r", package_name)
        self._override_redirection_app = package_name

    def get_default_call_screening_app(self) -> Optional[str]:
        if self._override_screening_app is not None:
            return self._override_screening_app
        return self._authority_call_screening_app()

    def set_test_default_call_screening_app(self, package_name: Optional[str]) -> None:
        logger.info("Call screening override set to %r", package_name)
        self._override_screening_app = package_name

    def get_car_mode_dialer_app(self) -> Optional[str]:
        if self._override_car_mode_app is not None:
            return self._override_car_mode_app
        return self._authority_car_mode_dialer_app()

    def set_test_auto_mode_app(self, package_name: Optional[str]) -> None:
        logger.info("Car mode dialer override set to %r", package_name)
        self._override_car_mode_app = package_name

    def get_call_companion_apps(self) -> list[str]:
        companion_apps = list(self._authority_call_companion_apps() or [])
        companion_apps.extend(self._override_companion_apps)
        return companion_apps

    def add_or_remove_test_call_companion_app(self, package_name: str, is_added: bool) -> None:
        if is_added:
            logger.info("Call companion override added: %r", package_name)
            self._override_companion_apps.append(package_name)
            return
        if package_name in self._override_companion_apps:
            logger.info("Call companion override removed: %r", package_name)
            self._override_companion_apps.remove(package_name)

    def reset_test_overrides(self) -> None:
        logger.info("All role overrides reset")
        self._override_redirection_app = None
        self._override_screening_app = None
        self._override_car_mode_app = None
        self._override_companion_apps.clear()

    def set_current_user_handle(self, user: Optional[UserHandle]) -> None:
        logger.info("Current user changed from %s to %s", self._current_user_handle, user)
        self._current_user_handle = user

    def _role_holders(self, role_name: str) -> Optional[list[str]]:
        logger.debug("Querying role holders for %s as %s", role_name, self._current_user_handle)
        return self._authority.get_role_holders_as_user(role_name, self._current_user_handle)

    def _authority_call_redirection_app(self) -> Optional[str]:
        return first_holder(self._role_holders(ROLE_CALL_REDIRECTION_APP))

    def _authority_call_screening_app(self) -> Optional[str]:
        return first_holder(self._role_holders(ROLE_CALL_SCREENING))

    def _authority_car_mode_dialer_app(self) -> Optional[str]:
        return first_holder(self._role_holders(ROLE_CAR_MODE_DIALER))

    def _authority_call_companion_apps(self) -> Optional[list[str]]:
        return self._role_holders(ROLE_CALL_COMPANION_APP)

    def dump(self, writer: IndentingWriter) -> None:
        self._dump_override(
            writer,
            "DefaultCallRedirectionApp",
            self._override_redirection_app,
            self._authority_call_redirection_app,
        )
        self._dump_override(
            writer,
            "DefaultCallScreeningApp",
            self._override_screening_app,
            self._authority_call_screening_app,
        )
        self._dump_override(
            writer,
            "DefaultCarModeDialerApp",
            self._override_car_mode_app,
            self._authority_car_mode_dialer_app,
        )

        # The companion override list always exists, so an empty list still
        # prints as an override.
        writer.write("DefaultCallCompanionApps: ")
        writer.write("(override ")
        writer.write(", ".join(self._override_companion_apps))
        writer.write(") ")
        apps_in_role = self._authority_call_companion_apps()
        if apps_in_role is not None:
            writer.write(", ".join(apps_in_role))
        writer.write_line()

    @staticmethod
    def _dump_override(
        writer: IndentingWriter,
        label: str,
        override: Optional[str],
        live_value: Callable[[], Optional[str]],
    ) -> None:
        writer.write(f"{label}: ")
        if override is not None:
            writer.write(f"(override {override}) ")
            writer.write(live_value())
        writer.write_line()
