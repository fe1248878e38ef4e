from __future__ import annotations

import json
from pathlib import Path
from typing import Optional
from urllib import error, parse, request

from pydantic import BaseModel, Field, ValidationError

from services.role_resolver.app.roles import USER_SYSTEM, UserHandle

DEFAULT_TIMEOUT_SECONDS = 5.0


class UserRoleAssignments(BaseModel):
    user_id: int = Field(ge=0)
    roles: dict[str, Optional[list[str]]] = Field(default_factory=dict)


class RoleAssignmentsFile(BaseModel):
    users: list[UserRoleAssignments] = Field(default_factory=list)


class RoleHoldersResponse(BaseModel):
    holders: Optional[list[str]] = None


def _user_id(user: Optional[UserHandle]) -> int:
    return (user or USER_SYSTEM).identifier


class StaticRoleAuthority:
    def __init__(self, assignments: Optional[dict[int, dict[str, Optional[list[str]]]]] = None) -> None:
        self._assignments: dict[int, dict[str, Optional[list[str]]]] = {}
        for user_id, roles in (assignments or {}).items():
            for role_name, holders in roles.items():
                self.set_role_holders(role_name, UserHandle(user_id), holders)

    @classmethod
    def from_file(cls, path: Path) -> StaticRoleAuthority:
        if not path.exists():
            raise FileNotFoundError(f"Role assignments file not found: {path}")
        try:
            parsed = RoleAssignmentsFile.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise ValueError(f"Invalid role assignments file {path}: {exc}") from exc

        assignments: dict[int, dict[str, Optional[list[str]]]] = {}
        for entry in parsed.users:
            assignments.setdefault(entry.user_id, {}).update(entry.roles)
        return cls(assignments)

    def set_role_holders(
        self,
        role_name: str,
        user: Optional[UserHandle],
        holders: Optional[list[str]],
    ) -> None:
        roles = self._assignments.setdefault(_user_id(user), {})
        roles[role_name] = list(holders) if holders is not None else None

    def get_role_holders_as_user(
        self,
        role_name: str,
        user: Optional[UserHandle],
    ) -> Optional[list[str]]:
        holders = self._assignments.get(_user_id(user), {}).get(role_name)
        if holders is None:
            return None
        return list(holders)


class HttpRoleAuthority:
    def __init__(self, base_url: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @property
    def base_url(self) -> str:
        return self._base_url

    def _holders_url(self, role_name: str, user: Optional[UserHandle]) -> str:
        path = f"/roles/{parse.quote(role_name, safe='')}/holders"
        query = parse.urlencode({"user_id": _user_id(user)})
        return f"{self._base_url}{path}?{query}"

    def get_role_holders_as_user(
        self,
        role_name: str,
        user: Optional[UserHandle],
    ) -> Optional[list[str]]:
        url = self._holders_url(role_name, user)
        req = request.Request(url=url, headers={"Accept": "application/json"}, method="GET")

        try:
            with request.urlopen(req, timeout=self._timeout_seconds) as response:
                raw = response.read().decode("utf-8")
        except error.HTTPError as exc:
            if exc.code == 404:
                return None
            raw = exc.read().decode("utf-8")
            detail = raw
            if raw:
                try:
                    parsed = json.loads(raw)
                    detail = parsed.get("detail", raw)
                except (json.JSONDecodeError, AttributeError):
                    detail = raw
            raise RuntimeError(f"Role authority request failed (GET {url}): {exc.code} {detail}") from exc
        except error.URLError as exc:
            raise RuntimeError(f"Role authority is unreachable at {self._base_url}: {exc.reason}") from exc

        if not raw:
            return None
        try:
            return RoleHoldersResponse.model_validate_json(raw).holders
        except ValidationError as exc:
            raise RuntimeError(f"Unexpected role authority response for {role_name}: {exc}") from exc
