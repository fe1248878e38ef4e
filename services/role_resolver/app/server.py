from __future__ import annotations

import logging
import os
from typing import Any, Optional

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from services.role_resolver.app.config import build_resolver, load_config
from services.role_resolver.app.logic import (
    dump_action,
    reset_overrides_action,
    role_holders_snapshot,
    set_call_companion_override_action,
    set_current_user_action,
    set_role_override_action,
)
from services.role_resolver.app.roles import RoleResolver

logger = logging.getLogger(__name__)


def build_server(resolver: RoleResolver) -> FastMCP:
    mcp = FastMCP(name="RoleResolver MCP")

    @mcp.custom_route("/health", methods=["GET"], include_in_schema=False)
    async def health(_request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "service": "role_resolver"})

    @mcp.tool
    def role_holders() -> dict[str, Any]:
        """Return the resolved holder of every telephony role for the current user."""
        return role_holders_snapshot(resolver)

    @mcp.tool
    def set_role_override(role: str, package_name: Optional[str] = None) -> dict[str, Any]:
        """Override call_redirection, call_screening or car_mode_dialer. Omit package_name to clear."""
        return set_role_override_action(resolver, role=role, package_name=package_name)

    @mcp.tool
    def set_call_companion_override(package_name: str, is_added: bool = True) -> dict[str, Any]:
        """Add or remove a test call companion app."""
        return set_call_companion_override_action(resolver, package_name=package_name, is_added=is_added)

    @mcp.tool
    def reset_overrides() -> dict[str, Any]:
        """Clear every test override."""
        return reset_overrides_action(resolver)

    @mcp.tool
    def set_current_user(user_id: int) -> dict[str, Any]:
        """Switch the user whose role assignments are queried."""
        return set_current_user_action(resolver, user_id=user_id)

    @mcp.tool
    def dump() -> dict[str, Any]:
        """Return the diagnostic dump of overrides and live role holders."""
        return dump_action(resolver)

    return mcp


def main() -> None:
    config = load_config()
    if not logging.getLogger().handlers:
        logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    resolver = build_resolver(config)
    mcp = build_server(resolver)

    transport = os.getenv("FASTMCP_TRANSPORT", "http")
    host = os.getenv("FASTMCP_HOST", "0.0.0.0")
    port = int(os.getenv("FASTMCP_PORT", os.getenv("PORT", "8082")))
    path = os.getenv("FASTMCP_PATH", "/mcp")
    logger.info("Starting RoleResolver MCP (transport=%s, user=%s)", transport, resolver.current_user_handle)

    if transport == "http":
        mcp.run(transport="http", host=host, port=port, path=path)
        return
    if transport == "sse":
        mcp.run(transport="sse", host=host, port=port, path=path)
        return
    if transport == "stdio":
        mcp.run(transport="stdio")
        return

    raise ValueError(f"Unsupported FASTMCP_TRANSPORT '{transport}'")


if __name__ == "__main__":
    main()
