"""Lookups over the config tree shared by the commands."""

from __future__ import annotations

from typing import Iterable

from mcfg.ids import match_by_prefix
from mcfg.model import ConfigRoot, MCPServer


def match_mcp_id(prefix: str, items: Iterable[MCPServer]) -> str:
    """Resolve an id prefix to the id of one of ``items``."""
    return match_by_prefix(prefix, [item.id for item in items])


def enabled_mcp_names(config: ConfigRoot) -> list[str]:
    """Names of the enabled MCP servers, in config order."""
    enabled = set(config.claude_binding.enabled_mcp_ids)
    return [server.name for server in config.mcp_servers if server.id in enabled]


def current_model_name(config: ConfigRoot) -> str:
    """Name of the bound model, or an empty string if none matches."""
    current = config.claude_binding.current_model_id
    return next((item.name for item in config.models if item.id == current), "")


def empty_as(value: str, fallback: str) -> str:
    """Return ``fallback`` when ``value`` is empty."""
    return value or fallback