"""Rendering and comparison of the Claude Code target files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable

from mcfg.model import MCPServer, ModelProfile

MANAGED_MCP_PATH = "projects.<home>.mcpServers"
MANAGED_ENV_KEYS = ("ANTHROPIC_AUTH_TOKEN", "ANTHROPIC_BASE_URL", "ANTHROPIC_MODEL")


def _load_object(data: str | bytes | None) -> dict[str, Any]:
    if not data:
        return {}
    payload = json.loads(data)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("JSON document must be an object")
    return payload


def _dump(root: dict[str, Any]) -> str:
    return json.dumps(root, indent=2, sort_keys=True, ensure_ascii=False)


def _child_object(parent: dict[str, Any], key: str) -> dict[str, Any]:
    value = parent.get(key)
    if isinstance(value, dict):
        return value
    value = {}
    parent[key] = value
    return value


@dataclass(frozen=True)
class ClaudeAdapter:
    """Renders the fields of the Claude Code files that mcfg manages."""

    home_dir: str

    def render_settings(self, existing: str | bytes | None, current_model: ModelProfile | None) -> str:
        """Return settings.json with the managed env fields set from ``current_model``."""
        root = _load_object(existing)
        env = _child_object(root, "env")
        for key in MANAGED_ENV_KEYS:
            env.pop(key, None)
        if current_model is not None:
            for key in MANAGED_ENV_KEYS:
                env[key] = current_model.env.get(key, "")
        return _dump(root)

    def render_claude_json(self, existing: str | bytes | None, servers: Iterable[MCPServer] | None) -> str:
        """Return .claude.json with the enabled servers added under the home project."""
        root = _load_object(existing)
        projects = _child_object(root, "projects")
        project_node = _child_object(projects, self.home_dir)
        mcp_servers = _child_object(project_node, "mcpServers")
        for server in servers or ():
            entry: dict[str, Any] = {"type": server.transport, "command": server.command}
            if server.args:
                entry["args"] = list(server.args)
            if server.env:
                entry["env"] = dict(server.env)
            mcp_servers[server.name] = entry
        return _dump(root)


def settings_managed_values(data: str | bytes | None) -> dict[str, str]:
    """Extract the settings.json fields that mcfg manages."""
    root = _load_object(data)
    env = root.get("env")
    if env is None:
        env = {}
    if not isinstance(env, dict) or not all(value is None or isinstance(value, str) for value in env.values()):
        raise ValueError("settings env must be an object of strings")
    return {f"env.{key}": env.get(key) or "" for key in MANAGED_ENV_KEYS}


def claude_managed_values(data: str | bytes | None, home_dir: str) -> dict[str, Any]:
    """Extract the .claude.json fields that mcfg manages."""
    root = _load_object(data)
    servers: dict[str, Any] = {}
    projects = root.get("projects")
    if isinstance(projects, dict):
        project_node = projects.get(home_dir)
        if isinstance(project_node, dict):
            found = project_node.get("mcpServers")
            if isinstance(found, dict):
                servers = found
    return {MANAGED_MCP_PATH: servers}


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def diff_managed_paths(
    actual_settings: str | bytes | None,
    desired_settings: str | bytes | None,
    actual_claude: str | bytes | None,
    desired_claude: str | bytes | None,
    home_dir: str,
) -> list[str]:
    """List the managed paths whose values differ between actual and desired files."""
    actual_env = settings_managed_values(actual_settings)
    desired_env = settings_managed_values(desired_settings)
    changes = [
        f"env.{key}" for key in MANAGED_ENV_KEYS if actual_env[f"env.{key}"] != desired_env[f"env.{key}"]
    ]
    actual_mcps = claude_managed_values(actual_claude, home_dir)[MANAGED_MCP_PATH]
    desired_mcps = claude_managed_values(desired_claude, home_dir)[MANAGED_MCP_PATH]
    if _canonical(actual_mcps) != _canonical(desired_mcps):
        changes.append(MANAGED_MCP_PATH)
    return changes