"""Discovery of importable entries in existing Claude Code configuration."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

from mcfg.model import ConfigRoot, MCPServer, ModelProfile, Source

_SKIP_CODES = frozenset({"model_skipped", "mcp_skipped"})


class IdGenerator(Protocol):
    def new(self) -> str: ...


@dataclass
class ScanWarning:
    """A compatibility problem or skip reason found while scanning."""

    path: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class ScanResult:
    """Models, MCP servers and warnings found by one scan."""

    models: list[ModelProfile] = field(default_factory=list)
    mcp_servers: list[MCPServer] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)
    skipped: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "models": [item.to_dict() for item in self.models],
            "mcp_servers": [item.to_dict() for item in self.mcp_servers],
            "warnings": [item.to_dict() for item in self.warnings],
            "skipped": self.skipped,
        }


def _parse_settings_env(data: bytes) -> dict[str, str]:
    payload = json.loads(data)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("settings must be an object")
    raw_env = payload.get("env")
    if raw_env is None:
        return {}
    if not isinstance(raw_env, dict):
        raise ValueError("settings env must be an object")
    return {key: value for key, value in raw_env.items() if isinstance(value, str)}


def _has_duplicate_model(items: list[ModelProfile], model_name: str, base_url: str) -> bool:
    return any(
        item.env.get("ANTHROPIC_MODEL", "") == model_name and item.env.get("ANTHROPIC_BASE_URL", "") == base_url
        for item in items
    )


def _has_duplicate_mcp(
    items: list[MCPServer], transport: str, command: str, args: list[str], env: dict[str, str]
) -> bool:
    return any(
        item.transport == transport and item.command == command and item.args == args and item.env == env
        for item in items
    )


class Scanner:
    """Scans the user's Claude Code files for models and MCP servers to import."""

    def __init__(self, home_dir: str, now: Callable[[], str], ids: IdGenerator) -> None:
        self.home_dir = str(home_dir)
        self.now = now
        self.ids = ids

    def scan(self, existing: ConfigRoot) -> ScanResult:
        """Return importable entries not already present in ``existing``."""
        result = ScanResult()
        settings_path = Path(self.home_dir) / ".claude" / "settings.json"
        profile, warning = self._scan_settings(settings_path, existing)
        if profile is not None:
            result.models.append(profile)
        elif warning is not None:
            result.warnings.append(warning)

        servers, warnings = self._scan_mcps(Path(self.home_dir) / ".claude.json", existing)
        result.mcp_servers.extend(servers)
        result.warnings.extend(warnings)
        result.skipped = sum(1 for item in result.warnings if item.code in _SKIP_CODES)
        return result

    def _scan_settings(
        self, path: Path, existing: ConfigRoot
    ) -> tuple[ModelProfile | None, ScanWarning | None]:
        where = str(path)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None, ScanWarning(where, "settings_missing", "Claude settings.json not found")
        except OSError as error:
            return None, ScanWarning(where, "settings_read_failed", str(error))

        try:
            env = _parse_settings_env(data)
        except ValueError:
            return None, ScanWarning(where, "settings_corrupted", "Claude settings.json is corrupted")

        token = env.get("ANTHROPIC_AUTH_TOKEN", "")
        base_url = env.get("ANTHROPIC_BASE_URL", "")
        model_name = env.get("ANTHROPIC_MODEL", "")
        if not (token and base_url and model_name):
            return None, None
        if _has_duplicate_model(existing.models, model_name, base_url):
            return None, ScanWarning(where, "model_skipped", "duplicate model skipped")

        try:
            new_id = self.ids.new()
        except Exception as error:  # any generator failure becomes a warning
            return None, ScanWarning(where, "id_generation_failed", str(error))
        return (
            ModelProfile(
                id=new_id,
                name=model_name,
                env=env,
                source=Source.IMPORTED,
                created_at=self.now(),
                updated_at=self.now(),
            ),
            None,
        )

    def _scan_mcps(self, path: Path, existing: ConfigRoot) -> tuple[list[MCPServer], list[ScanWarning]]:
        where = str(path)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return [], [ScanWarning(where, "claude_json_missing", "Claude user mcp config not found")]
        except OSError as error:
            return [], [ScanWarning(where, "claude_json_read_failed", str(error))]

        try:
            payload = json.loads(data)
        except ValueError:
            payload = ...
        if payload is ... or not (payload is None or isinstance(payload, dict)):
            return [], [ScanWarning(where, "claude_json_corrupted", "Claude user mcp config is corrupted")]

        projects = payload.get("projects") if isinstance(payload, dict) else None
        project_node = projects.get(self.home_dir) if isinstance(projects, dict) else None
        raw_servers = project_node.get("mcpServers") if isinstance(project_node, dict) else None
        if not isinstance(raw_servers, dict):
            return [], []

        servers: list[MCPServer] = []
        warnings: list[ScanWarning] = []
        for name in sorted(raw_servers):
            entry = raw_servers[name]
            if not isinstance(entry, dict):
                warnings.append(ScanWarning(where, "mcp_invalid", f"mcp {name} must be an object"))
                continue
            transport = entry.get("type")
            command = entry.get("command")
            transport = transport if isinstance(transport, str) else ""
            command = command if isinstance(command, str) else ""
            if transport != "stdio" or not command:
                warnings.append(ScanWarning(where, "mcp_invalid", f"mcp {name} is invalid"))
                continue

            raw_args = entry.get("args")
            args = [item if isinstance(item, str) else "" for item in raw_args] if isinstance(raw_args, list) else []
            raw_env = entry.get("env")
            env = (
                {key: value if isinstance(value, str) else "" for key, value in raw_env.items()}
                if isinstance(raw_env, dict)
                else {}
            )

            if _has_duplicate_mcp(existing.mcp_servers, transport, command, args, env):
                warnings.append(ScanWarning(where, "mcp_skipped", f"duplicate mcp {name} skipped"))
                continue

            try:
                new_id = self.ids.new()
            except Exception as error:  # any generator failure becomes a warning
                warnings.append(ScanWarning(where, "id_generation_failed", str(error)))
                continue
            servers.append(
                MCPServer(
                    id=new_id,
                    name=name,
                    transport=transport,
                    command=command,
                    args=args,
                    env=env,
                    source=Source.IMPORTED,
                    created_at=self.now(),
                    updated_at=self.now(),
                )
            )
        return servers, warnings