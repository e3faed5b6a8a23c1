"""Data model of the local config center and its JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TypeVar

SCHEMA_VERSION = 1

T = TypeVar("T")


class Source(str, Enum):
    """Where a config entry came from."""

    MANUAL = "manual"
    IMPORTED = "imported"


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _get_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _get_bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean")
    return value


def _get_int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _get_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"field {key!r} must be a list of strings")
    return list(value)


def _get_str_map(data: dict[str, Any], key: str) -> dict[str, str]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict) or not all(isinstance(item, str) for item in value.values()):
        raise ValueError(f"field {key!r} must be an object of strings")
    return dict(value)


def _get_items(data: dict[str, Any], key: str, build: Callable[[dict[str, Any]], T], empty: Callable[[], T]) -> list[T]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return [empty() if item is None else build(item) for item in value]


def _get_source(data: dict[str, Any]) -> Source | None:
    value = data.get("source")
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("field 'source' must be a string")
    try:
        return Source(value)
    except ValueError:
        raise ValueError(f'invalid source "{value}"') from None


def _source_value(source: Source | None) -> str:
    return source.value if source is not None else ""


def _sorted_map(values: dict[str, str]) -> dict[str, str]:
    return dict(sorted(values.items()))


@dataclass
class ModelProfile:
    """A Claude model profile."""

    id: str = ""
    name: str = ""
    env: dict[str, str] = field(default_factory=dict)
    source: Source | None = None
    description: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> ModelProfile:
        data = _require_object(data, "model profile")
        return cls(
            id=_get_str(data, "id"),
            name=_get_str(data, "name"),
            env=_get_str_map(data, "env"),
            source=_get_source(data),
            description=_get_str(data, "description"),
            created_at=_get_str(data, "created_at"),
            updated_at=_get_str(data, "updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "env": _sorted_map(self.env),
            "source": _source_value(self.source),
        }
        if self.description:
            result["description"] = self.description
        result["created_at"] = self.created_at
        result["updated_at"] = self.updated_at
        return result


@dataclass
class MCPServer:
    """An MCP server definition that can be bound to Claude Code."""

    id: str = ""
    name: str = ""
    transport: str = ""
    command: str = ""
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    source: Source | None = None
    description: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> MCPServer:
        data = _require_object(data, "mcp server")
        return cls(
            id=_get_str(data, "id"),
            name=_get_str(data, "name"),
            transport=_get_str(data, "transport"),
            command=_get_str(data, "command"),
            args=_get_str_list(data, "args"),
            env=_get_str_map(data, "env"),
            source=_get_source(data),
            description=_get_str(data, "description"),
            created_at=_get_str(data, "created_at"),
            updated_at=_get_str(data, "updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "transport": self.transport,
            "command": self.command,
        }
        if self.args:
            result["args"] = list(self.args)
        if self.env:
            result["env"] = _sorted_map(self.env)
        result["source"] = _source_value(self.source)
        if self.description:
            result["description"] = self.description
        result["created_at"] = self.created_at
        result["updated_at"] = self.updated_at
        return result


@dataclass
class ClaudeBinding:
    """The active model and enabled MCP servers for Claude Code."""

    current_model_id: str = ""
    enabled_mcp_ids: list[str] = field(default_factory=list)
    last_sync_at: str = ""
    last_sync_result: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> ClaudeBinding:
        data = _require_object(data, "claude binding")
        return cls(
            current_model_id=_get_str(data, "current_model_id"),
            enabled_mcp_ids=_get_str_list(data, "enabled_mcp_ids"),
            last_sync_at=_get_str(data, "last_sync_at"),
            last_sync_result=_get_str(data, "last_sync_result"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_model_id": self.current_model_id,
            "enabled_mcp_ids": list(self.enabled_mcp_ids),
            "last_sync_at": self.last_sync_at,
            "last_sync_result": self.last_sync_result,
        }


@dataclass
class BackupFile:
    """One target file and its backup copy."""

    target_path: str = ""
    backup_path: str = ""
    exists_before_backup: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> BackupFile:
        data = _require_object(data, "backup file")
        return cls(
            target_path=_get_str(data, "target_path"),
            backup_path=_get_str(data, "backup_path"),
            exists_before_backup=_get_bool(data, "exists_before_backup"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_path": self.target_path,
            "backup_path": self.backup_path,
            "exists_before_backup": self.exists_before_backup,
        }


@dataclass
class BackupMeta:
    """Metadata describing one backup."""

    id: str = ""
    target: str = ""
    files: list[BackupFile] = field(default_factory=list)
    reason: str = ""
    created_at: str = ""
    source_hash: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> BackupMeta:
        data = _require_object(data, "backup meta")
        return cls(
            id=_get_str(data, "id"),
            target=_get_str(data, "target"),
            files=_get_items(data, "files", BackupFile.from_dict, BackupFile),
            reason=_get_str(data, "reason"),
            created_at=_get_str(data, "created_at"),
            source_hash=_get_str(data, "source_hash"),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "target": self.target,
            "files": [item.to_dict() for item in self.files],
            "reason": self.reason,
            "created_at": self.created_at,
        }
        if self.source_hash:
            result["source_hash"] = self.source_hash
        return result


@dataclass
class ConfigRoot:
    """The whole configuration tree of the local config center."""

    schema_version: int = SCHEMA_VERSION
    models: list[ModelProfile] = field(default_factory=list)
    mcp_servers: list[MCPServer] = field(default_factory=list)
    claude_binding: ClaudeBinding = field(default_factory=ClaudeBinding)
    backup_index: list[BackupMeta] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ConfigRoot:
        data = _require_object(data, "config")
        binding = data.get("claude_binding")
        return cls(
            schema_version=_get_int(data, "schema_version") or SCHEMA_VERSION,
            models=_get_items(data, "models", ModelProfile.from_dict, ModelProfile),
            mcp_servers=_get_items(data, "mcp_servers", MCPServer.from_dict, MCPServer),
            claude_binding=ClaudeBinding() if binding is None else ClaudeBinding.from_dict(binding),
            backup_index=_get_items(data, "backup_index", BackupMeta.from_dict, BackupMeta),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version or SCHEMA_VERSION,
            "models": [item.to_dict() for item in self.models],
            "mcp_servers": [item.to_dict() for item in self.mcp_servers],
            "claude_binding": self.claude_binding.to_dict(),
            "backup_index": [item.to_dict() for item in self.backup_index],
        }

    def marshal(self) -> str:
        """Serialize the config as indented JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def parse_config_root(data: str | bytes) -> ConfigRoot:
    """Parse config JSON, filling in defaults for missing fields."""
    payload = json.loads(data)
    if payload is None:
        return ConfigRoot()
    return ConfigRoot.from_dict(payload)