"""Parsing of command-line inputs shared by the model and MCP commands."""

from __future__ import annotations

import os
from pathlib import Path
from typing import IO, Iterable

from mcfg.exitcode import IOFailureError, ParamError
from mcfg.ids import match_by_prefix
from mcfg.model import ModelProfile


def parse_env_items(items: Iterable[str] | None) -> dict[str, str]:
    """Turn ``KEY=VALUE`` items into a mapping; later keys win."""
    env: dict[str, str] = {}
    for item in items or ():
        key, found, value = item.partition("=")
        if not found or not key:
            raise ParamError(f'invalid env item "{item}"')
        env[key] = value
    return env


def _as_text(data: str | bytes) -> str:
    return data.decode("utf-8") if isinstance(data, bytes) else data


def resolve_optional_token(
    reader: IO[str] | IO[bytes] | None,
    literal: str,
    from_stdin: bool,
    file_path: str | os.PathLike[str] | None,
) -> str | None:
    """Return the auth token from at most one source, or None if none is given."""
    given = sum(1 for source in (literal, from_stdin, file_path) if source)
    if given > 1:
        raise ParamError("auth token flags are mutually exclusive")
    if literal:
        return literal
    if from_stdin:
        if reader is None:
            raise IOFailureError("read auth token from stdin: no input stream")
        try:
            return _as_text(reader.read()).strip()
        except (OSError, UnicodeDecodeError) as error:
            raise IOFailureError(f"read auth token from stdin: {error}") from error
    if file_path:
        try:
            return _as_text(Path(file_path).read_bytes()).strip()
        except (OSError, UnicodeDecodeError) as error:
            raise IOFailureError(f"read auth token file: {error}") from error
    return None


def resolve_token(
    reader: IO[str] | IO[bytes] | None,
    literal: str,
    from_stdin: bool,
    file_path: str | os.PathLike[str] | None,
) -> str:
    """Return the auth token from exactly one source; an empty token is an error."""
    token = resolve_optional_token(reader, literal, from_stdin, file_path)
    if not token:
        raise ParamError("exactly one auth token source is required")
    return token


def match_model_id(prefix: str, items: Iterable[ModelProfile]) -> str:
    """Resolve an id prefix to the id of one of the model profiles."""
    return match_by_prefix(prefix, [item.id for item in items])