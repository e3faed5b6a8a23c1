# mcfg

`mcfg` is a library of building blocks for a local config center for Claude
Code. It models a config tree of model profiles and MCP server definitions,
renders the fields of Claude Code's `settings.json` and `.claude.json` that it
manages (leaving every other field as it was), finds importable entries in a
user's existing Claude Code files, and serialises processes with a file lock.

It has no third-party dependencies. The lock module uses `fcntl`, so the
package runs on POSIX systems.

## Modules

- `mcfg.model`: the config tree (`ConfigRoot`, `ModelProfile`, `MCPServer`,
  `ClaudeBinding`, `BackupMeta`, `BackupFile`, `Source`). Each class has
  `from_dict` and `to_dict`. `parse_config_root` reads JSON text or bytes and
  fills in defaults; `ConfigRoot.marshal` returns indented JSON text. An
  unknown `source` value is rejected with `ValueError`.
- `mcfg.adapter`: `ClaudeAdapter(home_dir)` has `render_settings`, which sets
  `env.ANTHROPIC_AUTH_TOKEN`, `env.ANTHROPIC_BASE_URL` and
  `env.ANTHROPIC_MODEL` from a model profile (or removes them when given
  `None`), and `render_claude_json`, which adds or updates the given servers
  under `projects.<home_dir>.mcpServers` and keeps other servers. Both take the
  existing file content and return new JSON text. `settings_managed_values`,
  `claude_managed_values` and `diff_managed_paths` compare the managed fields
  of two versions of the files.
- `mcfg.scanner`: `Scanner(home_dir, now, ids)` reads
  `<home_dir>/.claude/settings.json` and `<home_dir>/.claude.json`.
  `Scanner.scan(existing)` returns a `ScanResult` holding the model and stdio
  MCP servers that are not already in `existing`, a list of `ScanWarning`
  entries for missing, corrupt, invalid or duplicate input, and a count of
  skipped duplicates.
- `mcfg.lock`: `LockManager(path, now=None)` takes a non-blocking shared or
  exclusive `flock` (`LockMode`). `acquire` returns a `LockHandle`, usable as a
  context manager. An exclusive holder records its `LockMetadata` (pid, start
  time, command) in the lock file and in `<path>.meta`. A conflict raises
  `LockConflictError` whose message names the holder where it is known.
- `mcfg.ids`: `UlidGenerator().new()` creates time-ordered ULIDs, monotonic
  within a millisecond. `parse_ulid` checks a ULID strictly and returns its
  16 bytes. `match_by_prefix` resolves an ID from a prefix of at least
  8 characters.
- `mcfg.selection`: `match_mcp_id`, `enabled_mcp_names`, `current_model_name`
  and `empty_as` for summarising the current binding.
- `mcfg.cli_inputs`: `parse_env_items` turns `KEY=VALUE` items into a dict;
  `resolve_token` and `resolve_optional_token` take an auth token from a
  literal, from a stream or from a file (at most one source);
  `match_model_id` resolves a model ID prefix.
- `mcfg.exitcode`: the error hierarchy (`McfgError`, `BusinessError`,
  `LockConflictError`, `IOFailureError`, `ParamError`). `exit_code_for` maps
  an exception, or `None`, to an `ExitCode`.
- `mcfg.buildinfo`: `current()` returns a `BuildInfo` with version, commit,
  build date, Python version and platform.

## Examples

Resolve an ID from a short prefix:

```python
from mcfg.ids import match_by_prefix

ids = ["01HQXBF7M6SJHMR6G32P5D1K7Y", "01HQXBG84ESB7XJQ9WAAYH54AM"]
assert match_by_prefix("01HQXBF7", ids) == ids[0]
```

A prefix shorter than 8 characters raises `ParamError`. A prefix that matches
no ID, or more than one, raises `BusinessError`.

Read and write the config tree:

```python
from mcfg.model import parse_config_root

config = parse_config_root(b'{"schema_version": 1}')
data = config.marshal()
assert parse_config_root(data) == config
```

Render `settings.json` for a model and read back the managed fields:

```python
from mcfg.adapter import ClaudeAdapter, settings_managed_values
from mcfg.model import ModelProfile

profile = ModelProfile(env={
    "ANTHROPIC_AUTH_TOKEN": "token",
    "ANTHROPIC_BASE_URL": "https://example.com",
    "ANTHROPIC_MODEL": "claude",
})
rendered = ClaudeAdapter("/home/me").render_settings('{"theme": "dark"}', profile)
assert settings_managed_values(rendered)["env.ANTHROPIC_MODEL"] == "claude"
```

Hold the run lock:

```python
from mcfg.lock import LockManager, LockMode

with LockManager("/tmp/mcfg/run.lock").acquire(LockMode.EXCLUSIVE, "mcfg sync"):
    ...
```

Turn errors into exit codes:

```python
from mcfg.cli_inputs import parse_env_items
from mcfg.exitcode import ExitCode, McfgError, exit_code_for

try:
    parse_env_items(["not-a-pair"])
except McfgError as error:
    assert exit_code_for(error) == ExitCode.PARAM
```

The exit codes are 0 for success, 1 for business errors, 2 for lock
conflicts, 3 for I/O errors and 4 for parameter errors.

## What the package does not do

- It installs no command-line program; there are no commands to run.
- It has no on-disk store for the config tree: reading and writing the
  config file is left to the caller.
- It does not write Claude Code's files itself. The adapter returns the
  rendered text; there is no sync step, no backup creation, restore or
  pruning, and no validation report.
- It has no interactive terminal interface.