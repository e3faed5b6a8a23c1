"""Process exit codes and the error types that map onto them."""

from __future__ import annotations

from enum import IntEnum
from typing import Iterator


class ExitCode(IntEnum):
    """Exit status reported by the command line."""

    SUCCESS = 0
    BUSINESS = 1
    LOCK_CONFLICT = 2
    IO = 3
    PARAM = 4


class McfgError(Exception):
    """Base class for errors raised by mcfg."""

    kind = "business error"

    def __init__(self, message: str = "") -> None:
        self.detail = message
        super().__init__(f"{self.kind}: {message}" if message else self.kind)


class BusinessError(McfgError):
    """A rule of the config center was violated."""

    kind = "business error"


class LockConflictError(McfgError):
    """Another process holds the run lock."""

    kind = "lock conflict"


class IOFailureError(McfgError):
    """A file or system operation failed."""

    kind = "io error"


class ParamError(McfgError):
    """A command argument or flag is invalid."""

    kind = "parameter error"


_PARAM_HINTS = (
    "required flag",
    "unknown flag",
    "accepts ",
    "invalid argument",
    "argument ",
    "requires at least",
    "requires at most",
    "mutually exclusive",
)


def _causes(error: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def _looks_like_param_error(message: str) -> bool:
    return any(hint in message for hint in _PARAM_HINTS)


def exit_code_for(error: BaseException | None) -> ExitCode:
    """Return the process exit code that describes ``error``."""
    if error is None:
        return ExitCode.SUCCESS
    chain = list(_causes(error))
    for error_type, code in (
        (ParamError, ExitCode.PARAM),
        (IOFailureError, ExitCode.IO),
        (LockConflictError, ExitCode.LOCK_CONFLICT),
    ):
        if any(isinstance(item, error_type) for item in chain):
            return code
    if _looks_like_param_error(str(error)):
        return ExitCode.PARAM
    return ExitCode.BUSINESS