"""Build metadata of the running package."""

from __future__ import annotations

import platform
from dataclasses import asdict, dataclass

VERSION = "dev"
COMMIT = "unknown"
BUILD_DATE = "unknown"


@dataclass(frozen=True)
class BuildInfo:
    """Snapshot of build and runtime information."""

    version: str
    commit: str
    build_date: str
    python_version: str
    platform: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def current() -> BuildInfo:
    """Return the build information of the current process."""
    return BuildInfo(
        version=VERSION,
        commit=COMMIT,
        build_date=BUILD_DATE,
        python_version=platform.python_version(),
        platform=f"{platform.system().lower()}/{platform.machine().lower()}",
    )