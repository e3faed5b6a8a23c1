"""Config tree, Claude Code file rendering, scanning, locking and ID helpers for mcfg."""

__version__ = "0.1.0"