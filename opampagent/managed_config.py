"""A configuration file on disk that the agent keeps track of."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .helpers import compute_hash

ReloadFunc = Callable[[bytes], bool]
"""Applies new contents; returns True if the config in memory or on disk changed."""


class ManagedConfigError(Exception):
    """Raised when a managed config cannot be set up."""


def noop_reload(contents: bytes) -> bool:
    """A reload function that changes nothing."""
    return False


@dataclass
class ManagedConfig:
    """A configuration file on disk together with the hash of its contents."""

    config_path: str
    reload: ReloadFunc = noop_reload
    current_config_hash: bytes = field(default=b"")

    def compute_config_hash(self) -> None:
        """Read the file and store the hash of its contents.

        Raises OSError if the file cannot be read.
        """
        contents = Path(os.path.normpath(self.config_path)).read_bytes()
        self.current_config_hash = compute_hash(contents)


def load_managed_config(config_path: str, reload: ReloadFunc) -> ManagedConfig:
    """Create a managed config and compute the hash of its file."""
    managed = ManagedConfig(config_path=config_path, reload=reload)
    try:
        managed.compute_config_hash()
    except OSError as exc:
        raise ManagedConfigError(f"failed to compute hash for config {exc}") from exc
    return managed