"""Interfaces for the OpAMP client and for managing remotely configured files."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from .managed_config import ManagedConfig
from .protocol import AgentRemoteConfig, EffectiveConfig

YAML_CONTENT_TYPE = "text/yaml"
JSON_CONTENT_TYPE = "text/json"

_CONTENT_TYPES = {
    ".json": JSON_CONTENT_TYPE,
    ".yml": YAML_CONTENT_TYPE,
    ".yaml": YAML_CONTENT_TYPE,
}


def _extension(file_path: str) -> str:
    name = os.path.basename(file_path)
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def determine_content_type(file_path: str) -> str:
    """Return the content type for a file based on its extension, or ''."""
    return _CONTENT_TYPES.get(_extension(file_path), "")


class ConfigManager(ABC):
    """Keeps local configuration files in line with remote configuration."""

    @abstractmethod
    def add_config(self, config_name: str, managed_config: ManagedConfig) -> None:
        """Track a config under the given name."""

    @abstractmethod
    def compose_effective_config(self) -> EffectiveConfig:
        """Read all tracked config files and return the effective config."""

    @abstractmethod
    def apply_config_changes(self, remote_config: AgentRemoteConfig) -> bool:
        """Apply remote changes; return True if anything changed."""


class Client(ABC):
    """A connection to an OpAMP server."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the server."""

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the server."""