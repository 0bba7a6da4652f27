"""Config manager that keeps the agent's local config files in line with the server."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .config_manager import ConfigManager, determine_content_type
from .helpers import compute_hash
from .managed_config import ManagedConfig, load_managed_config, noop_reload
from .protocol import (
    AgentConfigFile,
    AgentConfigMap,
    AgentRemoteConfig,
    EffectiveConfig,
)

COLLECTOR_CONFIG_NAME = "collector.yaml"
MANAGER_CONFIG_NAME = "manager.yaml"
LOGGING_CONFIG_NAME = "logging.yaml"

# Only these configs may be written or updated from remote configuration.
ACCEPTABLE_CONFIGS = frozenset(
    {COLLECTOR_CONFIG_NAME, MANAGER_CONFIG_NAME, LOGGING_CONFIG_NAME}
)


class ConfigManagerError(Exception):
    """Raised when configs cannot be read, written or reloaded."""


def _write_private(path: str, contents: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(contents)


def _read(path: str) -> bytes:
    return Path(os.path.normpath(path)).read_bytes()


class AgentConfigManager(ConfigManager):
    """Tracks the agent's active configs and applies remote changes to them."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        base = logger if logger is not None else logging.getLogger(__name__)
        self.logger = base.getChild("config_manager")
        self.configs: dict[str, ManagedConfig] = {}

    def add_config(self, config_name: str, managed_config: ManagedConfig) -> None:
        """Track a config, replacing any config already tracked under that name."""
        self.configs[config_name] = managed_config

    def compose_effective_config(self) -> EffectiveConfig:
        """Read every tracked config file and return the effective config."""
        files: dict[str, AgentConfigFile] = {}
        for name, managed in self.configs.items():
            try:
                body = _read(managed.config_path)
            except OSError as exc:
                raise ConfigManagerError(
                    f"error reading config file {name}: {exc}"
                ) from exc
            files[name] = AgentConfigFile(
                body=body, content_type=determine_content_type(managed.config_path)
            )
        return EffectiveConfig(config_map=AgentConfigMap(config_map=files))

    def apply_config_changes(self, remote_config: AgentRemoteConfig) -> bool:
        """Compare remote configs with the tracked ones and apply differences.

        Returns True if any config changed.
        """
        if remote_config.config is None:
            return False

        changed = False
        for name, remote_file in remote_config.config.config_map.items():
            if name not in ACCEPTABLE_CONFIGS:
                self.logger.warning("Not supported config received skipping: %s", name)
                continue

            managed = self.configs.get(name)
            if managed is None:
                self._track_new_config(name, remote_file.body)
                changed = True
                continue

            if self._update_existing_config(name, managed, remote_file.body):
                changed = True
        return changed

    def _update_existing_config(
        self, name: str, managed: ManagedConfig, new_contents: bytes
    ) -> bool:
        remote_hash = compute_hash(new_contents)
        if managed.current_config_hash == remote_hash:
            # Overwrite any local edits so the disk matches what is expected.
            return _verify_disk_contents(
                managed.config_path, managed.current_config_hash, new_contents
            )

        self.logger.info("Applying changes to config file: %s", name)
        try:
            changed = managed.reload(new_contents)
        except Exception as exc:
            raise ConfigManagerError(
                f"failed to reload config: {name}: {exc}"
            ) from exc

        if changed:
            try:
                managed.compute_config_hash()
            except OSError as exc:
                raise ConfigManagerError(
                    f"failed hash compute for config {name}: {exc}"
                ) from exc
        return changed

    def _track_new_config(self, name: str, contents: bytes) -> None:
        self.logger.info("Untracked config found: %s", name)
        try:
            _write_private(name, contents)
        except OSError as exc:
            raise ConfigManagerError(
                f"failed to write new config file {name}: {exc}"
            ) from exc
        managed = load_managed_config(os.path.join(".", name), noop_reload)
        self.add_config(name, managed)


def _verify_disk_contents(config_path: str, mem_hash: bytes, contents: bytes) -> bool:
    """Overwrite the file with ``contents`` if it no longer matches ``mem_hash``."""
    clean_path = os.path.normpath(config_path)
    try:
        current = _read(clean_path)
    except OSError as exc:
        raise ConfigManagerError(
            f"error reading current config contents: {exc}"
        ) from exc

    if compute_hash(current) == mem_hash:
        return False

    try:
        _write_private(clean_path, contents)
    except OSError as exc:
        raise ConfigManagerError(
            f"failed to write contents to config file: {exc}"
        ) from exc
    return True