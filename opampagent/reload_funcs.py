"""Reload functions that apply new config contents with rollback on failure."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from .agent_config_manager import COLLECTOR_CONFIG_NAME
from .managed_config import ReloadFunc


class ReloadError(Exception):
    """Raised when new config contents cannot be applied."""


class Collector(ABC):
    """An embedded collector that can be restarted with its current config."""

    @abstractmethod
    def restart(self) -> None:
        """Restart the collector; raise if it fails to start."""


def _write_private(path: str, contents: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(contents)


def copy_file(origin_path: str, new_path: str) -> None:
    """Copy the contents of one file into another."""
    try:
        data = Path(os.path.normpath(origin_path)).read_bytes()
    except OSError as exc:
        raise ReloadError(f"failed to read origin file: {exc}") from exc
    try:
        _write_private(new_path, data)
    except OSError as exc:
        raise ReloadError(f"failed to write new file: {exc}") from exc


def update_config_file(config_name: str, config_path: str, contents: bytes) -> None:
    """Write new contents to a config file."""
    try:
        _write_private(config_path, contents)
    except OSError as exc:
        raise ReloadError(f"failed to update config file {config_name}: {exc}") from exc


@dataclass
class Rollback:
    """A saved copy of a config file that can be restored or discarded."""

    config_path: str
    rollback_path: str

    def restore(self) -> None:
        """Copy the saved contents back over the config file."""
        copy_file(self.rollback_path, self.config_path)

    def cleanup(self) -> None:
        """Remove the saved copy."""
        os.remove(self.rollback_path)


def prepare_rollback(config_path: str) -> Rollback:
    """Save a copy of the config file next to it for a later rollback."""
    rollback = Rollback(config_path=config_path, rollback_path=f"{config_path}.rollback")
    copy_file(rollback.config_path, rollback.rollback_path)
    return rollback


def collector_reload(
    collector: Collector,
    config_path: str,
    logger: logging.Logger | None = None,
) -> ReloadFunc:
    """Return a reload function that writes the collector config and restarts it.

    If the restart fails the previous config is restored and the collector is
    restarted again with it.
    """
    log = logger if logger is not None else logging.getLogger(__name__)

    def reload(contents: bytes) -> bool:
        try:
            rollback = prepare_rollback(config_path)
        except ReloadError as exc:
            raise ReloadError(f"failed to prep for rollback: {exc}") from exc

        try:
            update_config_file(COLLECTOR_CONFIG_NAME, config_path, contents)
            try:
                collector.restart()
            except Exception as exc:
                try:
                    rollback.restore()
                except ReloadError as rollback_exc:
                    log.error("Rollback failed for collector config: %s", rollback_exc)
                try:
                    collector.restart()
                except Exception as restart_exc:
                    log.error(
                        "Collector failed for restart during rollback: %s", restart_exc
                    )
                raise ReloadError(f"collector failed to restart: {exc}") from exc
        finally:
            try:
                rollback.cleanup()
            except OSError as cleanup_exc:
                log.warning("Failed to cleanup rollback file: %s", cleanup_exc)
        return True

    return reload