import pytest

from opampagent.agent_config_manager import (
    LOGGING_CONFIG_NAME,
    MANAGER_CONFIG_NAME,
    AgentConfigManager,
    ConfigManagerError,
)
from opampagent.config_manager import YAML_CONTENT_TYPE
from opampagent.managed_config import ManagedConfig, load_managed_config, noop_reload
from opampagent.protocol import (
    AgentConfigFile,
    AgentConfigMap,
    AgentRemoteConfig,
    EffectiveConfig,
)


def _effective(files):
    return EffectiveConfig(
        config_map=AgentConfigMap(
            config_map={
                name: AgentConfigFile(body=body, content_type=YAML_CONTENT_TYPE)
                for name, body in files.items()
            }
        )
    )


def _remote(files):
    return AgentRemoteConfig(
        config=AgentConfigMap(
            config_map={
                name: AgentConfigFile(body=body, content_type=YAML_CONTENT_TYPE)
                for name, body in files.items()
            }
        )
    )


def _tracked_manager(path, contents, name=MANAGER_CONFIG_NAME, reload=noop_reload):
    path.write_bytes(contents)
    manager = AgentConfigManager()
    manager.add_config(name, load_managed_config(str(path), reload))
    return manager


def test_new_manager_tracks_nothing():
    manager = AgentConfigManager()
    assert manager.configs == {}
    assert manager.compose_effective_config() == EffectiveConfig()


def test_add_config():
    manager = AgentConfigManager()
    managed = ManagedConfig(config_path="path/to/config.json", reload=noop_reload)
    manager.add_config("config.json", managed)
    assert manager.configs["config.json"] is managed


def test_compose_missing_file(tmp_path):
    manager = AgentConfigManager()
    manager.add_config(
        "not_real.yaml", ManagedConfig(config_path=str(tmp_path / "not_real.yaml"))
    )
    with pytest.raises(ConfigManagerError, match="error reading config file"):
        manager.compose_effective_config()


def test_compose_multiple_files(tmp_path):
    one, two = tmp_path / "one.yaml", tmp_path / "two.yaml"
    one.write_bytes(b"key: value")
    two.write_bytes(b"key2: value2")
    manager = AgentConfigManager()
    manager.add_config("one.yaml", ManagedConfig(config_path=str(one)))
    manager.add_config("two.yaml", ManagedConfig(config_path=str(two)))
    expected = _effective({"one.yaml": b"key: value", "two.yaml": b"key2: value2"})
    assert manager.compose_effective_config() == expected


def test_apply_no_remote_config(tmp_path):
    contents = b"key: value"
    manager = _tracked_manager(tmp_path / MANAGER_CONFIG_NAME, contents)
    changed = manager.apply_config_changes(AgentRemoteConfig(config=AgentConfigMap()))
    assert changed is False
    assert manager.compose_effective_config() == _effective(
        {MANAGER_CONFIG_NAME: contents}
    )


def test_apply_missing_config_map(tmp_path):
    contents = b"key: value"
    manager = _tracked_manager(tmp_path / MANAGER_CONFIG_NAME, contents)
    assert manager.apply_config_changes(AgentRemoteConfig()) is False


def test_apply_unchanged_file(tmp_path):
    contents = b"key: value"
    manager = _tracked_manager(tmp_path / MANAGER_CONFIG_NAME, contents)
    changed = manager.apply_config_changes(_remote({MANAGER_CONFIG_NAME: contents}))
    assert changed is False
    assert manager.compose_effective_config() == _effective(
        {MANAGER_CONFIG_NAME: contents}
    )


def test_apply_unchanged_file_but_disk_differs(tmp_path):
    contents = b"key: value"
    path = tmp_path / MANAGER_CONFIG_NAME
    manager = _tracked_manager(path, contents)
    path.write_bytes(b"bad: config")

    changed = manager.apply_config_changes(_remote({MANAGER_CONFIG_NAME: contents}))
    assert changed is True
    assert path.read_bytes() == contents
    assert manager.compose_effective_config() == _effective(
        {MANAGER_CONFIG_NAME: contents}
    )


def test_apply_unknown_file_is_skipped(tmp_path):
    contents = b"key: value"
    manager = _tracked_manager(tmp_path / MANAGER_CONFIG_NAME, contents)
    changed = manager.apply_config_changes(_remote({"other.yaml": b"other: value"}))
    assert changed is False
    assert manager.compose_effective_config() == _effective(
        {MANAGER_CONFIG_NAME: contents}
    )


def test_apply_untracked_known_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    contents = b"key: value"
    new_contents = b"logger: value"
    manager = _tracked_manager(config_dir / MANAGER_CONFIG_NAME, contents)

    changed = manager.apply_config_changes(
        _remote({MANAGER_CONFIG_NAME: contents, LOGGING_CONFIG_NAME: new_contents})
    )
    assert changed is True
    assert (tmp_path / LOGGING_CONFIG_NAME).read_bytes() == new_contents
    assert manager.compose_effective_config() == _effective(
        {MANAGER_CONFIG_NAME: contents, LOGGING_CONFIG_NAME: new_contents}
    )


def test_apply_changes_to_file(tmp_path):
    path = tmp_path / LOGGING_CONFIG_NAME
    new_contents = b"logger: value"

    def reload(data):
        path.write_bytes(data)
        return True

    manager = _tracked_manager(path, b"key: value", LOGGING_CONFIG_NAME, reload)
    changed = manager.apply_config_changes(_remote({LOGGING_CONFIG_NAME: new_contents}))
    assert changed is True
    assert manager.compose_effective_config() == _effective(
        {LOGGING_CONFIG_NAME: new_contents}
    )


def test_apply_changes_reload_fails(tmp_path):
    path = tmp_path / LOGGING_CONFIG_NAME
    contents = b"key: value"
    expected = RuntimeError("oops")

    def reload(data):
        raise expected

    manager = _tracked_manager(path, contents, LOGGING_CONFIG_NAME, reload)
    with pytest.raises(ConfigManagerError, match="failed to reload config") as info:
        manager.apply_config_changes(_remote({LOGGING_CONFIG_NAME: b"logger: value"}))
    assert info.value.__cause__ is expected
    assert manager.compose_effective_config() == _effective(
        {LOGGING_CONFIG_NAME: contents}
    )