# opampagent

Agent-side handling of remotely managed configuration files for a telemetry
collector that is managed over OpAMP (the Open Agent Management Protocol).

A management server sends an agent a set of named config files. This package
keeps track of the files the agent owns on disk, reports them back as the
agent's *effective config*, and applies incoming changes: each file is
hashed with SHA-256, files whose contents match are left alone (or rewritten
if they were edited on disk), and changed files are handed to a reload
function. The collector reload function restores the previous file if the
collector fails to restart.

## Installation

```
pip install opampagent
```

The package has no runtime dependencies beyond the standard library.

## Modules

- `opampagent.protocol` – dataclasses for the messages involved:
  `AnyValue`, `KeyValue`, `AgentConfigFile` (`body`, `content_type`),
  `AgentConfigMap` (`config_map`, a dict of files by name),
  `EffectiveConfig` and `AgentRemoteConfig` (`config`, `config_hash`).
- `opampagent.helpers` – `compute_hash(data)` and `string_key_value(key, value)`.
- `opampagent.version` – `version()`, the OpAMP protocol version reported.
- `opampagent.managed_config` – `ManagedConfig`, `load_managed_config`,
  `noop_reload` and `ManagedConfigError`.
- `opampagent.config_manager` – `determine_content_type(file_path)` and the
  abstract base classes `ConfigManager` and `Client`.
- `opampagent.agent_config_manager` – `AgentConfigManager` and
  `ConfigManagerError`, plus the accepted config names
  `COLLECTOR_CONFIG_NAME`, `MANAGER_CONFIG_NAME` and `LOGGING_CONFIG_NAME`.
- `opampagent.reload_funcs` – `collector_reload`, `Collector`, `Rollback`,
  `prepare_rollback`, `copy_file`, `update_config_file` and `ReloadError`.

## Helpers

```python
from opampagent.helpers import compute_hash, string_key_value
from opampagent.config_manager import determine_content_type
from opampagent.version import version

compute_hash(b"hello world").hex()
# 'b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9'

determine_content_type("conf/collector.yaml")   # 'text/yaml'
determine_content_type("conf/collector.yml")    # 'text/yaml'
determine_content_type("conf/settings.json")    # 'text/json'
determine_content_type("conf/notes.txt")        # ''

string_key_value("host.name", "example-host")   # KeyValue holding a string AnyValue
version()                                       # 'v0.2.0'
```

## Managed configs

A `ManagedConfig` ties a config path to a reload function and remembers the
SHA-256 hash of the contents in use (`current_config_hash`).
`compute_config_hash()` rereads the file and raises `OSError` if it cannot.

```python
from opampagent.managed_config import load_managed_config, noop_reload

managed = load_managed_config("/etc/collector/manager.yaml", noop_reload)
```

`load_managed_config` reads the file and computes the hash up front, raising
`ManagedConfigError` if the file cannot be read. A reload function takes the
new contents as bytes and returns `True` if the config in memory or on disk
changed; `noop_reload` always returns `False`.

## Applying remote configuration

```python
import logging

from opampagent.agent_config_manager import AgentConfigManager, MANAGER_CONFIG_NAME

manager = AgentConfigManager(logging.getLogger("agent"))
manager.add_config(MANAGER_CONFIG_NAME, managed)

effective = manager.compose_effective_config()
changed = manager.apply_config_changes(remote_config)
```

- `add_config(name, managed_config)` tracks a config, replacing any config
  already tracked under that name.
- `compose_effective_config()` reads every tracked file and returns an
  `EffectiveConfig` with each body and its content type; a file that cannot
  be read raises `ConfigManagerError`.
- `apply_config_changes(remote_config)` returns `False` at once if the remote
  config holds no config map. Otherwise, for each file it receives:
  - names other than `collector.yaml`, `manager.yaml` and `logging.yaml` are
    logged and skipped;
  - an accepted name that is not yet tracked is written to a file of that
    name in the current working directory and tracked with `noop_reload`;
  - if the remote hash matches the tracked hash, the file on disk is checked
    and rewritten with the remote contents if it no longer matches;
  - otherwise the config's reload function is called, and if it reports a
    change the hash is recomputed.

  It returns `True` if any config changed. Errors, including an exception
  raised by a reload function, are raised as `ConfigManagerError`.

Files are written with mode `0600`.

## Reloading the collector with rollback

`prepare_rollback(config_path)` copies the file to `<config_path>.rollback`
and returns a `Rollback`; `restore()` copies the saved contents back and
`cleanup()` removes the copy.

`collector_reload(collector, config_path, logger=None)` returns a reload
function for the collector config. It saves a rollback copy, writes the new
contents and calls `collector.restart()`. If the restart raises, it restores
the old file, restarts the collector again, and raises `ReloadError`. The
rollback copy is removed in every case, and a successful reload returns
`True`. `collector` is any subclass of the abstract `Collector` that
implements `restart()`.

## What this package does not do

- It does not connect to an OpAMP server. `Client` is only an abstract
  interface with `connect()` and `disconnect()`; no implementation, transport
  or message handling is included.
- It does not run a collector. `Collector` is an abstract interface that the
  caller implements.
- It provides a reload function for the collector config only. Reloading the
  manager or logging config must be supplied by the caller as a reload
  function; otherwise those configs can be tracked with `noop_reload`.
- It has no command-line program.

## Running the tests

```
pip install "opampagent[test]"
pytest
```