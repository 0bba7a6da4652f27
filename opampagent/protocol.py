"""Message structures exchanged with an OpAMP server."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AnyValue:
    """A value attached to an attribute; only string values are used here."""

    string_value: str = ""


@dataclass(frozen=True)
class KeyValue:
    """A named attribute describing the agent."""

    key: str
    value: AnyValue = field(default_factory=AnyValue)


@dataclass
class AgentConfigFile:
    """The contents of one configuration file and its content type."""

    body: bytes = b""
    content_type: str = ""


@dataclass
class AgentConfigMap:
    """Configuration files keyed by their configuration name."""

    config_map: dict[str, AgentConfigFile] = field(default_factory=dict)


@dataclass
class EffectiveConfig:
    """The configuration the agent is currently running with."""

    config_map: AgentConfigMap = field(default_factory=AgentConfigMap)


@dataclass
class AgentRemoteConfig:
    """Configuration offered by the server, with the hash the server gave it."""

    config: AgentConfigMap | None = None
    config_hash: bytes = b""