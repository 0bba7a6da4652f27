"""OpAMP protocol version reported by the agent."""

OPAMP_VERSION = "v0.2.0"


def version() -> str:
    return OPAMP_VERSION