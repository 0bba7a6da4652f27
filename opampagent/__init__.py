"""Tracking, reporting and applying remotely managed agent config files for OpAMP."""

__version__ = "0.1.0"