"""Configuration package."""

from .settings import RemicConfig, config

__all__ = ["RemicConfig", "config"]
