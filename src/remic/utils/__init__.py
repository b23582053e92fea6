"""Utilities package."""

from .env import load_environment

__all__ = ["load_environment"]
