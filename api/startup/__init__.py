"""Startup and shutdown of the shared collaborators."""

from .manager import StartupManager

__all__ = ['StartupManager']
