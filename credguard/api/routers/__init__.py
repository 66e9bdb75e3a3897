"""API routers."""

from . import backup, health, login, scan

__all__ = ["backup", "health", "login", "scan"]
