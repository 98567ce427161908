"""Registrar - student status and class registration rule engine."""

from registrar.app import Registrar
from registrar.config import ConfigError, Settings

__all__ = ["ConfigError", "Registrar", "Settings"]
