"""
CLI commands module for RichLogger
"""

from . import config, logs

__all__ = ["config", "logs"]
