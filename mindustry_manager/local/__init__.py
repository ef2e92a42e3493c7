"""
Local package for the Mindustry Manager.

This package provides the effective configuration and the game server supervisor.
"""

from .config import effective_settings

__all__ = ["effective_settings"]
