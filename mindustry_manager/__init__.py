"""Mindustry Manager: supervises a Mindustry server and serves a small control page."""

__version__ = "0.1.0"
