"""
The Supervisor package.
Manages the lifecycle of the Mindustry server process.

This package contains the central GameServer class and its helper modules,
which together handle launching the server, relaying lifecycle commands to
its stdin, autosaving, listing saves and shutting the server down.
"""
from .channel import CommandChannel, TransportError
from .supervisor import CommandError, GameServer, Session

__all__ = ['CommandChannel', 'CommandError', 'GameServer', 'Session', 'TransportError']
