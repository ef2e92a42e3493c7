"""
Shared pytest fixtures for Mindustry Manager tests.

This module provides a recording command channel that stands in for the
game server's stdin, and a GameServer wired to it.
"""

from typing import List

import pytest

from mindustry_manager.local.supervisor import CommandChannel, GameServer, TransportError


class RecordingChannel(CommandChannel):
    """Command channel that records every line instead of writing to a pipe."""

    def __init__(self):
        self.lines: List[str] = []
        self.fail = False
        self.closed = False

    def write(self, line: str) -> None:
        if self.fail:
            raise TransportError("broken pipe")
        self.lines.append(line)

    def close(self) -> None:
        self.closed = True

    def take(self) -> List[str]:
        """Returns the lines written since the last call and forgets them."""
        lines, self.lines = self.lines, []
        return lines


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def server(channel):
    """A GameServer whose scheduler is not running; ticks are driven by hand."""
    game_server = GameServer(channel, autosave_interval=60)
    yield game_server
    game_server.scheduler.stop(timeout=1)


@pytest.fixture
def saves_dir(tmp_path, monkeypatch):
    """Points the configured save directory at an empty temporary directory."""
    from mindustry_manager.local.config import effective_settings as config

    directory = tmp_path / "config" / "saves"
    directory.mkdir(parents=True)
    monkeypatch.setattr(config, "SAVES_DIR", directory)
    return directory
