import asyncio
import threading

import pytest

from mindustry_manager import main as entry
from mindustry_manager.local.config import effective_settings as config
from mindustry_manager.local.supervisor import CommandError


class ExitedServer:
    """Stands in for a GameServer whose process has already exited."""

    def __init__(self, returncode):
        self.returncode = returncode
        self.closed = False
        self.terminated = False

    def wait(self, timeout=None):
        return self.returncode

    def start_game(self, map_name):
        raise CommandError("unable to start game: broken pipe")

    def terminate(self):
        self.terminated = True

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(entry, "setup_logging", lambda level: None)
    monkeypatch.setattr(entry.setproctitle, "setproctitle", lambda title: None)


def test_parse_args_defaults():
    args = entry.parse_args([])

    assert args.map is None
    assert args.port is None
    assert args.verbose is False


def test_parse_args_values():
    args = entry.parse_args(["--map", "Frozen_Forest", "--port", "9000", "--verbose"])

    assert args.map == "Frozen_Forest"
    assert args.port == 9000
    assert args.verbose is True


def test_main_fails_when_binary_cannot_start(monkeypatch):
    def launch():
        raise FileNotFoundError("java")

    monkeypatch.setattr(entry.GameServer, "launch", staticmethod(launch))

    assert entry.main([]) == 1


def test_main_terminates_when_first_game_cannot_start(monkeypatch):
    server = ExitedServer(0)
    monkeypatch.setattr(entry.GameServer, "launch", staticmethod(lambda: server))

    assert entry.main([]) == 1
    assert server.terminated is True
    assert server.closed is True


@pytest.mark.parametrize("returncode, status", [(0, 0), (3, 1)])
def test_child_exit_ends_supervisor(monkeypatch, returncode, status):
    monkeypatch.setattr(config, "WEB_SERVER_HOST", "127.0.0.1")
    monkeypatch.setattr(config, "WEB_SERVER_PORT", 0)
    server = ExitedServer(returncode)

    assert asyncio.run(entry.run_until_exit(server)) == status
    assert server.closed is True


class RunningServer:
    """Stands in for a GameServer that keeps running until asked to exit."""

    def __init__(self):
        self.exited = threading.Event()
        self.closed = False

    def wait(self, timeout=None):
        return 0 if self.exited.wait(timeout) else None

    def exit(self):
        self.exited.set()

    def terminate(self):
        self.exited.set()

    def close(self):
        self.closed = True


@pytest.mark.parametrize("failure", [asyncio.CancelledError(), OSError("address already in use")])
def test_web_server_failure_shuts_game_down(monkeypatch, failure):
    async def broken_serve(app, hypercorn_config, shutdown_trigger=None):
        raise failure

    monkeypatch.setattr(entry, "serve", broken_serve)
    server = RunningServer()

    assert asyncio.run(entry.run_until_exit(server)) == 1
    assert server.exited.is_set()
    assert server.closed is True
