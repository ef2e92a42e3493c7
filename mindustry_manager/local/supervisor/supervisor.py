import time
import logging
import threading
import subprocess
from dataclasses import dataclass
from typing import List, Optional
from mindustry_manager.local.config import effective_settings as config
from mindustry_manager.local.supervisor import process_utils
from mindustry_manager.local.supervisor.saves import list_manual_saves
from mindustry_manager.local.supervisor.background_tasks import AutosaveScheduler
from mindustry_manager.local.supervisor.channel import CommandChannel, TransportError

log = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """A lifecycle command could not be delivered to the game server."""


@dataclass
class Session:
    """Derived state of the hosted game; the game server never reports it back."""
    started: bool = False
    autosave_enabled: bool = True
    autosave_sequence: int = 0
    autosave_cadence: float = 5.0


class GameServer:
    """
    Supervises a single Mindustry server process through its stdin.

    Lifecycle operations are translated into text commands. The session
    flags are updated even when a write fails: a failed write means the
    process is gone and the whole application is about to exit.
    """

    def __init__(self, channel: CommandChannel, process: Optional[subprocess.Popen] = None,
                 autosave_interval: Optional[float] = None) -> None:
        """
        :param channel: The command channel to the game server's stdin.
        :param process: The game server process, if this instance owns one.
        :param autosave_interval: Seconds between autosaves, defaults to the configured value.
        """
        interval = autosave_interval if autosave_interval is not None else config.AUTOSAVE_INTERVAL_SECONDS

        self.channel = channel
        self.process = process
        self.session = Session(autosave_cadence=interval)
        # Re-entrant: start_game and load call stop while holding it.
        self._lock = threading.RLock()
        self.scheduler = AutosaveScheduler(self.autosave, interval)

    @classmethod
    def launch(cls) -> "GameServer":
        """
        Starts the game server process and the autosave scheduler.

        :return: A GameServer owning the new process.
        """
        args, cwd = process_utils.get_server_args()
        process = process_utils.launch_process(args, cwd, config.SERVER_PROCESS_NAME)
        server = cls(CommandChannel(process.stdin, config.SERVER_PROCESS_NAME), process)

        # Give the server time to open its console before sending commands.
        time.sleep(config.STARTUP_GRACE_SECONDS)
        server.scheduler.start()
        return server

    #* --- Session State ---
    @property
    def started(self) -> bool:
        return self.session.started

    @property
    def autosave_enabled(self) -> bool:
        return self.session.autosave_enabled

    @property
    def autosave_sequence(self) -> int:
        return self.session.autosave_sequence

    def autosave_history(self) -> List[str]:
        """Returns the autosaves written since the last start, newest first."""
        with self._lock:
            count = self.session.autosave_sequence
        return [f"autosave-{n}" for n in reversed(range(count))]

    def manual_saves(self) -> List[str]:
        """Returns the manual saves currently on disk."""
        return list_manual_saves(config.SAVES_DIR, config.SAVE_EXTENSION, config.AUTOSAVE_MARKER)

    #* --- Lifecycle Operations ---
    def _send(self, line: str, message: str) -> None:
        try:
            self.channel.write(line)
        except TransportError as e:
            raise CommandError(f"{message}: {e}") from e

    def start_game(self, map_name: str) -> None:
        """
        Hosts a new game on the given map, stopping any running game first.

        :param map_name: The name of the map to host.
        :raises CommandError: If the host command cannot be written.
        """
        with self._lock:
            self.session.autosave_sequence = 0
            self.scheduler.reset()
            try:
                self.stop()
            except CommandError as e:
                log.debug(f"Ignoring failed stop before start: {e}")
            self._send(f"host {map_name} {config.GAME_MODE}", "unable to start game")
            self.session.started = True
        log.info(f"Game started on map '{map_name}'.")

    def stop(self) -> None:
        """Stops the running game. Stopping an already stopped game is harmless."""
        with self._lock:
            self.session.started = False
            self._send("stop", "unable to stop previous game")

    def pause(self, on: bool) -> None:
        """
        Pauses or resumes the game. Autosaving is suspended while paused.

        :param on: True to pause, False to resume.
        """
        with self._lock:
            self.session.autosave_enabled = not on
            self._send(f"pause {'on' if on else 'off'}", "unable to pause game")

    def save(self, name: str) -> None:
        """
        Saves the game under the given slot name, overwriting an existing slot.

        :param name: The slot name; must not contain line breaks.
        """
        with self._lock:
            self._send(f"save {name}", "unable to save game")

    def load(self, name: str) -> None:
        """
        Loads a saved game, stopping the running game first.

        :param name: The slot name to load.
        :raises CommandError: If the load command cannot be written.
        """
        with self._lock:
            self.scheduler.reset()
            try:
                self.stop()
            except CommandError as e:
                log.warning(f"Continuing with load: {e}")
            self._send(f"load {name}", "unable to load game")
            self.session.started = True
        log.info(f"Loaded save '{name}'.")

    def exit(self) -> None:
        """Stops the game and asks the game server to exit."""
        with self._lock:
            try:
                self.stop()
            except CommandError as e:
                log.debug(f"Ignoring failed stop before exit: {e}")
            self._send("exit", "unable to exit game")
        log.info("Exit command sent to the game server.")

    def terminate(self) -> None:
        """Forcefully kills the game server. Used only when `exit()` did not work."""
        if self.process is None:
            log.warning("No game server process to terminate.")
            return
        log.warning(f"Terminating game server (PID {self.process.pid}).")
        process_utils.kill_process_tree(self.process.pid)

    def autosave(self) -> None:
        """
        Runs one autosave tick.

        Nothing happens unless a game is started and autosaving is enabled.
        The sequence number is consumed even when the save fails, so a stuck
        channel is not retried with the same name.
        """
        with self._lock:
            if not self.session.started or not self.session.autosave_enabled:
                return
            # A start or load may have reset the countdown while this tick
            # waited for the lock.
            if self.scheduler.tick_was_reset():
                log.debug("Skipping autosave tick that fired before the countdown was reset.")
                return
            name = f"autosave-{self.session.autosave_sequence}"
            try:
                self.save(name)
            except CommandError as e:
                log.error(f"Autosave '{name}' failed: {e}")
            self.session.autosave_sequence += 1

    #* --- Process Lifetime ---
    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Blocks until the game server exits.

        :return: The exit code, or None on timeout.
        """
        if self.process is None:
            raise RuntimeError("GameServer does not own a process.")
        return process_utils.wait_for_exit(self.process, timeout)

    def close(self) -> None:
        """Stops the autosave scheduler and closes the command channel."""
        self.scheduler.stop(timeout=1)
        self.channel.close()
