import time
import logging
import threading
from typing import Callable, Optional

log = logging.getLogger(__name__)


class AutosaveScheduler:
    """
    Calls a tick function on a fixed cadence in a background daemon thread.

    The countdown to the next tick can be restarted with `reset()`, so a
    freshly started or loaded game is not saved moments after it began.
    """

    def __init__(self, tick: Callable[[], None], interval: float) -> None:
        self.interval = interval
        self._tick = tick
        self._cond = threading.Condition()
        self._stopped = False
        self._deadline = time.monotonic() + interval
        # Bumped by every reset; a tick fired before a reset is stale.
        self._generation = 0
        self._due_generation: Optional[int] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Starts the scheduler thread."""
        with self._cond:
            self._stopped = False
            self._deadline = time.monotonic() + self.interval
        self._thread = threading.Thread(target=self._run, daemon=True, name="AutosaveThread")
        self._thread.start()
        log.info(f"Autosave scheduler started with an interval of {self.interval}s.")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stops the scheduler thread and waits for it to finish."""
        with self._cond:
            self._stopped = True
            self._cond.notify_all()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    def reset(self) -> None:
        """Restarts the countdown to the next tick from now."""
        with self._cond:
            self._deadline = time.monotonic() + self.interval
            self._generation += 1
            self._cond.notify_all()
        log.debug("Autosave countdown reset.")

    def tick_was_reset(self) -> bool:
        """
        Tells a running tick whether the countdown was reset after it fired.

        Always False outside of a scheduled tick.
        """
        with self._cond:
            return self._due_generation is not None and self._due_generation != self._generation

    def seconds_until_tick(self) -> float:
        with self._cond:
            return max(0.0, self._deadline - time.monotonic())

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while True:
            with self._cond:
                if self._stopped:
                    break
                remaining = self._deadline - time.monotonic()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                self._deadline = time.monotonic() + self.interval
                self._due_generation = self._generation

            try:
                self._tick()
            except Exception as e:
                log.error(f"Autosave tick failed: {e}", exc_info=True)
            finally:
                with self._cond:
                    self._due_generation = None

        log.info("Autosave scheduler has stopped.")
