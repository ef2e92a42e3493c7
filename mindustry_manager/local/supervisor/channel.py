import logging
import threading
from typing import BinaryIO

log = logging.getLogger(__name__)


class TransportError(OSError):
    """Raised when a command cannot be written to the game server's stdin."""


class CommandChannel:
    """
    A one-way, line-oriented text sink wrapping the game server's stdin.

    Writes are best-effort: there is no buffering, reconnecting or retrying
    beyond what the underlying stream does. Every command is echoed to the
    `proc.<name>` logger so the operator sees what was sent.
    """

    def __init__(self, stream: BinaryIO, name: str = "mindustry") -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._echo = logging.getLogger(f"proc.{name}")

    def write(self, line: str) -> None:
        """
        Writes a single command line followed by a newline.

        :param line: The command, without a trailing line terminator.
        :raises TransportError: If the stream is closed or the write fails.
        """
        data = f"{line}\n".encode("utf-8")
        with self._lock:
            try:
                self._stream.write(data)
                self._stream.flush()
            except (OSError, ValueError) as e:
                raise TransportError(f"write to stdin failed: {e}") from e
        self._echo.info(f"> {line}")

    def close(self) -> None:
        """Closes the underlying stream, ignoring streams that are already gone."""
        with self._lock:
            try:
                self._stream.close()
            except (OSError, ValueError) as e:
                log.debug(f"Closing command channel failed: {e}")
