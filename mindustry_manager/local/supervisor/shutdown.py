import logging
from typing import TYPE_CHECKING, Optional
from mindustry_manager.local.config import effective_settings as config
from mindustry_manager.local.supervisor.supervisor import CommandError

if TYPE_CHECKING:
    from .supervisor import GameServer

log = logging.getLogger(__name__)


def graceful_shutdown_sequence(server: "GameServer", timeout: Optional[float] = None) -> Optional[int]:
    """
    Asks the game server to exit and kills it if it does not within the timeout.

    :param server: The GameServer owning the process.
    :param timeout: Seconds to wait for a cooperative exit, defaults to GRACEFUL_SHUTDOWN_TIMEOUT.
    :return: The exit code of the game server, or None if it had to be killed.
    """
    if timeout is None:
        timeout = config.GRACEFUL_SHUTDOWN_TIMEOUT

    log.info("Initiating graceful shutdown of the game server...")
    try:
        server.exit()
    except CommandError as e:
        log.error(f"Could not ask the game server to exit: {e}")

    returncode = server.wait(timeout)
    if returncode is None:
        log.warning(f"Game server did not exit within {timeout}s. Forcing shutdown...")
        server.terminate()
    else:
        log.info(f"Game server exited with code {returncode}.")

    server.close()
    return returncode
