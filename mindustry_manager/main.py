import sys
import signal
import asyncio
import logging
import argparse
import setproctitle
from typing import List, Optional
from hypercorn.asyncio import serve
from hypercorn.config import Config as HypercornConfig
from mindustry_manager.log import setup_logging
from mindustry_manager.web.server import create_app
from mindustry_manager.local.config import effective_settings as config
from mindustry_manager.local.supervisor import CommandError, GameServer, shutdown

log = logging.getLogger("supervisor")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mindustry-manager",
        description="Runs a Mindustry server with autosaving and a web control page."
    )
    parser.add_argument("--map", default=None, help=f"map to host at startup (default: {config.DEFAULT_MAP})")
    parser.add_argument("--port", type=int, default=None, help=f"control page port (default: {config.WEB_SERVER_PORT})")
    parser.add_argument("--verbose", action="store_true", help="log at DEBUG level")
    return parser.parse_args(argv)


def _build_hypercorn_config() -> HypercornConfig:
    """Builds the Hypercorn configuration, routing its logs through our handlers."""
    hypercorn_config = HypercornConfig()
    hypercorn_config.bind = [f"{config.WEB_SERVER_HOST}:{config.WEB_SERVER_PORT}"]
    hypercorn_config.accesslog = logging.getLogger("hypercorn.access")
    hypercorn_config.errorlog = logging.getLogger("hypercorn.error")
    return hypercorn_config


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, event: asyncio.Event) -> None:
    """Sets `event` when SIGINT or SIGTERM is received."""
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, event.set)
        except NotImplementedError:
            # Windows event loops do not support add_signal_handler.
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(event.set))


async def run_until_exit(server: GameServer) -> int:
    """
    Serves the control page until the game server exits or a termination
    signal arrives, whichever happens first.

    :param server: The running game server.
    :return: The process exit status for the supervisor.
    """
    loop = asyncio.get_running_loop()
    termination_requested = asyncio.Event()
    stop_web_server = asyncio.Event()
    _install_signal_handlers(loop, termination_requested)

    web_task = asyncio.create_task(
        serve(create_app(server), _build_hypercorn_config(), shutdown_trigger=stop_web_server.wait)
    )
    exit_future = loop.run_in_executor(None, server.wait)
    signal_task = asyncio.create_task(termination_requested.wait())
    log.info(f"Control page listening on http://{config.WEB_SERVER_HOST}:{config.WEB_SERVER_PORT}/")

    done, _ = await asyncio.wait(
        {web_task, exit_future, signal_task}, return_when=asyncio.FIRST_COMPLETED
    )

    status = 0
    if signal_task in done:
        log.info("Termination signal received.")
        await loop.run_in_executor(None, shutdown.graceful_shutdown_sequence, server)
    elif exit_future in done:
        returncode = exit_future.result()
        if returncode != 0:
            log.critical(f"unable to run binary: game server exited with code {returncode}")
            status = 1
        else:
            log.info("Game server exited.")
        server.close()
    else:
        reason = "cancelled" if web_task.cancelled() else web_task.exception()
        log.critical(f"Control page stopped unexpectedly: {reason}")
        await loop.run_in_executor(None, shutdown.graceful_shutdown_sequence, server)
        status = 1

    signal_task.cancel()
    stop_web_server.set()
    if not web_task.done():
        await web_task
    return status


def main(argv: Optional[List[str]] = None) -> int:
    """The main entry point of the Mindustry Manager."""
    args = parse_args(argv)
    setproctitle.setproctitle("Mindustry Manager - Supervisor")
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.port is not None:
        config.set("WEB_SERVER_PORT", args.port)

    try:
        server = GameServer.launch()
    except OSError as e:
        log.critical(f"unable to run binary: {e}")
        return 1

    try:
        server.start_game(args.map or config.DEFAULT_MAP)
    except CommandError as e:
        log.critical(f"unable to start game: {e}")
        server.terminate()
        server.close()
        return 1

    return asyncio.run(run_until_exit(server))


if __name__ == "__main__":
    sys.exit(main())
