import sys
import psutil
import logging
import threading
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from mindustry_manager.local.config import effective_settings as config

log = logging.getLogger(__name__)


#* --- Process Creation ---
def _get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific keyword arguments for subprocess.Popen."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    # Own process group, so a Ctrl+C in the terminal reaches only the supervisor.
    return {"start_new_session": True}

def get_server_args() -> Tuple[List[str], Path]:
    """
    Returns the command-line arguments and CWD for the game server.

    The server resolves its `config/` directory, and therefore its saves,
    relative to the working directory.
    """
    return [config.JAVA_EXECUTABLE, "-jar", config.SERVER_JAR], config.SERVER_DIR

def _read_pipe(pipe, process_name: str, level: int) -> None:
    """Target function for reader threads. Forwards lines from a subprocess pipe to logging."""
    proc_logger = logging.getLogger(f"proc.{process_name}")
    try:
        for line_bytes in iter(pipe.readline, b""):
            line = line_bytes.decode("utf-8", errors="replace").rstrip()
            if not line:
                continue
            proc_logger.log(level, line)
    except Exception as e:
        proc_logger.debug(f"Pipe reader for {process_name} stream exited: {e}")
    finally:
        pipe.close()

def log_process_output(process: subprocess.Popen, name: str) -> None:
    """Starts background threads to consume and log a process's stdout/stderr."""
    if process.stdout:
        threading.Thread(
            target=_read_pipe, args=(process.stdout, name, logging.INFO),
            daemon=True, name=f"{name}-stdout"
        ).start()
    if process.stderr:
        threading.Thread(
            target=_read_pipe, args=(process.stderr, name, logging.ERROR),
            daemon=True, name=f"{name}-stderr"
        ).start()

def launch_process(args: List[str], cwd: Path, name: str) -> subprocess.Popen:
    """
    Launches a process with piped stdin/stdout and starts forwarding its output.

    :param args: The command line.
    :param cwd: The working directory for the process.
    :param name: The logical name of the process for logging context.
    :return: The running `subprocess.Popen` object.
    """
    log.info(f"Starting process: {name}...")
    try:
        p = subprocess.Popen(
            args,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            cwd=str(cwd.resolve()),
            **_get_popen_creation_flags()
        )
    except OSError as e:
        log.critical(f"Failed to start process '{name}': {e}", exc_info=True)
        raise

    log_process_output(p, name)
    log.info(f"{name.capitalize()} started successfully with PID: {p.pid}")
    return p

#* --- Process Termination ---
def kill_process_tree(pid: int) -> None:
    """
    Forcefully kills a process and all of its children.

    :param pid: The PID of the parent process.
    """
    try:
        parent = psutil.Process(pid)
        children = parent.children(recursive=True)
    except psutil.NoSuchProcess:
        log.warning(f"Process {pid} no longer exists, nothing to kill.")
        return

    for proc in children + [parent]:
        try:
            log.warning(f"Killing process {proc.name()} (PID {proc.pid}).")
            proc.kill()
        except psutil.NoSuchProcess:
            log.debug(f"Process {proc.pid} exited before it could be killed.")
            continue

    # The parent is reaped by its Popen object, which keeps its exit code.
    psutil.wait_procs(children, timeout=5)

def wait_for_exit(process: subprocess.Popen, timeout: Optional[float] = None) -> Optional[int]:
    """
    Waits for a process to exit.

    :return: The exit code, or None if the process is still running after `timeout`.
    """
    try:
        return process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        return None
