import logging
from pathlib import Path
from typing import List

log = logging.getLogger(__name__)


def list_manual_saves(save_dir: Path, extension: str = ".msav", marker: str = "autosave") -> List[str]:
    """
    Lists the manual save slots the game server has written to disk.

    The directory is read on every call, so a save becomes visible as soon
    as the game server has flushed its file.

    :param save_dir: The directory holding the save files.
    :param extension: The save file extension, including the dot.
    :param marker: Names containing this substring are autosaves and are skipped.
    :return: The bare save names (no directory, no extension), sorted.
    """
    if not save_dir.is_dir():
        log.debug(f"Save directory '{save_dir}' does not exist yet.")
        return []

    return sorted(
        path.stem
        for path in save_dir.glob(f"*{extension}")
        if path.is_file() and marker not in path.stem
    )
