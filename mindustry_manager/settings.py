"""
This module contains the configuration settings for the Mindustry Manager.
It defines paths, server launch settings, autosave timing and web server settings.
It is used throughout the application to ensure consistent settings and paths.
"""

import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=True)

#* --- Core Paths ---
BASE_DIR = pathlib.Path(__file__).resolve().parent.parent  # Project Root
SERVER_DIR = pathlib.Path(os.getenv("MINDUSTRY_SERVER_DIR", str(BASE_DIR)))
OVERRIDES_JSON_PATH = BASE_DIR / "overrides.json"

#* --- Game Server Executable ---
JAVA_EXECUTABLE = os.getenv("JAVA_EXECUTABLE", "java")
SERVER_JAR = os.getenv("MINDUSTRY_SERVER_JAR", "server-release.jar")
SERVER_PROCESS_NAME = "mindustry"

#* --- Save Files ---
# The game server writes its saves relative to its working directory.
SAVES_DIR = SERVER_DIR / "config" / "saves"
SAVE_EXTENSION = ".msav"
AUTOSAVE_MARKER = "autosave"

#* --- Game Settings ---
DEFAULT_MAP = os.getenv("MINDUSTRY_DEFAULT_MAP", "Molten_Lake")
GAME_MODE = "survival"

#* --- Supervisor Settings ---
STARTUP_GRACE_SECONDS = 1       # time for the stdin pipe to become ready
GRACEFUL_SHUTDOWN_TIMEOUT = 10.0  # seconds before force-killing

#* --- Web Server Settings ---
WEB_SERVER_HOST = os.getenv("WEB_HOST", "0.0.0.0")
WEB_SERVER_PORT = int(os.getenv("WEB_PORT", "8080"))

#* --- MODIFIABLE SETTINGS (Changeable via overrides.json) ---
MODIFIABLE_SETTINGS = {
    "AUTOSAVE_INTERVAL_SECONDS",
    "DEFAULT_MAP",
    "GRACEFUL_SHUTDOWN_TIMEOUT",
}

#* --- Default Values for Modifiable Settings ---
AUTOSAVE_INTERVAL_SECONDS = 5.0
