"""Configuration settings for the character sheet storage backend."""

import os
import sys

# --- Storage Layout ---
# Application folder under the per-user data root
APP_ID = "dnd-beyond-desktop"

# Folder (under APP_ID) holding one file per character
CHARACTERS_SUBDIR = "characters"

# Extension identifying a character record file
RECORD_EXTENSION = ".json"

# Indentation used when writing record files
JSON_INDENT = 2

# --- Lookup Settings ---
# Minimum thefuzz score for a fuzzy name match to count
NAME_MATCH_THRESHOLD = 75

# --- Web Surface (for web_app.py) ---
WEB_HOST = "127.0.0.1"
WEB_PORT = 5001

# --- Logging ---
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def get_user_data_dir() -> str:
    """Returns the platform's per-user application data root.

    Windows uses %APPDATA%, macOS uses ~/Library/Application Support and
    everything else follows the XDG base directory rules.

    Raises:
        RuntimeError: If the operating system does not supply a usable root.
    """
    base = None
    if sys.platform == "win32":
        base = os.environ.get("APPDATA")
    else:
        home = os.path.expanduser("~")
        if home == "~":
            home = None
        if sys.platform == "darwin":
            if home:
                base = os.path.join(home, "Library", "Application Support")
        else:
            # XDG says relative values must be ignored
            xdg_data_home = os.environ.get("XDG_DATA_HOME", "")
            if os.path.isabs(xdg_data_home):
                base = xdg_data_home
            elif home:
                base = os.path.join(home, ".local", "share")

    if not base:
        raise RuntimeError("Could not determine the per-user data directory.")
    return os.path.abspath(base)


def get_characters_dir() -> str:
    """Returns the absolute path of the character record directory."""
    return os.path.join(get_user_data_dir(), APP_ID, CHARACTERS_SUBDIR)
