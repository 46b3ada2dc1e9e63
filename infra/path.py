# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "SiteLeveling"
COMPANY_NAME = "TECHASH"


def user_data_dir() -> Path:
    """
    Per-user data directory for the leveling store and its logs.

    PM_DATA_DIR wins when set; otherwise:
        Windows: %APPDATA%\\TECHASH\\SiteLeveling
        macOS:   ~/Library/Application Support/TECHASH/SiteLeveling
        Linux:   $XDG_DATA_HOME/TECHASH/SiteLeveling (~/.local/share/...)
    """
    override = (os.getenv("PM_DATA_DIR") or "").strip()
    try:
        if override:
            path = Path(override).expanduser()
        else:
            if sys.platform.startswith("win"):
                base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
            elif sys.platform == "darwin":
                base = Path.home() / "Library" / "Application Support"
            else:
                base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))
            path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    return user_data_dir() / "site_leveling.db"


def default_db_url() -> str:
    """PM_DB_URL, or the SQLite file under the user data dir."""
    url = (os.getenv("PM_DB_URL") or "").strip()
    if url:
        return url
    return f"sqlite:///{default_db_path().as_posix()}"
