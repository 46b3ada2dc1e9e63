from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError, version


_DEFAULT_APP_VERSION = "0.1.0"
_DISTRIBUTION_NAME = "site-leveling"


def get_app_version() -> str:
    """PM_APP_VERSION, then the installed distribution's version, then the built-in default."""
    env_override = (os.getenv("PM_APP_VERSION") or "").strip()
    if env_override:
        return env_override

    try:
        return version(_DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _DEFAULT_APP_VERSION


__all__ = ["get_app_version"]
