from __future__ import annotations

import logging
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from infra.path import default_db_url

logger = logging.getLogger(__name__)


def _app_dir() -> Path:
    """
    Directory the running app lives in.
    - Frozen builds: the extraction dir (sys._MEIPASS) or the executable's folder.
    - Source checkout: the project root (infra -> project root).
    """
    if getattr(sys, "frozen", False):
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass).resolve()
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


def _migration_dir() -> Path:
    app_dir = _app_dir()
    candidates = [app_dir / "migration", app_dir / "_internal" / "migration"]
    for candidate in candidates:
        if (candidate / "env.py").exists():
            return candidate
    raise RuntimeError(
        "Alembic script_location missing. Tried: " + ", ".join(str(p) for p in candidates)
    )


def alembic_config(db_url: str | None = None) -> Config:
    script_location = _migration_dir()
    alembic_ini = script_location / "alembic.ini"
    cfg = Config(str(alembic_ini)) if alembic_ini.exists() else Config()
    cfg.set_main_option("script_location", str(script_location))
    cfg.set_main_option("sqlalchemy.url", db_url or default_db_url())
    return cfg


def run_migrations(db_url: str | None = None, revision: str = "head") -> None:
    """Bring the entity store schema up to `revision`."""
    cfg = alembic_config(db_url)
    logger.info("Upgrading entity store schema to %s", revision)
    command.upgrade(cfg, revision)


__all__ = ["alembic_config", "run_migrations"]
