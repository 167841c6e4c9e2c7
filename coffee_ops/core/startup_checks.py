from __future__ import annotations

import logging
import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from coffee_ops.core.config import DEFAULT_JWT_SECRET

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"
STARTUP_CHECKS_PREFIX = "[STARTUP]"


def _current_env() -> str:
    return os.getenv("ENV", "dev").strip().lower()


def validate_database_environment(database_url: str) -> None:
    env = _current_env()
    if env in {"prod", "production"} and database_url.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def validate_jwt_secret(secret: str) -> None:
    env = _current_env()
    if env in {"prod", "production"} and secret == DEFAULT_JWT_SECRET:
        logger.critical("%s JWT_SECRET must be set in production", STARTUP_CHECKS_PREFIX)
        raise RuntimeError("JWT_SECRET must be set in production environment")


def _alembic_config(alembic_config_path: Path, database_url: str) -> Config:
    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")
    alembic_cfg = Config(str(alembic_config_path))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def apply_migrations(*, alembic_config_path: Path, database_url: str) -> None:
    """Upgrade to head when AUTO_APPLY_MIGRATIONS is enabled (default on in production)."""
    auto_apply_raw = os.getenv("AUTO_APPLY_MIGRATIONS", "").strip().lower()
    if auto_apply_raw in {"0", "false", "no", "off"}:
        logger.info("%s auto migration disabled by AUTO_APPLY_MIGRATIONS", MIGRATIONS_PREFIX)
        return

    should_auto_apply = auto_apply_raw in {"1", "true", "yes", "on"}
    if auto_apply_raw == "":
        should_auto_apply = _current_env() in {"prod", "production"}

    if not should_auto_apply:
        logger.info("%s auto migration skipped env=%s", MIGRATIONS_PREFIX, _current_env())
        return

    logger.info("%s applying migrations to head", MIGRATIONS_PREFIX)
    command.upgrade(_alembic_config(alembic_config_path, database_url), "head")
    logger.info("%s migrations applied", MIGRATIONS_PREFIX)


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if _current_env() == "test":
        logger.info("%s skipped migration check in test environment", MIGRATIONS_PREFIX)
        return

    alembic_cfg = _alembic_config(alembic_config_path, engine.url.render_as_string(hide_password=False))
    script_directory = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script_directory.get_heads())

    with engine.connect() as connection:
        inspector = inspect(connection)
        if "alembic_version" not in inspector.get_table_names():
            logger.critical("%s alembic_version table missing", MIGRATIONS_PREFIX)
            raise RuntimeError("Database has no migration state")

        current_rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current_heads = {row[0] for row in current_rows if row and row[0]}
    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            MIGRATIONS_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s migration state verified", MIGRATIONS_PREFIX)
