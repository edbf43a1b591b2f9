"""Alembic environment: guardroster's Base and database_url, SQLite or PostgreSQL.
Paths resolve through pathlib so migrations run from any working directory."""
from pathlib import Path
import sys

from logging.config import fileConfig

from alembic import context

# Project root onto sys.path so `guardroster` imports without an install
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from guardroster.config import settings
from guardroster.database import Base
from guardroster import models  # noqa: F401  registers every table on Base.metadata

config = context.config
if config.config_file_name is not None:
    config_path = Path(config.config_file_name).resolve()
    if config_path.exists():
        fileConfig(str(config_path))

# Alembic runs sync: asyncpg -> psycopg2, aiosqlite -> plain sqlite
# Relative SQLite paths are made absolute against the project root
target_metadata = Base.metadata
db_url = settings.database_url
if db_url.startswith("postgres://"):
    db_url = "postgresql://" + db_url[len("postgres://"):]
if db_url.startswith("sqlite+aiosqlite"):
    sync_url = db_url.replace("sqlite+aiosqlite", "sqlite", 1)
    if sync_url.startswith("sqlite:///./"):
        rel = sync_url.replace("sqlite:///./", "").strip()
        abs_path = (_project_root / rel).resolve().as_posix()
        sync_url = "sqlite:///" + abs_path
elif db_url.startswith("sqlite:///"):
    sync_url = db_url
    if "./" in sync_url:
        parts = sync_url.replace("sqlite:///", "").strip()
        abs_path = (_project_root / parts).resolve().as_posix()
        sync_url = "sqlite:///" + abs_path
elif db_url.startswith("postgresql+asyncpg"):
    sync_url = db_url.replace("postgresql+asyncpg", "postgresql+psycopg2", 1)
else:
    sync_url = db_url.replace("postgresql://", "postgresql+psycopg2://", 1)
config.set_main_option("sqlalchemy.url", sync_url)


def run_migrations_offline() -> None:
    """Offline: emit SQL only"""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    from sqlalchemy import create_engine
    url = config.get_main_option("sqlalchemy.url")
    connectable = create_engine(url)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
