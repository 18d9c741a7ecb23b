from logging.config import fileConfig
from sqlalchemy import create_engine
from alembic import context
import os
import sys

config = context.config


if config.config_file_name is not None:
    fileConfig(config.config_file_name)


sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from tablebook.config import Config
from tablebook.extensions import db
import tablebook.models  # noqa: F401

target_metadata = db.metadata

def get_database_url():
    """DATABASE_URL when set, otherwise the app's default (local SQLite)."""
    return os.getenv("DATABASE_URL") or Config.SQLALCHEMY_DATABASE_URI

def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")

def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of running it."""
    url = get_database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )

    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    """Run migrations against a live connection."""
    url = get_database_url()
    connectable = create_engine(url)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=_is_sqlite(url),
        )

        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
