"""
============================================================
CRC CARD
============================================================
Module: alembic/env.py

Responsibilities:
  - Run the credential-store migrations online or offline (--sql).
  - Target the same database the API uses: `-x url=...` when given,
    otherwise Settings.resolved_database_url() (DATABASE_URL or DB_* with
    logged fallbacks).
  - Force the psycopg 3 SQLAlchemy dialect.

Collaborators:
  - alembic.context
  - sqlalchemy.create_engine (NullPool: one short-lived connection)
  - portal_auth.crosscutting.config.get_settings

Policy:
  - The store uses raw SQL; there is no ORM metadata and autogenerate
    stays off. Revisions are written by hand.
============================================================
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from portal_auth.crosscutting.config import get_settings

_DIALECT_PREFIXES = ("postgresql+psycopg://", "postgresql://", "postgres://")

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def database_url() -> str:
    raw = context.get_x_argument(as_dictionary=True).get("url") or (
        get_settings().resolved_database_url()
    )
    for prefix in _DIALECT_PREFIXES:
        if raw.startswith(prefix):
            return "postgresql+psycopg://" + raw[len(prefix):]
    return raw


def run_offline() -> None:
    context.configure(
        url=database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
