"""Alembic environment for the Strands schema.

Migrations run against settings.DATABASE_URL. The user, friendship, group,
media, strand and comment models are imported so their tables land in
Base.metadata for autogenerate.
"""
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

# Make the strands package importable when alembic runs from backend/
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from strands.config import settings
from strands.database import Base

# Import all models so they register with Base.metadata
from strands.models.user import User
from strands.models.friendship import Friendship
from strands.models.group import Group, GroupMember, GroupInvite, GroupReadStatus
from strands.models.media import Media
from strands.models.strand import Strand, StrandMedia, StrandShare, StrandPin, StrandFire
from strands.models.comment import StrandComment

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
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
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
