# alembic/env.py
import os
import sys
from logging.config import fileConfig

from sqlalchemy import create_engine

from alembic import context

# Put the project root on sys.path so 'quizform.models' and 'quizform.database'
# resolve when alembic is run from a checkout without an installed package.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# quizform.database loads the project .env and resolves DATABASE_URL
from quizform.database import DATABASE_URL, Base  # noqa: E402
from quizform import models  # noqa: E402,F401  registers the tables

print(f"DEBUG [alembic/env.py]: DATABASE_URL for Alembic: {DATABASE_URL.split('@')[-1]}")

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def sync_url(url: str) -> str:
    """Alembic runs schema operations synchronously, strip the async driver."""
    return url.replace("+asyncpg", "").replace("+aiosqlite", "")


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits the SQL to the script output instead of executing it.
    """
    offline_url = sync_url(DATABASE_URL)
    print(f"DEBUG [alembic/env.py run_migrations_offline]: Using URL: {offline_url.split('@')[-1]}")
    context.configure(
        url=offline_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a synchronous engine."""
    online_url = sync_url(DATABASE_URL)
    print(f"DEBUG [alembic/env.py run_migrations_online]: Connecting with URL: {online_url.split('@')[-1]}")
    connectable = create_engine(online_url)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    print("DEBUG [alembic/env.py]: Running migrations in offline mode.")
    run_migrations_offline()
else:
    print("DEBUG [alembic/env.py]: Running migrations in online mode.")
    run_migrations_online()
