from logging.config import fileConfig
from sqlalchemy import pool
from alembic import context
import sys
import os

sys.path.append(os.path.abspath("."))

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# .env / ortam değişkenlerinden gelen adres alembic.ini içindekinin önüne geçer
from sigorta_api import config as uygulama_ayarlari
from sigorta_api.veritabani import Base, engine_olustur
from sigorta_api import semalar  # noqa: F401  (tabloların metadata'ya kaydı için)

target_metadata = Base.metadata


def _database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return uygulama_ayarlari.DATABASE_URL
    return config.get_main_option("sqlalchemy.url") or uygulama_ayarlari.DATABASE_URL


def run_migrations_offline() -> None:
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_olustur(_database_url())

    with connectable.connect() as connection:
        # SQLite ALTER TABLE kısıtları nedeniyle batch modu kullanılır
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True
        )
        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
