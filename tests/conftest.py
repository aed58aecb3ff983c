import importlib
import os
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url


def _create_postgres_database(base_url: str):
    url = make_url(base_url)
    db_name = f"kaunter_test_{uuid.uuid4().hex[:12]}"
    admin_engine = create_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT", future=True)
    with admin_engine.connect() as conn:
        conn.execute(text(f'CREATE DATABASE "{db_name}"'))

    def drop() -> None:
        with admin_engine.connect() as conn:
            conn.execute(
                text("SELECT pg_terminate_backend(pid) FROM pg_stat_activity WHERE datname = :name"),
                {"name": db_name},
            )
            conn.execute(text(f'DROP DATABASE IF EXISTS "{db_name}"'))
        admin_engine.dispose()

    return url.set(database=db_name).render_as_string(hide_password=False), drop


def _setup_app(database_url: str):
    os.environ["DATABASE_URL"] = database_url

    import app.kaunter.core.config as config
    import app.kaunter.db.session as session
    import app.main as main

    importlib.reload(config)
    importlib.reload(session)
    importlib.reload(main)

    return main.create_app(), session


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


@pytest.fixture()
def client(tmp_path: Path):
    database_url = os.getenv("DATABASE_URL", "")
    cleanup = None

    if database_url.startswith("postgres"):
        database_url, cleanup = _create_postgres_database(database_url)
    else:
        database_url = f"sqlite+pysqlite:///{tmp_path / 'test.db'}"

    _run_migrations(database_url)
    app, session = _setup_app(database_url)

    with TestClient(app) as client:
        yield client

    session.engine.dispose()
    if cleanup:
        cleanup()


@pytest.fixture()
def db_session(client):
    from app.kaunter.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
