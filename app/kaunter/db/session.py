import time

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.kaunter.core.config import settings
from app.kaunter.core.db_timing import add_db_time, is_timing


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def build_engine(database_url: str):
    db_engine = create_engine(database_url, echo=False, future=True, connect_args=_connect_args(database_url))

    @event.listens_for(db_engine, "before_cursor_execute")
    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not is_timing():
            return
        conn.info["query_start_time"] = time.perf_counter()

    @event.listens_for(db_engine, "after_cursor_execute")
    def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start = conn.info.pop("query_start_time", None)
        if start is None:
            return
        add_db_time((time.perf_counter() - start) * 1000)

    return db_engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
