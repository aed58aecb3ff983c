from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass


@dataclass
class DbTiming:
    total_ms: float = 0.0
    query_count: int = 0


_db_timing: ContextVar[DbTiming | None] = ContextVar("db_timing", default=None)


def start_db_timer() -> object:
    return _db_timing.set(DbTiming())


def stop_db_timer(token: object) -> None:
    _db_timing.reset(token)


def is_timing() -> bool:
    return _db_timing.get() is not None


def add_db_time(delta_ms: float) -> None:
    timing = _db_timing.get()
    if timing is None:
        return
    timing.total_ms += delta_ms
    timing.query_count += 1


def get_db_time_ms() -> float | None:
    timing = _db_timing.get()
    return timing.total_ms if timing is not None else None


def get_db_query_count() -> int | None:
    timing = _db_timing.get()
    return timing.query_count if timing is not None else None
