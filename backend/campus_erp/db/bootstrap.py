from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

import campus_erp.models  # noqa: F401
from campus_erp.db.base import Base
from campus_erp.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_TABLES: tuple[str, ...] = (
    "users",
    "departments",
    "sections",
    "subjects",
    "students",
    "faculty",
    "timetable",
    "attendance",
    "marks",
    "activity_logs",
)


def _assert_required_tables(bind: Engine) -> None:
    with bind.connect() as connection:
        table_names = set(inspect(connection).get_table_names())
    missing = [name for name in REQUIRED_TABLES if name not in table_names]
    if missing:
        raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing))}")


def ensure_runtime_schema(bind: Engine | None = None) -> None:
    """Create any missing tables, then verify the ones every route depends on."""
    target = bind or engine
    try:
        Base.metadata.create_all(bind=target)
        _assert_required_tables(target)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
    logger.info("Runtime schema ready (%d tables checked)", len(REQUIRED_TABLES))
