import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

from campus_erp.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_assert_required_tables", lambda bind: _raise_error("missing required schema"))

    with pytest.raises(RuntimeError, match="Runtime schema bootstrap failed"):
        bootstrap.ensure_runtime_schema()


def test_runtime_schema_bootstrap_creates_required_tables():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    bootstrap.ensure_runtime_schema(bind=engine)

    table_names = set(inspect(engine).get_table_names())
    assert set(bootstrap.REQUIRED_TABLES) <= table_names
    engine.dispose()
