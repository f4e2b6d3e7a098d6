# tests/test_migrations.py
# PURPOSE: the Alembic revision builds the same tables the ORM maps.

import importlib.util
import os

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from taskboard.db import Base

REVISION = os.path.join(os.path.dirname(__file__), "..", "migrations", "versions", "0001_init_schema.py")


def _load_revision():
    module_spec = importlib.util.spec_from_file_location("rev_0001_init_schema", REVISION)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def _run(engine, fn):
    with engine.begin() as conn:
        ctx = MigrationContext.configure(conn)
        with Operations.context(ctx):
            fn()


def test_upgrade_matches_orm_and_downgrade_drops(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'migrated.db'}")
    revision = _load_revision()

    _run(engine, revision.upgrade)
    inspector = inspect(engine)
    assert set(inspector.get_table_names()) >= {"users", "tasks", "task_tags"}
    for table in Base.metadata.sorted_tables:
        migrated = {c["name"] for c in inspector.get_columns(table.name)}
        assert migrated == {c.name for c in table.columns}, table.name
    unique_email = [ix for ix in inspector.get_indexes("users") if ix["column_names"] == ["email"]]
    assert unique_email and unique_email[0]["unique"]

    _run(engine, revision.downgrade)
    assert inspect(engine).get_table_names() == []
    engine.dispose()
