"""
Tests for the initial Alembic revision.

The revision is applied to a scratch SQLite database and compared with the
tables the models declare.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from patient_dashboard.database.base import metadata
from patient_dashboard.database.init_db import import_models

REVISION_PATH = Path(__file__).resolve().parent.parent / "alembic" / "versions" / "001_initial_schema.py"


def load_revision():
    spec = importlib.util.spec_from_file_location("initial_schema", REVISION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def connection():
    engine = create_engine("sqlite://")
    with engine.connect() as conn:
        yield conn
    engine.dispose()


def apply(connection, step):
    context = MigrationContext.configure(connection)
    with Operations.context(context):
        step()


def test_upgrade_creates_model_tables(connection):
    revision = load_revision()
    import_models()

    apply(connection, revision.upgrade)

    inspector = inspect(connection)
    assert set(inspector.get_table_names()) == set(metadata.tables)
    for table in metadata.tables.values():
        migrated = {column["name"] for column in inspector.get_columns(table.name)}
        assert migrated == set(table.columns.keys()), table.name


def test_upgrade_creates_owner_indexes(connection):
    apply(connection, load_revision().upgrade)
    inspector = inspect(connection)

    medication_indexes = {index["name"]: index["column_names"] for index in inspector.get_indexes("medications")}
    shipment_indexes = {index["name"]: index["column_names"] for index in inspector.get_indexes("shipments")}
    weight_uniques = inspector.get_unique_constraints("weight_entries")

    assert medication_indexes["ix_medications_user_id_start_date"] == ["user_id", "start_date"]
    assert shipment_indexes["ix_shipments_user_id_created_at"] == ["user_id", "created_at"]
    assert shipment_indexes["ix_shipments_user_id_status"] == ["user_id", "status"]
    assert ["user_id", "recorded_at"] in [constraint["column_names"] for constraint in weight_uniques]


def test_downgrade_removes_everything(connection):
    revision = load_revision()

    apply(connection, revision.upgrade)
    apply(connection, revision.downgrade)

    assert inspect(connection).get_table_names() == []
