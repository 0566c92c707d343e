"""The alembic history must build the same schema the models declare."""

from pathlib import Path

import pytest
from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.config import Config
from alembic.migration import MigrationContext
from sqlalchemy import create_engine, inspect

import busbook.models  # noqa: F401
from busbook.db.base import Base


pytestmark = pytest.mark.integration

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def migrated_db(tmp_path):
    db_path = tmp_path / "migrated.db"
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    command.upgrade(cfg, "head")
    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


def test_upgrade_creates_every_table(migrated_db):
    tables = set(inspect(migrated_db).get_table_names())
    assert {"users", "buses", "trips", "reservations"} <= tables


def test_indexes_and_unique_constraints_match_models(migrated_db):
    with migrated_db.connect() as conn:
        ctx = MigrationContext.configure(conn, opts={"compare_type": False})
        diff = compare_metadata(ctx, Base.metadata)
    keyed = [d for d in diff if d[0] in ("add_index", "remove_index", "add_constraint", "remove_constraint")]
    assert keyed == []


def test_unique_name_and_email_are_unique_indexes(migrated_db):
    indexes = {ix["name"]: ix for ix in inspect(migrated_db).get_indexes("users")}
    assert indexes["ix_users_full_name"]["unique"]
    assert indexes["ix_users_email"]["unique"]
    plate = {ix["name"]: ix for ix in inspect(migrated_db).get_indexes("buses")}["ix_buses_plate_id"]
    assert plate["unique"]
