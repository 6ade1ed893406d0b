from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("FULL_MULTIPLE_COMPANIES_SUPPORT", "true")

from assetdb.database import Base, build_engine as build_database_engine  # noqa: E402
from assetdb.apps.accounts import models as account_models  # noqa: E402
from assetdb.apps.catalog import models as catalog_models  # noqa: E402
from assetdb.apps.assets import models as asset_models  # noqa: E402
from assetdb.apps.components import models as component_models  # noqa: E402
from assetdb.apps.audit import models as audit_models  # noqa: E402

TABLES = [
    account_models.Company.__table__,
    account_models.User.__table__,
    catalog_models.Category.__table__,
    catalog_models.Location.__table__,
    asset_models.Asset.__table__,
    component_models.Component.__table__,
    component_models.ComponentAssignment.__table__,
    audit_models.AuditEvent.__table__,
]


def build_engine(url: str = "sqlite+pysqlite:///:memory:"):
    engine = build_database_engine(url)
    Base.metadata.create_all(bind=engine, tables=TABLES)
    return engine


def build_sessionmaker(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session():
    engine = build_engine()
    session = build_sessionmaker(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def file_sessionmaker(tmp_path):
    """
    Sessionmaker over a SQLite file, for tests that need two sessions with
    their own connections and transactions.
    """
    engine = build_engine(f"sqlite+pysqlite:///{tmp_path / 'assetdb.sqlite3'}")
    try:
        yield build_sessionmaker(engine)
    finally:
        engine.dispose()
