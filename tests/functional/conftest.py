from __future__ import annotations

"""Functional test bootstrap.

Each test gets a fresh in-memory SQLite database (StaticPool, shared across
the TestClient worker thread) with the project migrations applied, so the
logic layer and the HTTP surface run against the real schema without
PostgreSQL.
"""

import pathlib
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from botaniq.config import AppConfig, DatabaseConfig, MigrationsConfig, StaticConfig
from botaniq.db.base import build_engine
from botaniq.db.migrations_runner import apply_migrations
from botaniq.logic.accounts import AccountManager
from botaniq.logic.survey_submission import SurveySubmissionEngine
from botaniq.main import create_app

ROOT = pathlib.Path(__file__).resolve().parents[2]
MIGRATIONS_DIR = ROOT / "migrations"
MEMORY_DSN = "sqlite+pysqlite:///:memory:"


@pytest.fixture()
def engine() -> Iterator[Engine]:
    eng = build_engine(url=MEMORY_DSN)
    apply_migrations(eng, MIGRATIONS_DIR)
    yield eng
    eng.dispose()


@pytest.fixture()
def accounts(engine: Engine) -> AccountManager:
    return AccountManager(engine)


@pytest.fixture()
def submissions(engine: Engine) -> SurveySubmissionEngine:
    return SurveySubmissionEngine(engine)


@pytest.fixture()
def app_config() -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(dsn=MEMORY_DSN),
        migrations=MigrationsConfig(auto_apply=True, directory=str(MIGRATIONS_DIR)),
        static=StaticConfig(directory=None),
    )


@pytest.fixture()
def client(engine: Engine, app_config: AppConfig) -> Iterator[TestClient]:
    app = create_app(engine=engine, config=app_config)
    with TestClient(app) as c:
        yield c
