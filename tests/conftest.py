from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from comments import repository
from core.config import Settings
from core.db import Database
from main import create_app


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(settings.database_path)
    await db.open()
    await repository.ensure_schema(db)
    db.mark_ready()
    yield db
    await db.close()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    # Entering the context runs the lifespan, so storage is open for the test.
    with TestClient(app) as test_client:
        yield test_client
