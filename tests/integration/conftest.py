from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from orderbot.api.container import Container, build_container
from orderbot.api.main import create_app
from orderbot.config import Settings
from orderbot.infrastructure.db.models import order as _order_models  # noqa: F401
from orderbot.infrastructure.db.models import promotion as _promotion_models  # noqa: F401
from orderbot.infrastructure.db.models.catalog import Base
from orderbot.infrastructure.db.session import build_engine
from orderbot.tools.seed import seed


@pytest.fixture()
def engine(tmp_path: Path) -> Iterator[Engine]:
    db_engine = build_engine(f"sqlite:///{tmp_path / 'orderbot.db'}")
    Base.metadata.create_all(db_engine)
    seed(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture()
def container(engine: Engine) -> Container:
    settings = Settings(database_url=str(engine.url), app_env="test")
    return build_container(settings, engine=engine)


@pytest.fixture()
def client(container: Container) -> Iterator[TestClient]:
    with TestClient(create_app(container=container)) as test_client:
        yield test_client
