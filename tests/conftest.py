"""Shared fixtures: one in-memory SQLite store per test."""

import os

# Avant tout import draftroom : pas de fichier .db, pas d'appel réseau
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("SEED_CHAMPIONS", "false")

import pytest
from fastapi.testclient import TestClient

from draftroom.database import init_db, make_engine, make_session_factory
from draftroom.storage import Storage
from draftroom.web.api import create_app


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine):
    return Storage(make_session_factory(engine))


@pytest.fixture
def client(storage):
    with TestClient(create_app(storage)) as test_client:
        yield test_client


@pytest.fixture
def champions(storage):
    """Three champions, no evaluation yet."""
    storage.insert_champions(
        {
            "id": champ_id,
            "name": champ_id,
            "image_url": f"https://ddragon.test/cdn/15.1.1/img/champion/{champ_id}.png",
            "key": str(key),
            "roles": roles,
        }
        for champ_id, key, roles in (
            ("Ahri", 103, ["MID"]),
            ("Gnar", 150, ["TOP"]),
            ("Thresh", 412, ["SUP"]),
        )
    )
    return ["Ahri", "Gnar", "Thresh"]
