import os

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# Keep the default store in memory so tests never write a session file
os.environ.setdefault("MOVIEHUB_STORE_URL", "sqlite://")

from moviehub.client import MovieHubClient
from moviehub.config import configure_logging
from tests.fake_service import FakeMovieHub

configure_logging("DEBUG")

SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture
def store_engine():
    """Fresh in-memory store for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def fake_service():
    return FakeMovieHub()


@pytest.fixture
async def hub(fake_service, store_engine):
    """Client wired to the in-process fake service, anonymous after start."""
    client = MovieHubClient(
        base_url="http://testserver",
        store_engine=store_engine,
        transport=httpx.ASGITransport(app=fake_service.app),
    )
    await client.start()
    yield client
    await client.aclose()


@pytest.fixture
async def logged_in_hub(hub):
    await hub.auth.login("ayse@example.com", "secret1")
    return hub
