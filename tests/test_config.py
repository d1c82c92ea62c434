"""Tests for settings and database URL handling."""

import asyncio

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine.url import make_url

from resource_registry.config import Settings, get_settings, reset_settings
from resource_registry.db.base import get_database_url, init_database
from resource_registry.registry import ListingRegistry


@pytest.fixture(autouse=True)
def restore_settings():
    original = get_settings()
    yield
    reset_settings(original)


def test_registry_settings_from_environment(monkeypatch):
    monkeypatch.setenv("REGISTRY_DEPLOYER", "root_admin")
    monkeypatch.setenv("REGISTRY_INITIAL_HEIGHT", "500")

    settings = reset_settings()

    assert settings.registry_deployer == "root_admin"
    assert settings.registry_initial_height == 500
    assert get_settings() is settings


def test_registry_uses_configured_deployer(session_factory):
    reset_settings(Settings(registry_deployer="ops", registry_initial_height=7))

    registry = ListingRegistry(session_factory)

    assert registry.get_admin() == "ops"
    assert registry.get_current_height() == 7


@pytest.mark.parametrize(
    "raw, drivername, database",
    [
        ("sqlite+aiosqlite:///./registry.db", "sqlite", "./registry.db"),
        ("postgresql+asyncpg://user:secret@db/registry", "postgresql+psycopg", "registry"),
        ("sqlite:///:memory:", "sqlite", ":memory:"),
    ],
)
def test_database_url_uses_sync_driver(raw, drivername, database):
    url = make_url(get_database_url(raw))

    assert url.drivername == drivername
    assert url.database == database


def test_database_url_keeps_credentials():
    url = make_url(get_database_url("postgresql+asyncpg://user:secret@db:5433/registry"))

    assert url.username == "user"
    assert url.password == "secret"
    assert url.host == "db"
    assert url.port == 5433


def test_init_database_creates_tables():
    engine = create_engine("sqlite:///:memory:")

    asyncio.run(init_database(engine))

    tables = set(inspect(engine).get_table_names())
    assert {
        "registry_state",
        "listings",
        "listing_categories",
        "listing_collaborators",
        "listing_verifications",
        "listing_updates",
    } <= tables
