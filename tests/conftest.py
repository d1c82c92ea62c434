"""Test configuration and fixtures."""

from typing import Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from resource_registry.db import audit_models, models  # noqa: F401
from resource_registry.db.base import Base, create_registry_engine
from resource_registry.registry import ListingRegistry

DEPLOYER = "deployer"
NGO1 = "ngo_1"
NGO2 = "ngo_2"
VERIFIER = "verifier"

# Height the test ledger starts at
GENESIS_HEIGHT = 100


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Create a fresh in-memory database for each test."""
    engine = create_registry_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def registry(session_factory) -> ListingRegistry:
    """Registry deployed by DEPLOYER at GENESIS_HEIGHT."""
    return ListingRegistry(
        session_factory, deployer=DEPLOYER, initial_height=GENESIS_HEIGHT
    )


@pytest.fixture
def food_listing(registry) -> int:
    """An active listing owned by NGO1."""
    return registry.create_listing(NGO1, "food", 1000, "kg", "Location")
