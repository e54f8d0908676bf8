"""Test fixtures and configuration."""

from collections.abc import AsyncIterator, Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from lovingpaws import __version__
from lovingpaws.api.routes import router
from lovingpaws.main import register_exception_handlers
from lovingpaws.services.remote import HttpRemoteStore
from lovingpaws.services.store import LocalStore

REMOTE_URL = "https://remote.test/api"


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A fresh file-backed SQLite database per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'lovingpaws.db'}"


@pytest.fixture
async def store(database_url: str) -> AsyncIterator[LocalStore]:
    """An initialized store on an empty database."""
    local_store = LocalStore(database_url)
    await local_store.initialize()
    yield local_store
    await local_store.close()


@pytest.fixture
async def uninitialized_store(database_url: str) -> AsyncIterator[LocalStore]:
    """A store whose initialize() has not been called."""
    local_store = LocalStore(database_url)
    yield local_store
    await local_store.close()


@pytest.fixture
async def unavailable_store(tmp_path: Path) -> AsyncIterator[LocalStore]:
    """A store whose database directory does not exist yet."""
    local_store = LocalStore(f"sqlite+aiosqlite:///{tmp_path / 'later' / 'lovingpaws.db'}")
    yield local_store
    await local_store.close()


@pytest.fixture
def remote() -> HttpRemoteStore:
    return HttpRemoteStore(base_url=REMOTE_URL, api_key="test-key", timeout=5)


def create_api_test_app(store: LocalStore, remote: HttpRemoteStore) -> FastAPI:
    """Create a test FastAPI app around a test store."""
    test_app = FastAPI(title="LovingPaws Test", version=__version__)
    test_app.include_router(router)
    register_exception_handlers(test_app)
    test_app.state.store = store
    test_app.state.remote = remote
    return test_app


@pytest.fixture
async def async_client(store: LocalStore, remote: HttpRemoteStore) -> AsyncIterator[AsyncClient]:
    """Create async test client for API testing with a test store."""
    test_app = create_api_test_app(store, remote)
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def uninitialized_client(
    unavailable_store: LocalStore, remote: HttpRemoteStore
) -> AsyncIterator[AsyncClient]:
    """API client whose store cannot open its database yet."""
    test_app = create_api_test_app(unavailable_store, remote)
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac


# Mock data fixtures for testing


@pytest.fixture
def buddy() -> dict[str, Any]:
    """Pet fields for a dog named Buddy."""
    return {"id": "pet-buddy", "name": "Buddy", "type": "Dog", "breed": "Lab"}


@pytest.fixture
def make_entry() -> Callable[..., dict[str, Any]]:
    """Build raw health entry fields with sensible defaults for each type."""

    def _make_entry(entry_type: str = "symptom", **overrides: Any) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "pet_id": "pet-buddy",
            "type": entry_type,
            "title": f"{entry_type.capitalize()} entry",
            "date": date.today(),
        }
        if entry_type == "medication":
            entry.update(medication_name="Carprofen", dosage="25mg")
        elif entry_type == "appointment":
            entry.update(appointment_type="Checkup", clinic_name="Happy Paws Clinic")
        entry.update(overrides)
        return entry

    return _make_entry
