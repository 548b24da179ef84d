from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shinytracker.clients.hunts import RemoteError
from shinytracker.db.database import get_session
from shinytracker.main import app
from shinytracker.models.db import Base
from shinytracker.models.hunt import HuntId, HuntRecord, NewHunt, ServerId, utcnow
from shinytracker.sync.connectivity import ConnectivityMonitor
from shinytracker.sync.engine import SyncEngine
from shinytracker.sync.store import LocalStore


class FakeRemote:
    """In-memory remote authority that records every call."""

    def __init__(self) -> None:
        self.hunts: dict[int, HuntRecord] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.errors: dict[str, RemoteError] = {}
        self._next_id = 100

    def seed(self, species_name: str, game: str, **fields: Any) -> HuntRecord:
        """Add a hunt directly on the server side."""
        hunt = HuntRecord(
            id=ServerId(self._next_id), species_name=species_name, game=game, **fields
        )
        self.hunts[self._next_id] = hunt
        self._next_id += 1
        return hunt

    def fail(self, error: RemoteError, *methods: str) -> None:
        """Make the named methods (all, if none given) raise `error`."""
        for method in methods or ("list", "create", "update", "delete"):
            self.errors[method] = error

    def recover(self) -> None:
        self.errors.clear()

    def calls_of(self, method: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == method]

    def _check(self, method: str) -> None:
        if method in self.errors:
            raise self.errors[method]

    async def list_hunts(self) -> list[HuntRecord]:
        self.calls.append(("list",))
        self._check("list")
        return [replace(hunt, types=list(hunt.types)) for hunt in self.hunts.values()]

    async def create_hunt(self, new_hunt: NewHunt) -> HuntRecord:
        self.calls.append(("create", new_hunt.species_name))
        self._check("create")
        return replace(
            self.seed(
                new_hunt.species_name,
                new_hunt.game,
                sprite_url=new_hunt.sprite_url,
                types=list(new_hunt.types),
                target_count=new_hunt.target_count,
                started_at=utcnow(),
            )
        )

    async def update_hunt(self, hunt_id: HuntId, payload: dict[str, Any]) -> None:
        self.calls.append(("update", hunt_id, dict(payload)))
        self._check("update")
        hunt = self.hunts.get(hunt_id.value)
        if hunt is not None:
            hunt.apply_payload(payload)

    async def delete_hunt(self, hunt_id: HuntId) -> None:
        self.calls.append(("delete", hunt_id))
        self._check("delete")
        self.hunts.pop(hunt_id.value, None)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def store(tmp_path: Path) -> LocalStore:
    return LocalStore(tmp_path / "state")


@pytest.fixture
def monitor() -> ConnectivityMonitor:
    """Starts online."""
    return ConnectivityMonitor(online=True)


@pytest.fixture
def engine(remote: FakeRemote, store: LocalStore, monitor: ConnectivityMonitor) -> SyncEngine:
    """Engine with debouncing disabled so pushes happen inline."""
    return SyncEngine(remote, store, monitor, debounce_seconds=0, max_attempts=3)


@pytest.fixture
def pikachu() -> NewHunt:
    return NewHunt(
        species_name="pikachu",
        game="Yellow",
        sprite_url="https://img.example/pikachu.png",
        types=["electric"],
    )


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def api_client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
