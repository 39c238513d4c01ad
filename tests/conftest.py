import asyncio
from datetime import datetime, timezone
from typing import AsyncGenerator, List, Optional

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from titan_terminal.api.routes import currency, health, market_data, portfolio
from titan_terminal.config import Settings
from titan_terminal.domain.models import AssetClass, Position, PositionDraft
from titan_terminal.domain.services.position_store import PositionStore
from titan_terminal.infrastructure.market_data.streams.subscription_bus import SubscriptionBus
from titan_terminal.infrastructure.storage import InMemoryKeyValueStore
from titan_terminal.realtime.runtime import TerminalRuntime


FIXED_NOW = datetime(2024, 1, 15, 15, 0, 0, tzinfo=timezone.utc)


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class ManualSleep:
    """
    Drop-in for asyncio.sleep that blocks until the test releases it.

    Each released waiter lets exactly one stream loop iteration run.
    """

    def __init__(self):
        self.waiters: List[asyncio.Future] = []
        self.calls = 0

    async def __call__(self, seconds: float) -> None:
        self.calls += 1
        fut = asyncio.get_running_loop().create_future()
        self.waiters.append(fut)
        await fut

    @property
    def pending(self) -> List[asyncio.Future]:
        return [w for w in self.waiters if not w.done()]

    async def release(self, rounds: int = 1) -> None:
        for _ in range(rounds):
            pending = self.pending
            self.waiters = []
            for waiter in pending:
                waiter.set_result(None)
            await settle()


class FailingKeyValueStore:
    """Persistence collaborator that is down."""

    def __init__(self, fail_get: bool = True, fail_set: bool = True):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.data = {}

    async def get(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise ConnectionError("storage offline")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise ConnectionError("storage offline")
        self.data[key] = value


def make_position(
    symbol: str = "AAPL",
    asset_class: AssetClass = AssetClass.EQUITY,
    quantity: float = 10,
    avg_cost: float = 100.0,
    current_price: float = 110.0,
    position_id: Optional[str] = None,
) -> Position:
    return Position(
        id=position_id or f"{symbol}-{quantity}",
        symbol=symbol,
        name=f"{symbol} test",
        asset_class=asset_class,
        quantity=quantity,
        avg_cost=avg_cost,
        current_price=current_price,
        change_24h=0.0,
        last_updated=FIXED_NOW,
    )


def make_draft(**overrides) -> PositionDraft:
    fields = {
        "symbol": "AAPL",
        "name": "Apple Inc.",
        "asset_class": AssetClass.EQUITY,
        "quantity": 150,
        "avg_cost": 145.20,
        "current_price": 178.35,
        "change_24h": 1.25,
    }
    fields.update(overrides)
    return PositionDraft(**fields)


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv_store) -> PositionStore:
    return PositionStore(kv_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def bus() -> SubscriptionBus:
    return SubscriptionBus()


@pytest.fixture
def manual_sleep() -> ManualSleep:
    return ManualSleep()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(STREAM_ENABLED=False, STORAGE_BACKEND="memory", STREAM_SEED=7)


@pytest.fixture
async def runtime(test_settings) -> AsyncGenerator[TerminalRuntime, None]:
    rt = TerminalRuntime(test_settings, kv_store=InMemoryKeyValueStore())
    await rt.start()
    yield rt
    await rt.stop()


@pytest.fixture
async def app(runtime) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
    app.include_router(market_data.router, prefix="/api/v1/market", tags=["Market Data"])
    app.include_router(currency.router, prefix="/api/v1/currencies", tags=["Currencies"])
    app.state.runtime = runtime
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
