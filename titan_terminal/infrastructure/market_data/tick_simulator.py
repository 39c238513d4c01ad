"""
Simulated market data stream (random walk).

One background task picks a tracked symbol at random every tick, perturbs
its price and publishes the resulting MarketUpdate on the bus. The same walk
drives the market indices panel.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from titan_terminal.domain.models import AssetClass, MarketIndex, MarketUpdate, StreamState
from titan_terminal.infrastructure.market_data.streams.subscription_bus import (
    INDEX_TOPIC,
    STATUS_TOPIC,
    TICK_TOPIC,
    SubscriptionBus,
)

logger = logging.getLogger(__name__)

PRICE_EPSILON = 1e-6
DEFAULT_TICK_INTERVAL_SECONDS = 0.4
DEFAULT_VOLATILITY = 0.003
INDEX_VOLATILITY = 0.002

VOLATILITY_BY_CLASS: Dict[AssetClass, float] = {
    AssetClass.CRYPTO: 0.012,
    AssetClass.EQUITY: 0.004,
    AssetClass.COMMODITY: 0.003,
    AssetClass.CURRENCY: 0.002,
}

# symbol -> (initial price, 24h change in percent, asset class)
SEED_PRICES: Dict[str, Tuple[float, float, AssetClass]] = {
    "AAPL": (178.35, 1.25, AssetClass.EQUITY),
    "GOOGL": (140.50, -0.5, AssetClass.EQUITY),
    "MSFT": (410.20, 0.8, AssetClass.EQUITY),
    "AMZN": (175.30, 1.1, AssetClass.EQUITY),
    "META": (485.10, 2.3, AssetClass.EQUITY),
    "TSLA": (198.50, -1.1, AssetClass.EQUITY),
    "NVDA": (850.25, 3.5, AssetClass.EQUITY),
    "BTC": (64230.50, -2.4, AssetClass.CRYPTO),
    "ETH": (3450.00, 1.5, AssetClass.CRYPTO),
}

# name -> (value, change since session open)
SEED_INDICES: Dict[str, Tuple[float, float]] = {
    "S&P 500": (5088.80, 52.10),
    "Dow Jones": (39131.53, 62.42),
    "NASDAQ": (16041.62, -44.80),
    "FTSE 100": (7706.28, 21.98),
    "Nikkei 225": (39098.68, 836.52),
    "DAX": (17419.33, 24.89),
}

SleepFn = Callable[[float], Awaitable[None]]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def volatility_for(asset_class: Optional[AssetClass]) -> float:
    return VOLATILITY_BY_CLASS.get(asset_class, DEFAULT_VOLATILITY)


def random_walk_step(price: float, volatility: float, rng: random.Random) -> Tuple[float, float]:
    """
    Perturb ``price`` by a uniform fraction in ``[-volatility/2, volatility/2)``.

    Returns ``(new_price, fraction)``. A step that would reach zero or below
    is clamped to PRICE_EPSILON and the fraction restated for the clamped move.
    """
    fraction = (rng.random() - 0.5) * volatility
    new_price = price * (1 + fraction)
    if new_price <= 0 or math.isnan(new_price):
        new_price = PRICE_EPSILON
        fraction = new_price / price - 1
    return new_price, fraction


class MarketTickSimulator:
    def __init__(
        self,
        bus: SubscriptionBus,
        symbols: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL_SECONDS,
        volatility_overrides: Optional[Dict[str, float]] = None,
        indices: Optional[Dict[str, Tuple[float, float]]] = None,
        clock: Callable[[], datetime] = _utcnow,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if tick_interval <= 0:
            raise ValueError("Tick interval must be positive")
        self._bus = bus
        self._rng = rng or random.Random()
        self._tick_interval = tick_interval
        self._clock = clock
        self._sleep = sleep
        self._state = StreamState.DISCONNECTED
        self._task: Optional[asyncio.Task] = None

        self._universe: List[str] = []
        self._prices: Dict[str, float] = {}
        self._volatility: Dict[str, float] = {}
        self._last_ts: Dict[str, datetime] = {}
        self._opening: Dict[str, Tuple[float, float]] = {}
        # True while the loop is parked in sleep (or not started yet)
        self._idle = True
        self._announced = False
        self._overrides = {k.upper(): v for k, v in (volatility_overrides or {}).items()}

        for symbol in (SEED_PRICES.keys() if symbols is None else symbols):
            symbol = symbol.strip().upper()
            if symbol not in SEED_PRICES:
                raise ValueError(f"No seed price for {symbol}; use register_symbol()")
            price, change, asset_class = SEED_PRICES[symbol]
            self._track(symbol, asset_class)
            self._opening[symbol] = (price, change)

        index_seed = SEED_INDICES if indices is None else indices
        self._index_values: Dict[str, float] = {name: value for name, (value, _) in index_seed.items()}
        self._index_base: Dict[str, float] = {
            name: value - change for name, (value, change) in index_seed.items()
        }

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def is_streaming(self) -> bool:
        return self._state is StreamState.STREAMING

    def symbols(self) -> List[str]:
        return list(self._universe)

    def price(self, symbol: str) -> Optional[float]:
        return self._prices.get(symbol.upper())

    def opening_quote(self, symbol: str) -> Optional[Tuple[float, float]]:
        """``(price, 24h change in percent)`` the symbol started the session with."""
        return self._opening.get(symbol.upper())

    def indices(self) -> List[MarketIndex]:
        return [self._index_snapshot(name) for name in self._index_values]

    def _track(self, symbol: str, asset_class: Optional[AssetClass]) -> None:
        if symbol in self._volatility:
            return
        self._universe.append(symbol)
        self._volatility[symbol] = self._overrides.get(symbol, volatility_for(asset_class))

    def register_symbol(
        self,
        symbol: str,
        initial_price: float,
        asset_class: Optional[AssetClass] = None,
    ) -> None:
        """Start tracking ``symbol``; a symbol already tracked is left untouched."""
        symbol = symbol.strip().upper()
        if not symbol:
            raise ValueError("Symbol cannot be empty")
        if not math.isfinite(initial_price) or initial_price <= 0:
            raise ValueError("Initial price must be a positive finite number")
        if symbol in self._volatility:
            return
        self._track(symbol, asset_class)
        self._prices[symbol] = float(initial_price)
        self._opening[symbol] = (float(initial_price), 0.0)
        logger.info("Tracking %s from %.4f", symbol, initial_price)

    def connect(self) -> None:
        """Start streaming. Must be called from a running event loop."""
        if self._state is StreamState.STREAMING:
            return
        if not self._universe:
            raise ValueError("Cannot stream an empty symbol universe")
        for symbol in self._universe:
            if symbol not in self._prices:
                self._prices[symbol] = self._opening[symbol][0]
        self._state = StreamState.STREAMING
        self._idle = True
        self._announced = False
        self._task = asyncio.create_task(self._run())
        logger.info(
            "Market stream connected: %d symbols every %.0f ms",
            len(self._universe),
            self._tick_interval * 1000,
        )

    async def disconnect(self) -> None:
        """
        Stop streaming; no tick starts after this returns.

        The loop is cancelled only while it sleeps. A tick already being
        dispatched finishes reaching every listener first, then the loop exits.
        """
        if self._state is StreamState.DISCONNECTED:
            return
        self._state = StreamState.DISCONNECTED
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            if self._idle:
                task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Market stream disconnected")
        if self._announced:
            self._announced = False
            await self._emit_status("disconnected")

    async def _run(self) -> None:
        self._idle = False
        self._announced = True
        await self._emit_status("connected")
        # A reconnect from inside a listener hands the loop to a fresh task
        while self._state is StreamState.STREAMING and self._task is asyncio.current_task():
            self._idle = True
            try:
                await self._sleep(self._tick_interval)
            finally:
                self._idle = False
            await self.tick()

    async def _emit_status(self, status: str) -> None:
        await self._bus.publish(
            STATUS_TOPIC,
            {"status": status, "symbols": len(self._universe), "ts": self._clock()},
        )

    async def tick(self) -> Optional[MarketUpdate]:
        """
        Advance one symbol and one index and publish both.

        Does nothing while disconnected. If a tick listener disconnects the
        stream, the index move computed for this tick is discarded.
        """
        if self._state is not StreamState.STREAMING:
            return None
        symbol = self._rng.choice(self._universe)
        old_price = self._prices[symbol]
        new_price, fraction = random_walk_step(old_price, self._volatility[symbol], self._rng)
        index = self._step_index()

        ts = self._clock()
        last_ts = self._last_ts.get(symbol)
        if last_ts is not None and ts < last_ts:
            ts = last_ts
        self._last_ts[symbol] = ts
        self._prices[symbol] = new_price

        update = MarketUpdate(
            symbol=symbol,
            price=new_price,
            absolute_change=old_price * fraction,
            percent_change=fraction * 100.0,
            timestamp=ts,
        )
        logger.debug("Tick %s %.4f (%+.3f%%)", symbol, new_price, update.percent_change)
        await self._bus.publish(TICK_TOPIC, update)

        if index is not None and self._state is StreamState.STREAMING:
            name, value = index
            self._index_values[name] = value
            await self._bus.publish(INDEX_TOPIC, self._index_snapshot(name))
        return update

    def _step_index(self) -> Optional[Tuple[str, float]]:
        if not self._index_values:
            return None
        name = self._rng.choice(list(self._index_values))
        value, _ = random_walk_step(self._index_values[name], INDEX_VOLATILITY, self._rng)
        return name, value

    def _index_snapshot(self, name: str) -> MarketIndex:
        value = self._index_values[name]
        base = self._index_base[name]
        absolute_change = value - base
        percent_change = absolute_change / base * 100.0 if base > 0 else 0.0
        return MarketIndex(
            name=name,
            value=value,
            absolute_change=absolute_change,
            percent_change=percent_change,
        )
