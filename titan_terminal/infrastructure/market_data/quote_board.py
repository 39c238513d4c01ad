"""
Quote board for the ticker strip and the indices panel.

Keeps the latest MarketUpdate per symbol, the latest MarketIndex per name and
a bounded history of one-minute OHLC bars built from bus events.
"""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, List, Optional

from titan_terminal.domain.models import MarketIndex, MarketUpdate
from titan_terminal.infrastructure.market_data.streams.subscription_bus import (
    INDEX_TOPIC,
    TICK_TOPIC,
    SubscriptionBus,
)


def _minute_of(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.replace(second=0, microsecond=0)


@dataclass
class MinuteBar:
    symbol: str
    start: datetime
    open: float
    high: float
    low: float
    close: float
    ticks: int = 1

    @classmethod
    def starting(cls, symbol: str, start: datetime, price: float) -> "MinuteBar":
        return cls(symbol=symbol, start=start, open=price, high=price, low=price, close=price)

    def absorb(self, price: float) -> None:
        self.high = max(self.high, price)
        self.low = min(self.low, price)
        self.close = price
        self.ticks += 1

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        return data


class QuoteBoard:
    def __init__(self, bar_window: int = 240):
        self._bar_window = bar_window
        self._quotes: Dict[str, MarketUpdate] = {}
        self._indices: Dict[str, MarketIndex] = {}
        self._open_bars: Dict[str, MinuteBar] = {}
        self._closed_bars: Dict[str, Deque[MinuteBar]] = {}
        self._unsubscribers: List[Callable[[], None]] = []

    def attach(self, bus: SubscriptionBus) -> None:
        self._unsubscribers.append(bus.subscribe(self.ingest_update, TICK_TOPIC))
        self._unsubscribers.append(bus.subscribe(self.ingest_index, INDEX_TOPIC))

    def detach(self) -> None:
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def ingest_update(self, update: MarketUpdate) -> None:
        self._quotes[update.symbol] = update

        minute = _minute_of(update.timestamp)
        bar = self._open_bars.get(update.symbol)
        if bar is not None and bar.start == minute:
            bar.absorb(update.price)
            return

        if bar is not None:
            history = self._closed_bars.setdefault(update.symbol, deque(maxlen=self._bar_window))
            history.append(bar)
        self._open_bars[update.symbol] = MinuteBar.starting(update.symbol, minute, update.price)

    def ingest_index(self, index: MarketIndex) -> None:
        self._indices[index.name] = index

    def get_last_quote(self, symbol: str) -> Optional[MarketUpdate]:
        return self._quotes.get(symbol.upper())

    def get_last_quotes(self) -> List[MarketUpdate]:
        return list(self._quotes.values())

    def get_last_prices(self, symbols: List[str]) -> Dict[str, float]:
        quotes = (self._quotes.get(s.upper()) for s in symbols)
        return {q.symbol: q.price for q in quotes if q is not None}

    def get_indices(self) -> List[MarketIndex]:
        return list(self._indices.values())

    def get_recent_bars(self, symbol: str, limit: int = 60) -> List[MinuteBar]:
        """Closed bars only; the bar for the current minute is still forming."""
        history = self._closed_bars.get(symbol.upper())
        return list(history)[-limit:] if history else []

    def get_status(self) -> Dict[str, Dict[str, object]]:
        now = datetime.now(tz=timezone.utc)
        return {
            symbol: {
                "price": quote.price,
                "ts": quote.timestamp.isoformat(),
                "age_seconds": (now - quote.timestamp).total_seconds(),
            }
            for symbol, quote in self._quotes.items()
        }
