"""
Terminal runtime: position store, simulated stream, subscription bus and
quote board, composed and owned in one place.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, Optional

from titan_terminal.config import Settings, settings as default_settings
from titan_terminal.domain.services.position_store import PositionStore
from titan_terminal.infrastructure.market_data.quote_board import QuoteBoard
from titan_terminal.infrastructure.market_data.streams.subscription_bus import (
    STATUS_TOPIC,
    SubscriptionBus,
)
from titan_terminal.infrastructure.market_data.tick_simulator import MarketTickSimulator
from titan_terminal.infrastructure.storage import KeyValueStore, get_key_value_store
from titan_terminal.services.insight_service import InsightService, NarrativeInsightProvider

logger = logging.getLogger(__name__)


class TerminalRuntime:
    def __init__(
        self,
        config: Optional[Settings] = None,
        kv_store: Optional[KeyValueStore] = None,
        simulator: Optional[MarketTickSimulator] = None,
        insight_provider: Optional[NarrativeInsightProvider] = None,
    ):
        self._config = config or default_settings
        self.bus = SubscriptionBus()
        self._kv_store = kv_store or get_key_value_store(self._config)
        self.store = PositionStore(self._kv_store, key=self._config.STORAGE_KEY)
        self.simulator = simulator or MarketTickSimulator(
            self.bus,
            rng=random.Random(self._config.STREAM_SEED),
            tick_interval=self._config.STREAM_TICK_INTERVAL_MS / 1000.0,
        )
        self.quote_board = QuoteBoard(bar_window=self._config.QUOTE_BAR_WINDOW)
        self.insights = InsightService(insight_provider)
        self._unsubscribe_status = None
        self._status: Dict[str, object] = {
            "enabled": bool(self._config.STREAM_ENABLED),
            "connected": False,
            "last_status": None,
            "storage_warning": None,
        }

    def get_status(self) -> Dict[str, object]:
        status = dict(self._status)
        status["state"] = self.simulator.state.value
        status["symbols"] = self.simulator.symbols()
        return status

    async def start(self) -> None:
        result = await self.store.load()
        if result.error is not None:
            self._status["storage_warning"] = str(result.error)

        self.quote_board.attach(self.bus)
        self._unsubscribe_status = self.bus.subscribe(self._handle_status, STATUS_TOPIC)

        if not self._config.STREAM_ENABLED:
            logger.info("Simulated market stream disabled")
            return
        self.simulator.connect()

    async def stop(self) -> None:
        await self.simulator.disconnect()
        self.quote_board.detach()
        if self._unsubscribe_status is not None:
            self._unsubscribe_status()
            self._unsubscribe_status = None
        close = getattr(self._kv_store, "close", None)
        if close is not None:
            await close()
        self._status["connected"] = False

    def _handle_status(self, status: Dict[str, object]) -> None:
        self._status["last_status"] = status.get("status")
        self._status["connected"] = status.get("status") == "connected"
