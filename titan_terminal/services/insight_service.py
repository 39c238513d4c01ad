"""
Narrative insight service.

The provider is an external collaborator (a generative-AI client in the
dashboard); this module only hands it an independent position snapshot and
normalises failures.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from titan_terminal.domain.exceptions import InsightUnavailable
from titan_terminal.domain.models import InsightReport, Position
from titan_terminal.domain.services.position_store import PositionStore

logger = logging.getLogger(__name__)


class NarrativeInsightProvider(Protocol):
    async def analyze(self, positions: List[Position]) -> InsightReport:
        ...


class InsightService:
    def __init__(self, provider: Optional[NarrativeInsightProvider] = None):
        self._provider = provider

    @property
    def enabled(self) -> bool:
        return self._provider is not None

    async def analyze(self, store: PositionStore) -> InsightReport:
        if self._provider is None:
            raise InsightUnavailable("No insight provider configured")
        positions = store.snapshot()
        if not positions:
            raise InsightUnavailable("Portfolio is empty")
        try:
            return await self._provider.analyze(positions)
        except Exception as exc:
            logger.error("Insight provider failed: %s", exc)
            raise InsightUnavailable(str(exc)) from exc
