"""
POSITION STORE
Single source of truth for portfolio holdings

RESPONSIBILITIES:
- Own the in-memory position list
- Validate and apply add / remove / reprice
- Checkpoint the full list to the key-value collaborator after every mutation

Persistence failures never escape: load degrades to the seed portfolio and
save is logged. Both report the failure on their result object so callers can
surface a warning.
"""

import asyncio
import logging
import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Set

from pydantic import ValidationError

from titan_terminal.domain.exceptions import InvalidPosition, PersistenceUnavailable
from titan_terminal.domain.models import AssetClass, Position, PositionDraft
from titan_terminal.domain.schemas.position import PositionRecord, position_list_adapter
from titan_terminal.infrastructure.storage.types import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "titan_terminal_assets"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def seed_positions(now: datetime) -> List[Position]:
    """Example portfolio shown when nothing has been saved yet."""
    return [
        Position("1", "AAPL", "Apple Inc.", AssetClass.EQUITY, 150, 145.20, 178.35, 1.25, now),
        Position("2", "BTC", "Bitcoin", AssetClass.CRYPTO, 0.45, 42000.0, 64230.50, -2.4, now),
        Position("3", "XAU", "Gold Ounce", AssetClass.COMMODITY, 10, 1800.0, 2045.10, 0.8, now),
        Position("4", "TSLA", "Tesla Inc.", AssetClass.EQUITY, 50, 210.00, 198.50, -1.1, now),
        Position("5", "NVDA", "NVIDIA Corp", AssetClass.EQUITY, 25, 450.00, 850.25, 3.5, now),
    ]


@dataclass(frozen=True)
class LoadResult:
    positions: List[Position]
    from_seed: bool
    error: Optional[PersistenceUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SaveResult:
    error: Optional[PersistenceUnavailable] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _require_price(field: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidPosition(field, "must be a finite number")
    if value < 0:
        raise InvalidPosition(field, "must not be negative")


def validate_draft(draft: PositionDraft) -> None:
    """Raise InvalidPosition for any draft that would break store invariants."""
    if not draft.symbol or not draft.symbol.strip():
        raise InvalidPosition("symbol", "must not be empty")
    try:
        AssetClass(draft.asset_class)
    except ValueError:
        raise InvalidPosition("asset_class", f"unknown asset class {draft.asset_class!r}") from None
    if not math.isfinite(draft.quantity):
        raise InvalidPosition("quantity", "must be a finite number")
    _require_price("avg_cost", draft.avg_cost)
    _require_price("current_price", draft.current_price)
    if not math.isfinite(draft.change_24h):
        raise InvalidPosition("change_24h", "must be a finite number")


class PositionStore:
    """
    Holdings list plus its persistence checkpoint.

    Mutations serialize on one asyncio lock; readers get copies via
    ``snapshot()`` and never see the live objects.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ):
        self._kv_store = kv_store
        self._key = key
        self._clock = clock
        self._id_factory = id_factory
        self._positions: List[Position] = []
        self._issued_ids: Set[str] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._positions)

    def snapshot(self) -> List[Position]:
        return [replace(p) for p in self._positions]

    def get(self, position_id: str) -> Optional[Position]:
        for position in self._positions:
            if position.id == position_id:
                return replace(position)
        return None

    def filter(
        self,
        query: Optional[str] = None,
        asset_class: Optional[AssetClass] = None,
    ) -> List[Position]:
        """
        Copies of the positions matching a search term and an asset class.

        ``query`` matches case-insensitively anywhere in the symbol or the
        name; a blank query matches everything.
        """
        needle = (query or "").strip().lower()
        matches = []
        for position in self._positions:
            if asset_class is not None and position.asset_class != asset_class:
                continue
            if needle and needle not in position.symbol.lower() and needle not in position.name.lower():
                continue
            matches.append(replace(position))
        return matches

    async def load(self) -> LoadResult:
        """Replace the in-memory list with the persisted one (or the seed set)."""
        async with self._lock:
            result = await self._read()
            self._positions = [replace(p) for p in result.positions]
            self._issued_ids.update(p.id for p in self._positions)
        logger.info(
            "Loaded %d positions (seed=%s)", len(result.positions), result.from_seed
        )
        return result

    async def _read(self) -> LoadResult:
        try:
            raw = await self._kv_store.get(self._key)
        except Exception as exc:
            error = PersistenceUnavailable("load", str(exc))
            logger.warning("Failed to read positions, using seed portfolio: %s", exc)
            return LoadResult(positions=seed_positions(self._clock()), from_seed=True, error=error)

        if raw is None:
            return LoadResult(positions=seed_positions(self._clock()), from_seed=True)

        try:
            records = position_list_adapter.validate_json(raw)
            positions = [record.to_position() for record in records]
            ids = [p.id for p in positions]
            if len(set(ids)) != len(ids):
                raise ValueError("duplicate position ids")
        except (ValidationError, ValueError) as exc:
            error = PersistenceUnavailable("load", f"unreadable position blob: {exc}")
            logger.warning("Stored positions unreadable, using seed portfolio: %s", exc)
            return LoadResult(positions=seed_positions(self._clock()), from_seed=True, error=error)

        return LoadResult(positions=positions, from_seed=False)

    async def save(self, positions: Optional[Sequence[Position]] = None) -> SaveResult:
        """Overwrite the persisted blob with ``positions`` (default: current content)."""
        async with self._lock:
            return await self._save(positions)

    async def _save(self, positions: Optional[Sequence[Position]] = None) -> SaveResult:
        # Caller holds self._lock
        if positions is None:
            positions = self._positions
        try:
            records = [PositionRecord.from_position(p) for p in positions]
            payload = position_list_adapter.dump_json(records, by_alias=True).decode("utf-8")
            await self._kv_store.set(self._key, payload)
        except Exception as exc:
            logger.warning("Failed to save %d positions: %s", len(positions), exc)
            return SaveResult(error=PersistenceUnavailable("save", str(exc)))
        return SaveResult()

    def _allocate_id(self) -> str:
        position_id = self._id_factory()
        while position_id in self._issued_ids:
            position_id = self._id_factory()
        self._issued_ids.add(position_id)
        return position_id

    async def add(self, draft: PositionDraft) -> Position:
        validate_draft(draft)
        async with self._lock:
            position = Position(
                id=self._allocate_id(),
                symbol=draft.symbol.strip().upper(),
                name=draft.name,
                asset_class=AssetClass(draft.asset_class),
                quantity=float(draft.quantity),
                avg_cost=float(draft.avg_cost),
                current_price=float(draft.current_price),
                change_24h=float(draft.change_24h),
                last_updated=self._clock(),
                currency=draft.currency,
            )
            self._positions.append(position)
            await self._save()
        logger.info("Added position %s (%s)", position.id, position.symbol)
        return replace(position)

    async def remove(self, position_id: str) -> bool:
        async with self._lock:
            remaining = [p for p in self._positions if p.id != position_id]
            if len(remaining) == len(self._positions):
                return False
            self._positions = remaining
            await self._save()
        logger.info("Removed position %s", position_id)
        return True

    async def reprice(self, symbol: str, price: float, change_24h: Optional[float] = None) -> int:
        """Mark every position in ``symbol`` to ``price``; returns how many changed."""
        _require_price("current_price", price)
        if change_24h is not None and not math.isfinite(change_24h):
            raise InvalidPosition("change_24h", "must be a finite number")
        symbol = symbol.strip().upper()
        async with self._lock:
            now = self._clock()
            touched = 0
            for position in self._positions:
                if position.symbol != symbol:
                    continue
                position.current_price = float(price)
                if change_24h is not None:
                    position.change_24h = float(change_24h)
                position.last_updated = now
                touched += 1
            if touched:
                await self._save()
        return touched
