"""
Position schemas.

``PositionRecord`` is the persisted shape: the camelCase field names of the
stored asset list, so blobs written by earlier dashboard builds stay readable.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from titan_terminal.domain.models import AssetClass, Position, PositionDraft


class PositionRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    name: str
    asset_class: AssetClass = Field(alias="type")
    quantity: float = Field(allow_inf_nan=False)
    avg_cost: float = Field(alias="avgPrice", ge=0, allow_inf_nan=False)
    current_price: float = Field(alias="currentPrice", ge=0, allow_inf_nan=False)
    currency: str = "USD"
    last_updated: datetime = Field(alias="lastUpdated")
    change_24h: float = Field(default=0.0, alias="change24h")

    @classmethod
    def from_position(cls, position: Position) -> "PositionRecord":
        return cls(
            id=position.id,
            symbol=position.symbol,
            name=position.name,
            asset_class=position.asset_class,
            quantity=position.quantity,
            avg_cost=position.avg_cost,
            current_price=position.current_price,
            currency=position.currency,
            last_updated=position.last_updated,
            change_24h=position.change_24h,
        )

    def to_position(self) -> Position:
        return Position(
            id=self.id,
            symbol=self.symbol.upper(),
            name=self.name,
            asset_class=self.asset_class,
            quantity=self.quantity,
            avg_cost=self.avg_cost,
            current_price=self.current_price,
            change_24h=self.change_24h,
            last_updated=self.last_updated,
            currency=self.currency,
        )


position_list_adapter = TypeAdapter(List[PositionRecord])


class PositionCreateSchema(BaseModel):
    symbol: str
    name: str
    asset_class: AssetClass
    quantity: float
    avg_cost: float
    current_price: float
    change_24h: float = 0.0
    currency: str = "USD"

    def to_draft(self) -> PositionDraft:
        return PositionDraft(**self.model_dump())


class PositionSchema(BaseModel):
    id: str
    symbol: str
    name: str
    asset_class: AssetClass
    quantity: float
    avg_cost: float
    current_price: float
    change_24h: float
    currency: str
    last_updated: datetime
    market_value: float

    @classmethod
    def from_position(cls, position: Position) -> "PositionSchema":
        return cls(
            id=position.id,
            symbol=position.symbol,
            name=position.name,
            asset_class=position.asset_class,
            quantity=position.quantity,
            avg_cost=position.avg_cost,
            current_price=position.current_price,
            change_24h=position.change_24h,
            currency=position.currency,
            last_updated=position.last_updated,
            market_value=position.market_value,
        )
