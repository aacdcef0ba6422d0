from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.common_helpers import normalize_symbol


class MarketDataUpdate(BaseModel):
    """Quote upsert; camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    current_price: float = Field(alias="currentPrice", ge=0)
    name: Optional[str] = None
    change_24h: Optional[float] = Field(default=None, alias="change24h")
    change_percentage_24h: Optional[float] = Field(default=None, alias="changePercentage24h")
    market_cap: Optional[float] = Field(default=None, alias="marketCap", ge=0)
    volume_24h: Optional[float] = Field(default=None, alias="volume24h", ge=0)
    high_24h: Optional[float] = Field(default=None, alias="high24h", ge=0)
    low_24h: Optional[float] = Field(default=None, alias="low24h", ge=0)
    asset_type: Optional[str] = Field(default=None, alias="assetType")

    @field_validator("symbol")
    @classmethod
    def check_symbol(cls, v: str) -> str:
        return normalize_symbol(v)


class MarketDataOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    name: Optional[str] = None
    current_price: float
    change_24h: Optional[float] = None
    change_percentage_24h: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    high_24h: Optional[float] = None
    low_24h: Optional[float] = None
    asset_type: Optional[str] = None
    last_updated: datetime


class StrategyOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    risk_level: str
    expected_return: Optional[float] = None
    is_active: bool
    created_at: datetime
    created_by_name: Optional[str] = None
    created_by_username: Optional[str] = None
