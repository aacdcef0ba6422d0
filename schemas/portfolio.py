from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.common import optional_text, required_text
from utils.common_helpers import normalize_symbol

RiskLevel = Literal["conservative", "moderate", "aggressive"]
PortfolioType = Literal["personal", "retirement", "education", "halal", "other"]


class PortfolioCreate(BaseModel):
    name: str
    description: Optional[str] = None
    portfolio_type: PortfolioType = "personal"
    risk_level: RiskLevel = "moderate"
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return required_text(v, "name", 120)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: Optional[str]) -> Optional[str]:
        return optional_text(v, "description", 2000)


class HoldingCreate(BaseModel):
    symbol: str
    quantity: float = Field(gt=0)
    average_cost: float = Field(ge=0)
    current_price: Optional[float] = Field(default=None, ge=0)
    asset_type: str = "stock"

    @field_validator("symbol")
    @classmethod
    def check_symbol(cls, v: str) -> str:
        return normalize_symbol(v)


class HoldingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    portfolio_id: int
    symbol: str
    quantity: float
    average_cost: float
    current_price: Optional[float] = None
    market_value: float
    asset_type: str

    # Joined from market_data / derived, not stored on the row
    change_24h: Optional[float] = None
    change_percentage_24h: Optional[float] = None
    return_pct: Optional[float] = None


class PortfolioOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    portfolio_type: str
    risk_level: str
    is_public: bool
    total_value: float
    created_at: datetime
    updated_at: datetime

    holding_count: Optional[int] = None
    avg_holding_return: Optional[float] = None
    owner_name: Optional[str] = None
    owner_username: Optional[str] = None
