from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.investment_strategy import InvestmentStrategy
from models.market_data import MarketData
from models.user import User
from schemas.market_data import MarketDataOut, MarketDataUpdate, StrategyOut
from services.portfolio_service import refresh_symbol_values
from utils.common_helpers import dedupe, normalize_symbol
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MARKET_LIMIT = 50

_QUOTE_FIELDS = (
    "change_24h",
    "change_percentage_24h",
    "market_cap",
    "volume_24h",
    "high_24h",
    "low_24h",
)


def _apply(row: MarketData, data: MarketDataUpdate) -> None:
    row.current_price = data.current_price
    for field in _QUOTE_FIELDS:
        setattr(row, field, getattr(data, field))
    # Keep the stored label when a feed omits it
    if data.name:
        row.name = data.name
    if data.asset_type:
        row.asset_type = data.asset_type
    row.last_updated = datetime.now(timezone.utc)


def upsert_market_data(db: Session, data: MarketDataUpdate) -> MarketDataOut:
    """Insert or update the quote for ``data.symbol`` and reprice holdings in that symbol."""
    symbol = data.symbol.upper()
    row = db.query(MarketData).filter(MarketData.symbol == symbol).first()
    if row is None:
        row = MarketData(symbol=symbol)
        db.add(row)
    _apply(row, data)

    try:
        db.flush()
    except IntegrityError:
        # Another writer inserted the symbol first; update theirs
        db.rollback()
        row = db.query(MarketData).filter(MarketData.symbol == symbol).one()
        _apply(row, data)

    repriced = refresh_symbol_values(db, symbol, data.current_price)
    db.commit()
    db.refresh(row)
    logger.info("market_data_upserted symbol=%s holdings_repriced=%s", symbol, repriced)
    return MarketDataOut.model_validate(row)


def get_market_data(db: Session, symbols: Optional[Sequence[str]] = None) -> List[MarketDataOut]:
    """Quotes for ``symbols``, or the largest by market cap when none are given."""
    query = db.query(MarketData)
    try:
        wanted = dedupe(normalize_symbol(s) for s in (symbols or []))
    except ValueError as exc:
        raise ValidationError(str(exc))
    if wanted:
        rows = query.filter(MarketData.symbol.in_(wanted)).order_by(MarketData.symbol.asc()).all()
    else:
        rows = (
            query.order_by(
                MarketData.market_cap.is_(None),
                MarketData.market_cap.desc(),
                MarketData.symbol.asc(),
            )
            .limit(DEFAULT_MARKET_LIMIT)
            .all()
        )
    return [MarketDataOut.model_validate(r) for r in rows]


def list_strategies(db: Session) -> List[StrategyOut]:
    rows = (
        db.query(InvestmentStrategy, User)
        .outerjoin(User, InvestmentStrategy.created_by == User.id)
        .filter(InvestmentStrategy.is_active.is_(True))
        .order_by(InvestmentStrategy.created_at.desc(), InvestmentStrategy.id.desc())
        .all()
    )
    return [
        StrategyOut(
            id=s.id,
            name=s.name,
            description=s.description,
            risk_level=s.risk_level,
            expected_return=s.expected_return,
            is_active=s.is_active,
            created_at=s.created_at,
            created_by_name=creator.display_name if creator else None,
            created_by_username=creator.username if creator else None,
        )
        for s, creator in rows
    ]
