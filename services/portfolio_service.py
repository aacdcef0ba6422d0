from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from models.holding import Holding
from models.market_data import MarketData
from models.portfolio import Portfolio
from models.user import User
from schemas.portfolio import HoldingCreate, HoldingOut, PortfolioCreate, PortfolioOut
from utils.common_helpers import pct_change, to_float
from utils.errors import AuthorizationError, NotFoundError

logger = logging.getLogger(__name__)


# -----------------------
# Valuation
# -----------------------

def _quotes_for(db: Session, symbols: List[str]) -> Dict[str, MarketData]:
    if not symbols:
        return {}
    rows = db.query(MarketData).filter(MarketData.symbol.in_(set(symbols))).all()
    return {m.symbol: m for m in rows}


def latest_price(h: Holding, quote: Optional[MarketData]) -> float:
    """Market data wins, then the holding's own price, then its cost."""
    if quote is not None and quote.current_price is not None:
        return to_float(quote.current_price)
    if h.current_price is not None:
        return to_float(h.current_price)
    return to_float(h.average_cost)


def holding_return_pct(h: Holding) -> Optional[float]:
    r = pct_change(h.current_price, h.average_cost)
    return None if r is None else round(r, 4)


def revalue_portfolio(db: Session, portfolio: Portfolio) -> float:
    """Refresh every holding's price/market value and the portfolio total. Caller commits."""
    holdings = list(portfolio.holdings)
    quotes = _quotes_for(db, [h.symbol for h in holdings])
    total = 0.0
    for h in holdings:
        price = latest_price(h, quotes.get(h.symbol))
        h.current_price = price
        h.market_value = round(price * to_float(h.quantity), 8)
        total += h.market_value
    portfolio.total_value = round(total, 8)
    return portfolio.total_value


def refresh_symbol_values(db: Session, symbol: str, price: float) -> int:
    """Reprice holdings in ``symbol`` and re-total their portfolios. Caller commits."""
    holdings = db.query(Holding).filter(Holding.symbol == symbol).all()
    portfolio_ids = set()
    for h in holdings:
        h.current_price = price
        h.market_value = round(price * to_float(h.quantity), 8)
        portfolio_ids.add(h.portfolio_id)

    if portfolio_ids:
        db.flush()
        for p in db.query(Portfolio).filter(Portfolio.id.in_(portfolio_ids)).all():
            p.total_value = round(sum(to_float(h.market_value) for h in p.holdings), 8)
    return len(holdings)


# -----------------------
# Mapping
# -----------------------

def _portfolio_dto(p: Portfolio, owner: Optional[User] = None) -> PortfolioOut:
    holdings = list(p.holdings)
    returns = [r for r in (holding_return_pct(h) for h in holdings) if r is not None]
    dto = PortfolioOut.model_validate(p)
    dto.holding_count = len(holdings)
    dto.avg_holding_return = round(sum(returns) / len(returns), 4) if returns else None
    if owner is not None:
        dto.owner_name = owner.display_name
        dto.owner_username = owner.username
    return dto


def _holding_dto(h: Holding, quote: Optional[MarketData]) -> HoldingOut:
    dto = HoldingOut.model_validate(h)
    if quote is not None:
        dto.change_24h = quote.change_24h
        dto.change_percentage_24h = quote.change_percentage_24h
    dto.return_pct = holding_return_pct(h)
    return dto


# -----------------------
# Portfolios
# -----------------------

def create_portfolio(db: Session, user: User, data: PortfolioCreate) -> PortfolioOut:
    portfolio = Portfolio(
        user_id=user.id,
        name=data.name,
        description=data.description,
        portfolio_type=data.portfolio_type,
        risk_level=data.risk_level,
        is_public=data.is_public,
        total_value=0.0,
    )
    db.add(portfolio)
    db.commit()
    db.refresh(portfolio)
    logger.info("portfolio_created portfolio_id=%s user_id=%s", portfolio.id, user.id)
    return _portfolio_dto(portfolio)


def list_portfolios(db: Session, owner_id: int, viewer_id: Optional[int]) -> List[PortfolioOut]:
    """Owner sees everything; everyone else only public portfolios."""
    query = (
        db.query(Portfolio)
        .options(selectinload(Portfolio.holdings))
        .filter(Portfolio.user_id == owner_id)
    )
    if viewer_id != owner_id:
        query = query.filter(Portfolio.is_public.is_(True))
    rows = query.order_by(Portfolio.created_at.desc(), Portfolio.id.desc()).all()
    return [_portfolio_dto(p) for p in rows]


def _get_visible_portfolio(db: Session, portfolio_id: int, viewer_id: Optional[int]) -> Portfolio:
    portfolio = (
        db.query(Portfolio)
        .options(selectinload(Portfolio.holdings))
        .filter(Portfolio.id == portfolio_id)
        .filter(or_(Portfolio.is_public.is_(True), Portfolio.user_id == viewer_id))
        .first()
    )
    if not portfolio:
        raise NotFoundError("Portfolio not found")
    return portfolio


def _get_owned_portfolio(db: Session, user: User, portfolio_id: int) -> Portfolio:
    portfolio = _get_visible_portfolio(db, portfolio_id, user.id)
    if portfolio.user_id != user.id:
        raise AuthorizationError("You do not own this portfolio")
    return portfolio


def get_portfolio(
    db: Session, portfolio_id: int, viewer_id: Optional[int]
) -> Tuple[PortfolioOut, List[HoldingOut]]:
    portfolio = _get_visible_portfolio(db, portfolio_id, viewer_id)
    holdings = sorted(portfolio.holdings, key=lambda h: to_float(h.market_value), reverse=True)
    quotes = _quotes_for(db, [h.symbol for h in holdings])
    return (
        _portfolio_dto(portfolio, portfolio.owner),
        [_holding_dto(h, quotes.get(h.symbol)) for h in holdings],
    )


def delete_portfolio(db: Session, user: User, portfolio_id: int) -> None:
    portfolio = _get_owned_portfolio(db, user, portfolio_id)
    db.delete(portfolio)
    db.commit()


# -----------------------
# Holdings
# -----------------------

def add_holding(db: Session, user: User, portfolio_id: int, data: HoldingCreate) -> HoldingOut:
    portfolio = _get_owned_portfolio(db, user, portfolio_id)
    holding = Holding(
        portfolio_id=portfolio.id,
        symbol=data.symbol,
        quantity=data.quantity,
        average_cost=data.average_cost,
        current_price=data.current_price,
        asset_type=data.asset_type,
        market_value=0.0,
    )
    portfolio.holdings.append(holding)
    revalue_portfolio(db, portfolio)
    db.commit()
    db.refresh(holding)
    quotes = _quotes_for(db, [holding.symbol])
    return _holding_dto(holding, quotes.get(holding.symbol))


def remove_holding(db: Session, user: User, portfolio_id: int, holding_id: int) -> None:
    portfolio = _get_owned_portfolio(db, user, portfolio_id)
    holding = next((h for h in portfolio.holdings if h.id == holding_id), None)
    if holding is None:
        raise NotFoundError("Holding not found")
    portfolio.holdings.remove(holding)
    revalue_portfolio(db, portfolio)
    db.commit()
