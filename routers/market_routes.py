# routers/market_routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.market_data import MarketDataUpdate
from services.auth import get_current_user
from services.market_data_service import get_market_data, list_strategies, upsert_market_data
from utils.common_helpers import split_csv

router = APIRouter()


@router.get("/market-data")
def market_data(
    symbols: Optional[str] = Query(None, description="Comma separated, e.g. AAPL,MSFT"),
    db: Session = Depends(get_db),
):
    return {"data": get_market_data(db, split_csv(symbols))}


@router.post("/market-data")
def update_market_data(
    body: MarketDataUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"data": upsert_market_data(db, body)}


@router.get("/strategies")
def strategies(db: Session = Depends(get_db)):
    return {"strategies": list_strategies(db)}
