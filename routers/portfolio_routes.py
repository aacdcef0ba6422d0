# routers/portfolio_routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.user import User
from schemas.portfolio import HoldingCreate, PortfolioCreate
from services.auth import get_current_user, get_optional_user
from services.features import require_feature
from services.portfolio_service import (
    add_holding,
    create_portfolio,
    delete_portfolio,
    get_portfolio,
    list_portfolios,
    remove_holding,
)
from utils.errors import ValidationError

router = APIRouter(
    prefix="/portfolios",
    dependencies=[Depends(require_feature("investment_tracking"))],
)


@router.get("")
def portfolios(
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    viewer_id = viewer.id if viewer else None
    owner_id = user_id if user_id is not None else viewer_id
    if owner_id is None:
        raise ValidationError("user_id is required")
    return {"portfolios": list_portfolios(db, owner_id, viewer_id)}


@router.post("", status_code=201)
def new_portfolio(
    body: PortfolioCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"portfolio": create_portfolio(db, user, body)}


@router.get("/{portfolio_id}")
def portfolio_detail(
    portfolio_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    portfolio, holdings = get_portfolio(db, portfolio_id, viewer.id if viewer else None)
    return {"portfolio": portfolio, "holdings": holdings}


@router.delete("/{portfolio_id}")
def remove_portfolio(
    portfolio_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    delete_portfolio(db, user, portfolio_id)
    return {"message": "Portfolio deleted"}


@router.post("/{portfolio_id}/holdings", status_code=201)
def new_holding(
    portfolio_id: int,
    body: HoldingCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return {"holding": add_holding(db, user, portfolio_id, body)}


@router.delete("/{portfolio_id}/holdings/{holding_id}")
def delete_holding(
    portfolio_id: int,
    holding_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    remove_holding(db, user, portfolio_id, holding_id)
    return {"message": "Holding removed"}
