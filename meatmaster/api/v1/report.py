from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Literal

from meatmaster.core.dependencies import get_current_active_user, get_db
from meatmaster.models.user import User
from meatmaster.schemas.report import (
    ExpenseSummaryResponse,
    ProfitSummaryResponse,
    ReceivablesResponse,
    SalesSummaryResponse,
    StatisticsResponse,
    StockSummaryResponse,
    TopCustomer,
)
from meatmaster.services.report_service import ReportService

router = APIRouter()

Period = Literal["today", "week", "month", "all"]


@router.get("/statistics", response_model=StatisticsResponse)
def get_statistics(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return ReportService(db).get_statistics()


@router.get("/sales", response_model=SalesSummaryResponse)
def get_sales_summary(
    period: Period = Query("all"),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Week and month are the last 7 and 30 days."""
    return ReportService(db).sales_summary(period)


@router.get("/top-customers", response_model=List[TopCustomer])
def get_top_customers(
    period: Period = Query("all"),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return ReportService(db).top_customers(period, limit=limit)


@router.get("/receivables", response_model=ReceivablesResponse)
def get_receivables(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return ReportService(db).receivables()


@router.get("/stock", response_model=StockSummaryResponse)
def get_stock_summary(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return ReportService(db).stock_summary()


@router.get("/expenses", response_model=ExpenseSummaryResponse)
def get_expense_summary(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return ReportService(db).expense_summary()


@router.get("/profit", response_model=ProfitSummaryResponse)
def get_profit_summary(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return ReportService(db).profit_summary()
