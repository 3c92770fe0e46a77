from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from meatmaster.core.dependencies import get_current_active_user, get_db
from meatmaster.logger_config import logger
from meatmaster.models.expense import EXPENSE_CATEGORIES
from meatmaster.models.user import User
from meatmaster.schemas.expense import ExpenseCreate, ExpenseListResponse, ExpenseResponse, ExpenseUpdate
from meatmaster.services.expense_service import (
    create_expense,
    delete_expense,
    get_all_expenses,
    get_expense_by_id,
    get_expenses_this_month,
    get_expenses_today,
    update_expense,
)

router = APIRouter()


def _list_response(expenses) -> ExpenseListResponse:
    return ExpenseListResponse(
        total=len(expenses),
        total_amount=sum((e.amount for e in expenses), 0),
        expenses=expenses,
    )


@router.get("", response_model=ExpenseListResponse)
def get_expenses(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    category: Optional[str] = Query(None),
    expense_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List expenses with filters: category, single day or inclusive date range,
    and a search over description, category and notes.
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )

    expenses, total, total_amount = get_all_expenses(
        db,
        skip=skip,
        limit=limit,
        category=category,
        expense_date=expense_date,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    return ExpenseListResponse(total=total, total_amount=total_amount, expenses=expenses)


@router.get("/categories", response_model=list[str])
def get_expense_categories(current_user: User = Depends(get_current_active_user)):
    return list(EXPENSE_CATEGORIES)


@router.get("/today", response_model=ExpenseListResponse)
def get_today_expenses(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _list_response(get_expenses_today(db))


@router.get("/this-month", response_model=ExpenseListResponse)
def get_month_expenses(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _list_response(get_expenses_this_month(db))


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return expense


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense_route(
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create an expense; date defaults to today.
    """
    try:
        expense = create_expense(
            db,
            category=expense_data.category,
            description=expense_data.description,
            amount=expense_data.amount,
            expense_date=expense_data.date,
            receipt=expense_data.receipt,
            notes=expense_data.notes,
        )
        logger.info(f"Expense {expense.id} created by {current_user.email}")
        return expense
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense_route(
    expense_id: str,
    expense_data: ExpenseUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    expense = update_expense(
        db,
        expense_id,
        category=expense_data.category,
        description=expense_data.description,
        amount=expense_data.amount,
        expense_date=expense_data.date,
        receipt=expense_data.receipt,
        notes=expense_data.notes,
    )
    if not expense:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense_route(
    expense_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    if not delete_expense(db, expense_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Expense not found"
        )
    logger.info(f"Expense {expense_id} deleted by {current_user.email}")
    return None
