from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from meatmaster.common.exceptions import ValidationError
from meatmaster.logger_config import logger
from meatmaster.models.expense import Expense
from meatmaster.services.ledger_service import to_money
from meatmaster.utils.dates import month_bounds, today


def _check_amount(amount) -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"Expense {field} is required")
    return value.strip()


def get_expense_by_id(db: Session, expense_id: str) -> Optional[Expense]:
    return db.query(Expense).filter(Expense.id == expense_id).first()


def create_expense(
    db: Session,
    category: str,
    description: str,
    amount,
    expense_date: Optional[date] = None,
    receipt: Optional[str] = None,
    notes: Optional[str] = None,
) -> Expense:
    """Create a single expense; date defaults to today."""
    expense = Expense(
        date=expense_date or today(),
        category=_require(category, "category"),
        description=_require(description, "description"),
        amount=_check_amount(amount),
        receipt=receipt,
        notes=notes,
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)

    logger.info(f"Expense {expense.id} created: {expense.category} {expense.amount} on {expense.date}")
    return expense


def get_all_expenses(
    db: Session,
    skip: int = 0,
    limit: Optional[int] = None,
    category: Optional[str] = None,
    expense_date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
) -> Tuple[List[Expense], int, Decimal]:
    """List expenses with filters: category, day (or date range), search (description, category, notes). Returns (rows, total_count, total_amount)."""
    query = db.query(Expense)
    if category:
        query = query.filter(Expense.category == category)
    if expense_date is not None:
        query = query.filter(Expense.date == expense_date)
    if start_date is not None:
        query = query.filter(Expense.date >= start_date)
    if end_date is not None:
        query = query.filter(Expense.date <= end_date)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Expense.description.ilike(term),
                Expense.category.ilike(term),
                Expense.notes.ilike(term),
            )
        )

    total_count = query.count()
    total_row = query.with_entities(func.coalesce(func.sum(Expense.amount), 0)).first()
    total_amount = to_money(total_row[0]) if total_row else Decimal("0.00")

    query = query.order_by(Expense.date.desc(), Expense.created_at.desc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all(), total_count, total_amount


def get_expenses_by_category(db: Session, category: str) -> List[Expense]:
    rows, _, _ = get_all_expenses(db, category=category)
    return rows


def get_expenses_by_date_range(db: Session, start_date: date, end_date: date) -> List[Expense]:
    """Expenses dated between start_date and end_date, both inclusive."""
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    rows, _, _ = get_all_expenses(db, start_date=start_date, end_date=end_date)
    return rows


def get_expenses_today(db: Session) -> List[Expense]:
    rows, _, _ = get_all_expenses(db, expense_date=today())
    return rows


def get_expenses_this_month(db: Session) -> List[Expense]:
    first, last = month_bounds()
    return get_expenses_by_date_range(db, first, last)


def update_expense(
    db: Session,
    expense_id: str,
    category: Optional[str] = None,
    description: Optional[str] = None,
    amount=None,
    expense_date: Optional[date] = None,
    receipt: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[Expense]:
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        return None

    if category is not None:
        expense.category = _require(category, "category")
    if description is not None:
        expense.description = _require(description, "description")
    if amount is not None:
        expense.amount = _check_amount(amount)
    if expense_date is not None:
        expense.date = expense_date
    if receipt is not None:
        expense.receipt = receipt or None
    if notes is not None:
        expense.notes = notes or None

    db.commit()
    db.refresh(expense)
    return expense


def delete_expense(db: Session, expense_id: str) -> bool:
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        return False

    db.delete(expense)
    try:
        db.commit()
        logger.info(f"Expense {expense_id} deleted")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting expense: {str(e)}")
        raise ValueError("Failed to delete expense.")
