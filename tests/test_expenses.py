from datetime import date, timedelta
from decimal import Decimal

import pytest

from meatmaster.common.exceptions import ValidationError
from meatmaster.services import expense_service
from meatmaster.utils.dates import month_bounds


@pytest.fixture
def expenses(db):
    today = date.today()
    rows = [
        ("Rent", "Cold store rent", 3000, today),
        ("Transportation", "Fuel", "150.50", today),
        ("Utilities", "Electricity", 420, today - timedelta(days=40)),
    ]
    return [
        expense_service.create_expense(db, category=c, description=d, amount=a, expense_date=day)
        for c, d, a, day in rows
    ]


class TestExpenses:
    def test_date_defaults_to_today(self, db):
        expense = expense_service.create_expense(db, "Other", "Knives", 80)
        assert expense.date == date.today()
        assert expense.id.startswith("EXP-")

    def test_amount_must_be_positive(self, db):
        with pytest.raises(ValidationError):
            expense_service.create_expense(db, "Other", "Knives", 0)

    def test_list_totals(self, db, expenses):
        rows, count, total = expense_service.get_all_expenses(db)
        assert count == 3
        assert total == Decimal("3570.50")

    def test_by_category(self, db, expenses):
        assert [e.description for e in expense_service.get_expenses_by_category(db, "Rent")] == ["Cold store rent"]

    def test_date_range_is_inclusive(self, db, expenses):
        old = expenses[2].date
        rows = expense_service.get_expenses_by_date_range(db, old, old)
        assert [e.description for e in rows] == ["Electricity"]

    def test_date_range_order(self, db):
        with pytest.raises(ValidationError):
            expense_service.get_expenses_by_date_range(db, date(2026, 2, 1), date(2026, 1, 1))

    def test_today_and_this_month(self, db, expenses):
        assert len(expense_service.get_expenses_today(db)) == 2
        first, last = month_bounds()
        expected = sum(1 for e in expenses if first <= e.date <= last)
        assert len(expense_service.get_expenses_this_month(db)) == expected

    def test_update_and_delete(self, db, expenses):
        updated = expense_service.update_expense(db, expenses[0].id, amount=3200, notes="March")
        assert updated.amount == Decimal("3200.00")
        assert updated.category == "Rent"
        assert expense_service.delete_expense(db, expenses[0].id) is True
        assert expense_service.delete_expense(db, expenses[0].id) is False
        assert expense_service.update_expense(db, "EXP-MISSING", amount=1) is None
