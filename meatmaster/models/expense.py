from sqlalchemy import Column, Date, DateTime, Numeric, String, Text

from meatmaster.core.database import Base
from meatmaster.utils.dates import now, today
from meatmaster.utils.identifiers import generate_custom_id


EXPENSE_CATEGORIES = (
    "Office Supplies",
    "Transportation",
    "Utilities",
    "Marketing",
    "Equipment",
    "Food & Beverages",
    "Repairs & Maintenance",
    "Rent",
    "Insurance",
    "Other",
)


class Expense(Base):
    """Business expense; independent of the customer ledger."""
    __tablename__ = "expenses"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXP"))
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False, default=today, index=True)
    receipt = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=now)
    updated_at = Column(DateTime, default=now, onupdate=now)
