import enum
from decimal import Decimal
from sqlalchemy import Column, DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from meatmaster.core.database import Base
from meatmaster.utils.dates import now


class LedgerEntryType(str, enum.Enum):
    credit = "credit"   # adds to what the customer owes (sale)
    debit = "debit"     # subtracts from what the customer owes (payment received)


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # No FK constraint: entries posted for an unknown customer are still stored
    customer_id = Column(String(15), nullable=False, index=True)
    type = Column(Enum(LedgerEntryType), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    description = Column(Text, nullable=False, default="")

    # Soft reference; the entry outlives the invoice
    invoice_id = Column(String(30), nullable=True, index=True)

    created_at = Column(DateTime, default=now, index=True)
    updated_at = Column(DateTime, default=now, onupdate=now)

    customer = relationship(
        "Customer",
        primaryjoin="Customer.id == foreign(LedgerEntry.customer_id)",
        back_populates="ledger_entries",
    )

    @property
    def signed_amount(self) -> Decimal:
        """Contribution of this entry to the customer balance."""
        return signed_amount(self.type, self.amount)

    def __repr__(self):
        return f"<LedgerEntry(id={self.id}, customer_id='{self.customer_id}', {self.type} {self.amount})>"


def signed_amount(entry_type: LedgerEntryType, amount) -> Decimal:
    amount = Decimal(str(amount))
    return amount if entry_type == LedgerEntryType.credit else -amount
