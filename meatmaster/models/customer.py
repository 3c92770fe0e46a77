from sqlalchemy import Column, DateTime, Numeric, String
from sqlalchemy.orm import relationship

from meatmaster.core.database import Base
from meatmaster.utils.dates import now
from meatmaster.utils.identifiers import generate_custom_id


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(15), primary_key=True,
                default=lambda: generate_custom_id("CUS"))
    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(30), nullable=False)
    address = Column(String(500), nullable=False)

    # Positive = customer owes money, negative = customer has credit.
    # Only the ledger service writes this column.
    balance = Column(Numeric(15, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=now)
    updated_at = Column(DateTime, default=now, onupdate=now)

    ledger_entries = relationship(
        "LedgerEntry",
        primaryjoin="Customer.id == foreign(LedgerEntry.customer_id)",
        back_populates="customer",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Customer(id='{self.id}', name='{self.name}', balance={self.balance})>"
