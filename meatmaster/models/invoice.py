import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from meatmaster.core.database import Base
from meatmaster.utils.dates import now
from meatmaster.utils.identifiers import generate_custom_id


class InvoiceStatus(str, enum.Enum):
    draft = "draft"
    sent = "sent"
    paid = "paid"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("SINV"))
    invoice_number = Column(String(50), nullable=False, index=True)

    # Snapshot of the customer at sale time (soft reference)
    customer_id = Column(String(15), nullable=True, index=True)
    customer_name = Column(String(255), nullable=True)

    company_name = Column(String(255), nullable=False, index=True)
    company_logo = Column(String(500), nullable=True)

    total = Column(Numeric(15, 2), nullable=False, default=0)
    status = Column(Enum(InvoiceStatus), nullable=False, default=InvoiceStatus.sent)

    created_at = Column(DateTime, default=now, index=True)
    updated_at = Column(DateTime, default=now, onupdate=now)

    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="InvoiceItem.id")
    payments = relationship("PaymentRecord", back_populates="invoice", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Invoice(id='{self.id}', number='{self.invoice_number}', status={self.status})>"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    invoice_id = Column(String(20), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    # Snapshot of the product at sale time
    product_id = Column(String(15), nullable=True)
    product_name = Column(String(100), nullable=False)
    unit_type = Column(String(20), nullable=False)

    quantity = Column(Numeric(12, 3), nullable=False)
    price = Column(Numeric(15, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")

    @property
    def line_total(self):
        return self.quantity * self.price
