import enum
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from meatmaster.core.database import Base
from meatmaster.utils.dates import now
from meatmaster.utils.identifiers import generate_custom_id


class PaymentMethod(str, enum.Enum):
    cash = "cash"
    cheque = "cheque"
    online = "online"


class PaymentRecord(Base):
    __tablename__ = "payments"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("PAY"))

    invoice_id = Column(String(20), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(String(15), nullable=True, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    transaction_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=now)
    updated_at = Column(DateTime, default=now, onupdate=now)

    invoice = relationship("Invoice", back_populates="payments")
