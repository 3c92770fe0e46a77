from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from meatmaster.models.payment import PaymentMethod


class PaymentUpdate(BaseModel):
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    invoice_id: str
    customer_id: Optional[str] = None
    amount: Decimal
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(BaseModel):
    total: int
    payments: List[PaymentResponse]
