from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from meatmaster.models.invoice import InvoiceStatus
from meatmaster.models.payment import PaymentMethod


class InvoiceItemCreate(BaseModel):
    product_id: Optional[str] = None
    # Filled from the product when omitted
    product_name: Optional[str] = Field(None, min_length=1, max_length=100)
    unit_type: Optional[str] = Field(None, max_length=20)
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)


class InvoiceCreate(BaseModel):
    customer_id: Optional[str] = None
    company_name: str = Field(..., min_length=1, max_length=255)
    company_logo: Optional[str] = None
    invoice_number: Optional[str] = Field(None, max_length=50)
    items: List[InvoiceItemCreate] = Field(..., min_length=1)
    record_credit: bool = False


class InvoiceUpdate(BaseModel):
    """Status, items and total are owned by the workflow and not editable."""
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    company_logo: Optional[str] = None
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=50)


class InvoiceItemResponse(BaseModel):
    product_id: Optional[str] = None
    product_name: str
    unit_type: str
    quantity: Decimal
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    company_name: str
    company_logo: Optional[str] = None
    items: List[InvoiceItemResponse]
    total: Decimal
    status: InvoiceStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InvoiceListResponse(BaseModel):
    total: int
    invoices: List[InvoiceResponse]


class StockDeductionResponse(BaseModel):
    product_id: Optional[str] = None
    product_name: str
    quantity: Decimal
    available: Optional[Decimal] = None
    deducted: bool

    model_config = ConfigDict(from_attributes=True)


class InvoiceCreateResponse(BaseModel):
    invoice: InvoiceResponse
    deductions: List[StockDeductionResponse]
    warnings: List[str]


class PaymentCreate(BaseModel):
    """Amount defaults to the invoice total."""
    amount: Optional[Decimal] = Field(None, gt=0)
    payment_method: PaymentMethod = PaymentMethod.cash
    transaction_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
