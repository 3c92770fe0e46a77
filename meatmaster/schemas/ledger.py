from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from meatmaster.models.ledger import LedgerEntryType


class LedgerEntryCreate(BaseModel):
    type: LedgerEntryType
    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    invoice_id: Optional[str] = None


class LedgerEntryUpdate(BaseModel):
    type: Optional[LedgerEntryType] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = Field(None, min_length=1)
    invoice_id: Optional[str] = None


class LedgerEntryResponse(BaseModel):
    id: int
    customer_id: str
    type: LedgerEntryType
    amount: Decimal
    description: str
    invoice_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerListResponse(BaseModel):
    total: int
    entries: List[LedgerEntryResponse]


class StatementLine(LedgerEntryResponse):
    running_balance: Decimal


class StatementResponse(BaseModel):
    customer_id: str
    customer_name: str
    balance: Decimal
    total_credit: Decimal
    total_debit: Decimal
    lines: List[StatementLine]


class LedgerSummaryResponse(BaseModel):
    customer_id: str
    total_credit: Decimal
    total_debit: Decimal
    net: Decimal
    entry_count: int
