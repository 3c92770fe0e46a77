from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import date, datetime

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date


class ExpenseCreate(BaseModel):
    """Single expense create - date defaults to today on server if not provided."""
    date: Optional[DateType] = None
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    receipt: Optional[str] = None
    notes: Optional[str] = None


class ExpenseUpdate(BaseModel):
    date: Optional[DateType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0)
    receipt: Optional[str] = None
    notes: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: str
    date: DateType
    category: str
    description: str
    amount: Decimal
    receipt: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    expenses: List[ExpenseResponse]
