from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class CompanySettingsSet(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    company_logo: Optional[str] = None
    company_address: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None


class CompanySettingsUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    company_logo: Optional[str] = None
    company_address: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None


class CompanySettingsResponse(CompanySettingsSet):
    id: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
