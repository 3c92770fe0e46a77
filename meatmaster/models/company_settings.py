from sqlalchemy import Column, DateTime, String

from meatmaster.core.database import Base
from meatmaster.utils.dates import now
from meatmaster.utils.identifiers import generate_custom_id


class CompanySettings(Base):
    """Single-row table holding the company shown on invoices."""
    __tablename__ = "company_settings"

    id = Column(String(15), primary_key=True, default=lambda: generate_custom_id("CMP"))
    company_name = Column(String(255), nullable=False)
    company_logo = Column(String(500), nullable=True)
    company_address = Column(String(500), nullable=True)
    company_phone = Column(String(30), nullable=True)
    company_email = Column(String(255), nullable=True)
    updated_at = Column(DateTime, default=now, onupdate=now)
