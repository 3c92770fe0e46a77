import enum
from sqlalchemy import Column, DateTime, Enum, Numeric, String

from meatmaster.core.database import Base
from meatmaster.utils.dates import now
from meatmaster.utils.identifiers import generate_custom_id


class UnitType(str, enum.Enum):
    Carton = "Carton"
    Kg = "Kg"
    Piece = "Piece"


class Product(Base):
    __tablename__ = "products"

    id = Column(String(15), primary_key=True,
                default=lambda: generate_custom_id("PRD"))
    name = Column(String(100), nullable=False, index=True)
    unit_type = Column(Enum(UnitType), nullable=False)
    current_stock = Column(Numeric(12, 3), nullable=False, default=0)

    created_at = Column(DateTime, default=now)
    updated_at = Column(DateTime, default=now, onupdate=now)

    def __repr__(self):
        return f"<Product(id='{self.id}', name='{self.name}', stock={self.current_stock})>"
