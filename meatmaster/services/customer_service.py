from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from meatmaster.common.exceptions import ValidationError
from meatmaster.logger_config import logger
from meatmaster.models.customer import Customer


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"Customer {field} is required")
    return value.strip()


def get_customer_by_id(db: Session, customer_id: str) -> Optional[Customer]:
    """Get customer by ID."""
    return db.query(Customer).filter(Customer.id == customer_id).first()


def get_all_customers(
    db: Session,
    skip: int = 0,
    limit: Optional[int] = None,
    search: Optional[str] = None
) -> tuple[List[Customer], int]:
    """Get all customers with optional search on name (case-insensitive) or phone."""
    query = db.query(Customer)

    if search:
        term = search.strip()
        query = query.filter(
            or_(
                func.lower(Customer.name).contains(term.lower()),
                Customer.phone.contains(term)
            )
        )

    total = query.count()
    query = query.order_by(Customer.name.asc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all(), total


def search_customers(db: Session, query: str) -> List[Customer]:
    customers, _ = get_all_customers(db, search=query)
    return customers


def create_customer(
    db: Session,
    name: str,
    phone: str,
    address: str
) -> Customer:
    """Create a new customer with a zero balance."""
    customer = Customer(
        name=_require(name, "name"),
        phone=_require(phone, "phone"),
        address=_require(address, "address"),
        balance=Decimal("0.00"),
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)

    logger.info(f"Customer {customer.id} ({customer.name}) created")
    return customer


def update_customer(
    db: Session,
    customer_id: str,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[str] = None
) -> Optional[Customer]:
    """Update customer contact details. The balance is not editable here."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return None

    if name is not None:
        customer.name = _require(name, "name")
    if phone is not None:
        customer.phone = _require(phone, "phone")
    if address is not None:
        customer.address = _require(address, "address")

    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: str) -> bool:
    """Delete a customer together with their ledger entries."""
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        return False

    db.delete(customer)
    try:
        db.commit()
        logger.info(f"Customer {customer_id} deleted")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting customer: {str(e)}")
        raise ValueError("Failed to delete customer.")
