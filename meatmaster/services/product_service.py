from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from meatmaster.common.exceptions import ValidationError
from meatmaster.logger_config import logger
from meatmaster.models.product import Product, UnitType


def _to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


# ==================== QUERIES ====================

def get_product_by_id(db: Session, product_id: str) -> Optional[Product]:
    """Get product by ID."""
    return db.query(Product).filter(Product.id == product_id).first()


def get_all_products(
    db: Session,
    skip: int = 0,
    limit: Optional[int] = None,
    search: Optional[str] = None
) -> tuple[List[Product], int]:
    """Get all products, optionally filtered by a name substring."""
    query = db.query(Product)

    if search:
        query = query.filter(func.lower(Product.name).contains(search.strip().lower()))

    total = query.count()
    query = query.order_by(Product.name.asc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all(), total


def search_products(db: Session, query: str) -> List[Product]:
    """Case-insensitive substring match on the product name."""
    products, _ = get_all_products(db, search=query)
    return products


def find_product_by_name(db: Session, name: str, unit_type: UnitType) -> Optional[Product]:
    return (
        db.query(Product)
        .filter(func.lower(func.trim(Product.name)) == name.strip().lower(),
                Product.unit_type == unit_type)
        .first()
    )


# ==================== MUTATIONS ====================

def create_product(
    db: Session,
    name: str,
    unit_type: UnitType,
    current_stock=Decimal("0")
) -> Product:
    """Create a new product."""
    current_stock = _to_decimal(current_stock)
    if not name or not name.strip():
        raise ValidationError("Product name is required")
    if current_stock < 0:
        raise ValidationError("Stock cannot be negative")

    product = Product(name=name.strip(), unit_type=unit_type, current_stock=current_stock)
    db.add(product)
    db.commit()
    db.refresh(product)

    logger.info(f"Product {product.id} ({product.name}) created with stock {current_stock}")
    return product


def update_product(
    db: Session,
    product_id: str,
    name: Optional[str] = None,
    unit_type: Optional[UnitType] = None,
    current_stock=None
) -> Optional[Product]:
    """Manual edit of a product (including a stock correction)."""
    product = get_product_by_id(db, product_id)
    if not product:
        return None

    if name is not None:
        if not name.strip():
            raise ValidationError("Product name is required")
        product.name = name.strip()
    if unit_type is not None:
        product.unit_type = unit_type
    if current_stock is not None:
        current_stock = _to_decimal(current_stock)
        if current_stock < 0:
            raise ValidationError("Stock cannot be negative")
        product.current_stock = current_stock

    db.commit()
    db.refresh(product)
    return product


def add_stock(db: Session, product_id: str, quantity) -> Optional[Product]:
    """Add stock to an existing product."""
    quantity = _to_decimal(quantity)
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero")

    product = (
        db.query(Product)
        .filter(Product.id == product_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not product:
        return None

    product.current_stock = _to_decimal(product.current_stock) + quantity
    db.commit()
    db.refresh(product)

    logger.info(f"Added {quantity} {product.unit_type.value} to {product.id}, stock now {product.current_stock}")
    return product


def receive_stock(db: Session, name: str, unit_type: UnitType, quantity) -> tuple[Product, bool]:
    """
    Add stock by product name and unit.

    Returns (product, created). The existing product with the same name
    (case-insensitive) and unit type gets the quantity added; otherwise a new
    product is created with it as its opening stock.
    """
    quantity = _to_decimal(quantity)
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than zero")

    existing = find_product_by_name(db, name, unit_type)
    if existing:
        return add_stock(db, existing.id, quantity), False

    return create_product(db, name=name, unit_type=unit_type, current_stock=quantity), True


def mark_out_of_stock(db: Session, product_id: str) -> Optional[Product]:
    """Force the product stock to zero."""
    product = get_product_by_id(db, product_id)
    if not product:
        return None

    product.current_stock = Decimal("0")
    db.commit()
    db.refresh(product)

    logger.info(f"Product {product.id} marked as out of stock")
    return product


def delete_product(db: Session, product_id: str) -> bool:
    """Delete a product. Invoice items keep their snapshot of it."""
    product = get_product_by_id(db, product_id)
    if not product:
        return False

    db.delete(product)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting product: {str(e)}")
        raise ValueError("Failed to delete product.")
