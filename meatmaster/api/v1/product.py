from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from meatmaster.core.dependencies import get_current_active_user, get_db
from meatmaster.logger_config import logger
from meatmaster.models.user import User
from meatmaster.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    StockAdd,
    StockReceive,
)
from meatmaster.services.product_service import (
    add_stock,
    create_product,
    delete_product,
    get_all_products,
    get_product_by_id,
    mark_out_of_stock,
    receive_stock,
    update_product,
)

router = APIRouter()


def _not_found():
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Product not found"
    )


@router.get("", response_model=ProductListResponse)
def get_products(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    products, total = get_all_products(db, skip=skip, limit=limit, search=search)
    return ProductListResponse(total=total, products=products)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = get_product_by_id(db, product_id)
    if not product:
        raise _not_found()
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product_route(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    try:
        product = create_product(
            db=db,
            name=product_data.name,
            unit_type=product_data.unit_type,
            current_stock=product_data.current_stock,
        )
        logger.info(f"Product {product.id} created by {current_user.email}")
        return product
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.post("/receive", response_model=ProductResponse)
def receive_stock_route(
    stock_data: StockReceive,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Add stock by product name and unit type; creates the product if needed.
    """
    product, created = receive_stock(db, stock_data.name, stock_data.unit_type, stock_data.quantity)
    logger.info(f"Received {stock_data.quantity} of {product.id} (new product: {created})")
    return product


@router.put("/{product_id}", response_model=ProductResponse)
def update_product_route(
    product_id: str,
    product_data: ProductUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = update_product(
        db=db,
        product_id=product_id,
        name=product_data.name,
        unit_type=product_data.unit_type,
        current_stock=product_data.current_stock,
    )
    if not product:
        raise _not_found()
    logger.info(f"Product {product_id} updated by {current_user.email}")
    return product


@router.post("/{product_id}/stock", response_model=ProductResponse)
def add_stock_route(
    product_id: str,
    stock_data: StockAdd,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = add_stock(db, product_id, stock_data.quantity)
    if not product:
        raise _not_found()
    return product


@router.post("/{product_id}/out-of-stock", response_model=ProductResponse)
def mark_out_of_stock_route(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    product = mark_out_of_stock(db, product_id)
    if not product:
        raise _not_found()
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product_route(
    product_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    if not delete_product(db, product_id):
        raise _not_found()
    logger.info(f"Product {product_id} deleted by {current_user.email}")
    return None
