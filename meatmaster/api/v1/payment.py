from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from meatmaster.core.dependencies import get_current_active_user, get_db
from meatmaster.logger_config import logger
from meatmaster.models.payment import PaymentMethod
from meatmaster.models.user import User
from meatmaster.schemas.payment import PaymentListResponse, PaymentResponse, PaymentUpdate
from meatmaster.services.payment_service import PaymentService

router = APIRouter()


@router.get("", response_model=PaymentListResponse)
def get_payments(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    invoice_id: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    payment_method: Optional[PaymentMethod] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payments, total = PaymentService(db).get_all_payments(
        skip=skip,
        limit=limit,
        invoice_id=invoice_id,
        customer_id=customer_id,
        payment_method=payment_method,
    )
    return PaymentListResponse(total=total, payments=payments)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payment = PaymentService(db).get_payment(payment_id)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    return payment


@router.put("/{payment_id}", response_model=PaymentResponse)
def update_payment(
    payment_id: str,
    payment_data: PaymentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payment = PaymentService(db).update_payment(
        payment_id,
        transaction_id=payment_data.transaction_id,
        notes=payment_data.notes,
    )
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    return payment


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a payment; its invoice goes back to sent. The ledger debit stays.
    """
    if not PaymentService(db).delete_payment(payment_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    logger.info(f"Payment {payment_id} deleted by {current_user.email}")
    return None
