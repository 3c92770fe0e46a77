from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from meatmaster.core.dependencies import get_current_active_user, get_db
from meatmaster.logger_config import logger
from meatmaster.models.invoice import InvoiceStatus
from meatmaster.models.user import User
from meatmaster.schemas.invoice import (
    InvoiceCreate,
    InvoiceCreateResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceUpdate,
    PaymentCreate,
    StockDeductionResponse,
)
from meatmaster.schemas.payment import PaymentListResponse, PaymentResponse
from meatmaster.services.invoice_service import InvoiceService
from meatmaster.services.payment_service import PaymentService

router = APIRouter()


def _not_found():
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Invoice not found"
    )


@router.get("", response_model=InvoiceListResponse)
def get_invoices(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    customer_id: Optional[str] = Query(None),
    company_name: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List invoices, newest first. search matches invoice number, company or
    customer name.
    """
    service = InvoiceService(db)
    if company_name:
        invoices = service.get_invoices_by_company(company_name)
        return InvoiceListResponse(total=len(invoices), invoices=invoices)

    invoices, total = service.get_all_invoices(
        skip=skip,
        limit=limit,
        status=status_filter,
        customer_id=customer_id,
        search=search,
    )
    return InvoiceListResponse(total=total, invoices=invoices)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice = InvoiceService(db).get_invoice(invoice_id)
    if not invoice:
        raise _not_found()
    return invoice


@router.post("", response_model=InvoiceCreateResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_data: InvoiceCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create an invoice and deduct stock. Items without enough stock are still
    invoiced; they are listed in `warnings` and their stock is not touched.
    """
    result = InvoiceService(db).create_invoice(
        company_name=invoice_data.company_name,
        items=[item.model_dump() for item in invoice_data.items],
        customer_id=invoice_data.customer_id,
        company_logo=invoice_data.company_logo,
        invoice_number=invoice_data.invoice_number,
        record_credit=invoice_data.record_credit,
    )
    logger.info(f"Invoice {result.invoice.id} created by {current_user.email}")

    return InvoiceCreateResponse(
        invoice=InvoiceResponse.model_validate(result.invoice),
        deductions=[StockDeductionResponse.model_validate(d) for d in result.deductions],
        warnings=result.warnings,
    )


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: str,
    invoice_data: InvoiceUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoice = InvoiceService(db).update_invoice(
        invoice_id,
        company_name=invoice_data.company_name,
        company_logo=invoice_data.company_logo,
        invoice_number=invoice_data.invoice_number,
    )
    if not invoice:
        raise _not_found()
    return invoice


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete an invoice with its payments. Stock and ledger are left as they are.
    """
    if not InvoiceService(db).delete_invoice(invoice_id):
        raise _not_found()
    logger.info(f"Invoice {invoice_id} deleted by {current_user.email}")
    return None


# ==================== PAYMENTS ====================

@router.get("/{invoice_id}/payments", response_model=PaymentListResponse)
def get_invoice_payments(
    invoice_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payments = PaymentService(db).get_payments_by_invoice(invoice_id)
    return PaymentListResponse(total=len(payments), payments=payments)


@router.post("/{invoice_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_invoice_payment(
    invoice_id: str,
    payment_data: PaymentCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Record a payment (amount defaults to the invoice total). Marks the invoice
    paid and debits the customer ledger.
    """
    payment = PaymentService(db).record_payment(
        invoice_id,
        amount=payment_data.amount,
        payment_method=payment_data.payment_method,
        transaction_id=payment_data.transaction_id,
        notes=payment_data.notes,
    )
    if not payment:
        raise _not_found()
    logger.info(f"Payment {payment.id} recorded by {current_user.email}")
    return payment
