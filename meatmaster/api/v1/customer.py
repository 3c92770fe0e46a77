from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from meatmaster.core.dependencies import get_current_active_user, get_db, require_admin
from meatmaster.logger_config import logger
from meatmaster.models.user import User
from meatmaster.schemas.customer import (
    BalanceCheckResponse,
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)
from meatmaster.schemas.invoice import InvoiceListResponse
from meatmaster.schemas.ledger import (
    LedgerEntryCreate,
    LedgerEntryResponse,
    LedgerListResponse,
    LedgerSummaryResponse,
    StatementLine,
    StatementResponse,
)
from meatmaster.schemas.payment import PaymentListResponse
from meatmaster.services.customer_service import (
    create_customer,
    delete_customer,
    get_all_customers,
    get_customer_by_id,
    update_customer,
)
from meatmaster.services.invoice_service import InvoiceService
from meatmaster.services.ledger_service import LedgerService
from meatmaster.services.payment_service import PaymentService
from meatmaster.services.report_service import ReportService

router = APIRouter()


def _get_customer_or_404(db: Session, customer_id: str):
    customer = get_customer_by_id(db, customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return customer


@router.get("", response_model=CustomerListResponse)
def get_customers(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Get all customers; search matches the name (case-insensitive) or phone.
    """
    customers, total = get_all_customers(db, skip=skip, limit=limit, search=search)
    return CustomerListResponse(total=total, customers=customers)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    return _get_customer_or_404(db, customer_id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer_route(
    customer_data: CustomerCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Create a new customer. The balance always starts at zero.
    """
    try:
        customer = create_customer(
            db=db,
            name=customer_data.name,
            phone=customer_data.phone,
            address=customer_data.address,
        )
        logger.info(f"Customer {customer.id} created by {current_user.email}")
        return customer
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer_route(
    customer_id: str,
    customer_data: CustomerUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    customer = update_customer(
        db=db,
        customer_id=customer_id,
        name=customer_data.name,
        phone=customer_data.phone,
        address=customer_data.address,
    )
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    logger.info(f"Customer {customer_id} updated by {current_user.email}")
    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer_route(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Delete a customer and their ledger entries.
    """
    if not delete_customer(db, customer_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    logger.info(f"Customer {customer_id} deleted by {current_user.email}")
    return None


# ==================== LEDGER ====================

@router.get("/{customer_id}/ledger", response_model=LedgerListResponse)
def get_customer_ledger(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Ledger entries of the customer, newest first."""
    _get_customer_or_404(db, customer_id)
    entries = LedgerService(db).get_entries_by_customer(customer_id)
    return LedgerListResponse(total=len(entries), entries=entries)


@router.post("/{customer_id}/ledger", response_model=LedgerEntryResponse, status_code=status.HTTP_201_CREATED)
def create_ledger_entry(
    customer_id: str,
    entry_data: LedgerEntryCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    _get_customer_or_404(db, customer_id)
    entry = LedgerService(db).create_entry(
        customer_id=customer_id,
        entry_type=entry_data.type,
        amount=entry_data.amount,
        description=entry_data.description,
        invoice_id=entry_data.invoice_id,
    )
    logger.info(f"Ledger entry {entry.id} added for {customer_id} by {current_user.email}")
    return entry


@router.get("/{customer_id}/ledger/summary", response_model=LedgerSummaryResponse)
def get_customer_ledger_summary(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    _get_customer_or_404(db, customer_id)
    return ReportService(db).ledger_summary(customer_id)


@router.get("/{customer_id}/statement", response_model=StatementResponse)
def get_customer_statement(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Entries oldest first with the running balance after each one."""
    statement = ReportService(db).customer_statement(customer_id)
    if not statement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )

    lines = [
        StatementLine(
            **LedgerEntryResponse.model_validate(line.entry).model_dump(),
            running_balance=line.running_balance,
        )
        for line in statement.lines
    ]
    return StatementResponse(
        customer_id=statement.customer.id,
        customer_name=statement.customer.name,
        balance=statement.customer.balance,
        total_credit=statement.total_credit,
        total_debit=statement.total_debit,
        lines=lines,
    )


@router.get("/{customer_id}/balance-check", response_model=BalanceCheckResponse)
def check_customer_balance(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    check = LedgerService(db).check_balance(customer_id)
    if not check:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return BalanceCheckResponse(
        customer_id=check.customer_id,
        stored_balance=check.stored_balance,
        ledger_balance=check.ledger_balance,
        drift=check.drift,
        consistent=check.consistent,
    )


@router.post("/{customer_id}/recompute-balance", response_model=CustomerResponse)
def recompute_customer_balance(
    customer_id: str,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Rebuild the stored balance from the ledger. Admin only."""
    customer = LedgerService(db).recompute_balance(customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    logger.info(f"Balance of {customer_id} recomputed by {current_user.email}")
    return customer


# ==================== INVOICES / PAYMENTS ====================

@router.get("/{customer_id}/invoices", response_model=InvoiceListResponse)
def get_customer_invoices(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    invoices = InvoiceService(db).get_invoices_by_customer(customer_id)
    return InvoiceListResponse(total=len(invoices), invoices=invoices)


@router.get("/{customer_id}/payments", response_model=PaymentListResponse)
def get_customer_payments(
    customer_id: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    payments = PaymentService(db).get_payments_by_customer(customer_id)
    return PaymentListResponse(total=len(payments), payments=payments)
