from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from meatmaster.core.dependencies import get_current_active_user, get_db, require_admin
from meatmaster.logger_config import logger
from meatmaster.models.ledger import LedgerEntryType
from meatmaster.models.user import User
from meatmaster.schemas.customer import BalanceCheckResponse
from meatmaster.schemas.ledger import LedgerEntryResponse, LedgerEntryUpdate, LedgerListResponse
from meatmaster.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=LedgerListResponse)
def get_ledger_entries(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    customer_id: Optional[str] = Query(None),
    entry_type: Optional[LedgerEntryType] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    List ledger entries (newest first) with filters: customer, type,
    description/invoice search and creation date range.
    """
    entries, total = LedgerService(db).get_all_entries(
        skip=skip,
        limit=limit,
        customer_id=customer_id,
        entry_type=entry_type,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )
    return LedgerListResponse(total=total, entries=entries)


@router.post("/recompute", response_model=list[BalanceCheckResponse])
def repair_all_balances(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Check every customer balance against the ledger and repair drift.
    Returns the checks taken before repairing.
    """
    checks = LedgerService(db).recompute_all_balances()
    logger.info(f"Balance consistency run by {current_user.email}: "
                f"{sum(1 for c in checks if not c.consistent)} customer(s) repaired")
    return [
        BalanceCheckResponse(
            customer_id=c.customer_id,
            stored_balance=c.stored_balance,
            ledger_balance=c.ledger_balance,
            drift=c.drift,
            consistent=c.consistent,
        )
        for c in checks
    ]


@router.get("/{entry_id}", response_model=LedgerEntryResponse)
def get_ledger_entry(
    entry_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    entry = LedgerService(db).get_entry(entry_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ledger entry not found"
        )
    return entry


@router.put("/{entry_id}", response_model=LedgerEntryResponse)
def update_ledger_entry(
    entry_id: int,
    entry_data: LedgerEntryUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Update an entry; the customer balance follows when amount or type change.
    """
    entry = LedgerService(db).update_entry(
        entry_id,
        amount=entry_data.amount,
        entry_type=entry_data.type,
        description=entry_data.description,
        invoice_id=entry_data.invoice_id,
    )
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ledger entry not found"
        )
    logger.info(f"Ledger entry {entry_id} updated by {current_user.email}")
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ledger_entry(
    entry_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    if not LedgerService(db).delete_entry(entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ledger entry not found"
        )
    logger.info(f"Ledger entry {entry_id} deleted by {current_user.email}")
    return None
