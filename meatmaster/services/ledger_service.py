"""
Balance Ledger Engine

Keeps Customer.balance equal to the signed sum of the customer's ledger
entries (credit: +amount, debit: -amount) across create, update and delete.

Every mutation writes the entry and the customer balance inside one unit of
work. The balance is adjusted incrementally; recompute_balance() rebuilds it
from the full entry history when drift is suspected.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from sqlalchemy import Date, cast, func, or_
from sqlalchemy.orm import Session

from meatmaster.common.exceptions import ValidationError
from meatmaster.core.database import unit_of_work
from meatmaster.logger_config import logger
from meatmaster.models.customer import Customer
from meatmaster.models.ledger import LedgerEntry, LedgerEntryType, signed_amount

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount: {value}")


def _entry_type(value) -> LedgerEntryType:
    try:
        return LedgerEntryType(value)
    except ValueError:
        raise ValidationError(f"Invalid ledger entry type: {value}")


@dataclass
class BalanceCheck:
    customer_id: str
    stored_balance: Decimal
    ledger_balance: Decimal

    @property
    def drift(self) -> Decimal:
        return self.stored_balance - self.ledger_balance

    @property
    def consistent(self) -> bool:
        return self.drift == 0


class LedgerService:
    """
    Customer ledger: entries plus the derived customer balance.
    """

    def __init__(self, db: Session):
        self.db = db

    # ================= QUERIES ===================

    def get_entry(self, entry_id: int) -> Optional[LedgerEntry]:
        return self.db.query(LedgerEntry).filter(LedgerEntry.id == entry_id).first()

    def get_entries_by_customer(self, customer_id: str) -> List[LedgerEntry]:
        """Entries for display, most recent first."""
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.customer_id == customer_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
            .all()
        )

    def get_entries_chronological(self, customer_id: str) -> List[LedgerEntry]:
        """Entries in the order they happened, for replaying a running balance."""
        return (
            self.db.query(LedgerEntry)
            .filter(LedgerEntry.customer_id == customer_id)
            .order_by(LedgerEntry.created_at.asc(), LedgerEntry.id.asc())
            .all()
        )

    def get_all_entries(
        self,
        skip: int = 0,
        limit: Optional[int] = None,
        customer_id: Optional[str] = None,
        entry_type: Optional[LedgerEntryType] = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[List[LedgerEntry], int]:
        query = self.db.query(LedgerEntry)

        if customer_id:
            query = query.filter(LedgerEntry.customer_id == customer_id)

        if entry_type:
            query = query.filter(LedgerEntry.type == entry_type)

        if search:
            query = query.filter(
                or_(
                    func.lower(LedgerEntry.description).contains(search.lower()),
                    LedgerEntry.invoice_id.contains(search),
                )
            )

        # Date range filtering
        if start_date:
            query = query.filter(cast(LedgerEntry.created_at, Date) >= start_date)
            logger.debug(f"Filtering by start_date: {start_date}")

        if end_date:
            query = query.filter(cast(LedgerEntry.created_at, Date) <= end_date)
            logger.debug(f"Filtering by end_date: {end_date}")

        total_count = query.count()

        query = query.order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total_count

    def ledger_balance(self, customer_id: str) -> Decimal:
        """Signed sum of all entries of the customer."""
        total = Decimal("0.00")
        for entry in self.get_entries_chronological(customer_id):
            total += entry.signed_amount
        return total

    # ================= BUILDING BLOCKS (no commit) ===================

    def _lock_customer(self, customer_id: str) -> Optional[Customer]:
        # Row lock held until the unit of work ends; reloads the balance under the lock
        return (
            self.db.query(Customer)
            .filter(Customer.id == customer_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def apply_delta(self, customer_id: str, delta: Decimal) -> Optional[Customer]:
        """Adjust the stored balance by `delta`. Returns None for an unknown customer."""
        customer = self._lock_customer(customer_id)
        if not customer:
            logger.warning(f"Customer {customer_id} not found; balance adjustment of {delta} skipped")
            return None

        customer.balance = to_money(customer.balance or 0) + delta
        self.db.flush()
        logger.debug(f"Customer {customer_id} balance adjusted by {delta} to {customer.balance}")
        return customer

    def post_entry(
        self,
        customer_id: str,
        entry_type: LedgerEntryType,
        amount,
        description: str = "",
        invoice_id: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Add an entry and move the customer balance by its signed amount.

        Flushes only; the caller owns the transaction. The entry is kept even
        when the customer does not exist (the balance update is then skipped).
        """
        entry_type = _entry_type(entry_type)
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if not customer_id:
            raise ValidationError("Customer is required")

        entry = LedgerEntry(
            customer_id=customer_id,
            type=entry_type,
            amount=amount,
            description=(description or "").strip(),
            invoice_id=invoice_id,
        )
        self.db.add(entry)
        self.db.flush()

        self.apply_delta(customer_id, signed_amount(entry_type, amount))

        logger.info(f"Ledger entry {entry.id} posted: {entry_type.value} {amount} for customer {customer_id}")
        return entry

    # ================= OPERATIONS ===================

    def create_entry(
        self,
        customer_id: str,
        entry_type: LedgerEntryType,
        amount,
        description: str = "",
        invoice_id: Optional[str] = None,
    ) -> LedgerEntry:
        with unit_of_work(self.db):
            entry = self.post_entry(customer_id, entry_type, amount, description, invoice_id)
        return entry

    def update_entry(
        self,
        entry_id: int,
        amount=None,
        entry_type: Optional[LedgerEntryType] = None,
        description: Optional[str] = None,
        invoice_id: Optional[str] = None,
    ) -> Optional[LedgerEntry]:
        """
        Update an entry. The balance moves by (new delta - old delta) only
        when the amount or the type is part of the update.
        """
        entry = self.get_entry(entry_id)
        if not entry:
            logger.warning(f"Ledger entry {entry_id} not found")
            return None

        if amount is not None:
            amount = to_money(amount)
            if amount <= 0:
                raise ValidationError("Amount must be greater than zero")
        if entry_type is not None:
            entry_type = _entry_type(entry_type)

        with unit_of_work(self.db):
            old_delta = entry.signed_amount

            if amount is not None:
                entry.amount = amount
            if entry_type is not None:
                entry.type = entry_type
            if description is not None:
                entry.description = description.strip()
            if invoice_id is not None:
                entry.invoice_id = invoice_id or None
            self.db.flush()

            if amount is not None or entry_type is not None:
                new_delta = signed_amount(entry.type, entry.amount)
                adjustment = new_delta - old_delta
                if adjustment:
                    self.apply_delta(entry.customer_id, adjustment)

        self.db.refresh(entry)
        return entry

    def delete_entry(self, entry_id: int) -> bool:
        """Remove an entry and reverse its effect on the balance."""
        entry = self.get_entry(entry_id)
        if not entry:
            logger.warning(f"Ledger entry {entry_id} not found")
            return False

        with unit_of_work(self.db):
            customer_id = entry.customer_id
            reverse_delta = -entry.signed_amount
            self.db.delete(entry)
            self.db.flush()
            self.apply_delta(customer_id, reverse_delta)

        logger.info(f"Ledger entry {entry_id} deleted; customer {customer_id} adjusted by {reverse_delta}")
        return True

    # ================= REPAIR ===================

    def check_balance(self, customer_id: str) -> Optional[BalanceCheck]:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            return None

        return BalanceCheck(
            customer_id=customer_id,
            stored_balance=to_money(customer.balance or 0),
            ledger_balance=self.ledger_balance(customer_id),
        )

    def recompute_balance(self, customer_id: str) -> Optional[Customer]:
        """Rebuild the stored balance from the full entry history."""
        with unit_of_work(self.db):
            customer = self._lock_customer(customer_id)
            if not customer:
                return None

            expected = self.ledger_balance(customer_id)
            if to_money(customer.balance or 0) != expected:
                logger.warning(
                    f"Balance drift for customer {customer_id}: stored {customer.balance}, ledger {expected}"
                )
            customer.balance = expected

        self.db.refresh(customer)
        return customer

    def recompute_all_balances(self) -> List[BalanceCheck]:
        """Repair every customer; returns the checks taken before repairing."""
        checks = []
        for (customer_id,) in self.db.query(Customer.id).all():
            check = self.check_balance(customer_id)
            checks.append(check)
            if not check.consistent:
                self.recompute_balance(customer_id)
        return checks
