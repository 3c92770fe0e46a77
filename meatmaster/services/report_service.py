"""
Statistics and reports. Read-only aggregations over invoices, customers,
products, ledger entries and expenses.
"""

from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from meatmaster.core.config import settings
from meatmaster.logger_config import logger
from meatmaster.models.customer import Customer
from meatmaster.models.expense import Expense
from meatmaster.models.invoice import Invoice, InvoiceStatus
from meatmaster.models.ledger import LedgerEntry, LedgerEntryType
from meatmaster.models.product import Product
from meatmaster.services.ledger_service import LedgerService, to_money
from meatmaster.utils.dates import month_bounds, period_start, today

ZERO = Decimal("0.00")
PERIODS = ("today", "week", "month", "all")


@dataclass
class StatementLine:
    entry: LedgerEntry
    running_balance: Decimal


@dataclass
class CustomerStatement:
    customer: Customer
    lines: List[StatementLine]
    total_credit: Decimal
    total_debit: Decimal

    @property
    def closing_balance(self) -> Decimal:
        return self.lines[-1].running_balance if self.lines else ZERO


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    def _sum(self, column, *criteria) -> Decimal:
        query = self.db.query(func.coalesce(func.sum(column), 0))
        for criterion in criteria:
            query = query.filter(criterion)
        return to_money(query.scalar() or 0)

    def _invoices_in_period(self, period: str) -> List[Invoice]:
        start = period_start(period)
        query = self.db.query(Invoice).options(selectinload(Invoice.items))
        if start is not None:
            query = query.filter(Invoice.created_at >= start)
        return query.order_by(Invoice.created_at.asc()).all()

    # ==================== DASHBOARD ====================

    def get_statistics(self) -> Dict:
        return {
            "total_products": self.db.query(Product).count(),
            "total_customers": self.db.query(Customer).count(),
            "total_invoices": self.db.query(Invoice).count(),
            "total_revenue": self._sum(Invoice.total),
        }

    def stock_summary(self) -> Dict:
        threshold = settings.LOW_STOCK_THRESHOLD
        products = self.db.query(Product).all()
        out_of_stock = sum(1 for p in products if p.current_stock <= 0)
        low_stock = sum(1 for p in products if 0 < p.current_stock < threshold)
        return {
            "total_products": len(products),
            "in_stock": len(products) - out_of_stock,
            "low_stock": low_stock,
            "out_of_stock": out_of_stock,
            "low_stock_threshold": threshold,
        }

    # ==================== SALES ====================

    def sales_summary(self, period: str = "all") -> Dict:
        """
        Sale count, revenue, average order and best-selling product for a
        window: today, week (last 7 days), month (last 30 days) or all.
        """
        invoices = self._invoices_in_period(period)
        revenue = sum((to_money(inv.total) for inv in invoices), ZERO)

        quantities: Dict[str, Decimal] = OrderedDict()
        total_items = 0
        for inv in invoices:
            for item in inv.items:
                total_items += 1
                quantities[item.product_name] = quantities.get(item.product_name, Decimal("0")) + item.quantity

        top_product = None
        for name, quantity in quantities.items():
            if top_product is None or quantity > top_product["quantity"]:
                top_product = {"name": name, "quantity": quantity}

        average = to_money(revenue / len(invoices)) if invoices else ZERO
        logger.debug(f"Sales summary for {period}: {len(invoices)} invoice(s), revenue {revenue}")
        return {
            "period": period,
            "total_sales": len(invoices),
            "total_revenue": revenue,
            "average_order": average,
            "total_items": total_items,
            "top_product": top_product,
        }

    def top_customers(self, period: str = "all", limit: int = 10) -> List[Dict]:
        """Invoice totals grouped by company name, largest first."""
        grouped: Dict[str, Dict] = OrderedDict()
        for inv in self._invoices_in_period(period):
            row = grouped.setdefault(inv.company_name, {"name": inv.company_name, "total": ZERO, "count": 0})
            row["total"] += to_money(inv.total)
            row["count"] += 1

        return sorted(grouped.values(), key=lambda r: r["total"], reverse=True)[:limit]

    def receivables(self) -> Dict:
        unpaid = self.db.query(Invoice).filter(Invoice.status == InvoiceStatus.sent)
        debtors = (
            self.db.query(Customer)
            .filter(Customer.balance > 0)
            .order_by(Customer.balance.desc())
            .all()
        )
        return {
            "unpaid_invoice_total": self._sum(Invoice.total, Invoice.status == InvoiceStatus.sent),
            "unpaid_invoice_count": unpaid.count(),
            "outstanding_balance_total": sum((to_money(c.balance) for c in debtors), ZERO),
            "debtors": [
                {"customer_id": c.id, "name": c.name, "balance": to_money(c.balance)}
                for c in debtors
            ],
        }

    # ==================== EXPENSES / PROFIT ====================

    def expense_summary(self) -> Dict:
        day = today()
        first, last = month_bounds(day)

        total = self._sum(Expense.amount)
        count = self.db.query(Expense).count()
        month_filter = (Expense.date >= first, Expense.date <= last)

        rows = (
            self.db.query(Expense.category, func.sum(Expense.amount), func.count(Expense.id))
            .group_by(Expense.category)
            .all()
        )
        by_category = sorted(
            ({"category": cat, "total": to_money(amount or 0), "count": n} for cat, amount, n in rows),
            key=lambda r: r["total"],
            reverse=True,
        )

        return {
            "total": total,
            "count": count,
            "today_total": self._sum(Expense.amount, Expense.date == day),
            "today_count": self.db.query(Expense).filter(Expense.date == day).count(),
            "month_total": self._sum(Expense.amount, *month_filter),
            "month_count": self.db.query(Expense).filter(*month_filter).count(),
            "average": to_money(total / count) if count else ZERO,
            "by_category": by_category,
        }

    def profit_summary(self) -> Dict:
        revenue = self._sum(Invoice.total)
        expenses = self._sum(Expense.amount)
        net = revenue - expenses
        margin = (net / revenue * 100).quantize(Decimal("0.01")) if revenue else ZERO
        return {
            "revenue": revenue,
            "expenses": expenses,
            "net_profit": net,
            "margin_percent": margin,
        }

    # ==================== CUSTOMER LEDGER ====================

    def ledger_summary(self, customer_id: str) -> Dict:
        total_credit = self._sum(
            LedgerEntry.amount,
            LedgerEntry.customer_id == customer_id,
            LedgerEntry.type == LedgerEntryType.credit,
        )
        total_debit = self._sum(
            LedgerEntry.amount,
            LedgerEntry.customer_id == customer_id,
            LedgerEntry.type == LedgerEntryType.debit,
        )
        entry_count = self.db.query(LedgerEntry).filter(LedgerEntry.customer_id == customer_id).count()
        return {
            "customer_id": customer_id,
            "total_credit": total_credit,
            "total_debit": total_debit,
            "net": total_credit - total_debit,
            "entry_count": entry_count,
        }

    def customer_statement(self, customer_id: str) -> Optional[CustomerStatement]:
        """
        Replay the customer's entries oldest first and attach the running
        balance after each one. The last running balance equals the stored
        customer balance as long as the ledger is consistent.
        """
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            return None

        running = ZERO
        total_credit = ZERO
        total_debit = ZERO
        lines = []
        for entry in LedgerService(self.db).get_entries_chronological(customer_id):
            running += entry.signed_amount
            if entry.type == LedgerEntryType.credit:
                total_credit += to_money(entry.amount)
            else:
                total_debit += to_money(entry.amount)
            lines.append(StatementLine(entry=entry, running_balance=running))

        if running != to_money(customer.balance or 0):
            logger.warning(
                f"Statement for {customer_id} closes at {running} but stored balance is {customer.balance}"
            )

        return CustomerStatement(
            customer=customer,
            lines=lines,
            total_credit=total_credit,
            total_debit=total_debit,
        )
