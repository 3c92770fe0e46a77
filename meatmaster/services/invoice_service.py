"""
Invoicing & Stock Workflow

Creates invoices and deducts the sold quantities from stock. Stock deduction
is best-effort per item: an item whose quantity exceeds the current stock is
still invoiced, its stock is left untouched and it is reported back as
under-stocked.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from meatmaster.common.exceptions import ValidationError
from meatmaster.core.database import unit_of_work
from meatmaster.logger_config import logger
from meatmaster.models.customer import Customer
from meatmaster.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from meatmaster.models.ledger import LedgerEntryType
from meatmaster.models.product import Product
from meatmaster.services.ledger_service import LedgerService, to_money
from meatmaster.utils.identifiers import generate_invoice_number


@dataclass
class StockDeduction:
    product_id: Optional[str]
    product_name: str
    quantity: Decimal
    available: Optional[Decimal]
    deducted: bool

    @property
    def warning(self) -> Optional[str]:
        if self.deducted:
            return None
        if self.available is None:
            return f"{self.product_name} is not in the product list; stock not updated"
        return f"{self.product_name} has insufficient stock (Available: {self.available})"


@dataclass
class InvoiceCreationResult:
    invoice: Invoice
    deductions: List[StockDeduction] = field(default_factory=list)

    @property
    def under_stocked(self) -> List[StockDeduction]:
        return [d for d in self.deductions if not d.deducted]

    @property
    def warnings(self) -> List[str]:
        return [d.warning for d in self.deductions if d.warning]


def _to_quantity(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return (
            self.db.query(Invoice)
            .options(selectinload(Invoice.items))
            .filter(Invoice.id == invoice_id)
            .first()
        )

    def get_all_invoices(
        self,
        skip: int = 0,
        limit: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        customer_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Invoice], int]:
        query = self.db.query(Invoice).options(selectinload(Invoice.items))

        if status:
            query = query.filter(Invoice.status == status)
            logger.debug(f"Filtering by status: {status}")

        if customer_id:
            query = query.filter(Invoice.customer_id == customer_id)

        if search:
            term = search.strip().lower()
            query = query.filter(
                or_(
                    func.lower(Invoice.invoice_number).contains(term),
                    func.lower(Invoice.company_name).contains(term),
                    func.lower(Invoice.customer_name).contains(term),
                )
            )

        total = query.count()
        query = query.order_by(Invoice.created_at.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def get_invoices_by_customer(self, customer_id: str) -> List[Invoice]:
        invoices, _ = self.get_all_invoices(customer_id=customer_id)
        return invoices

    def get_invoices_by_company(self, company_name: str) -> List[Invoice]:
        return (
            self.db.query(Invoice)
            .filter(Invoice.company_name == company_name)
            .order_by(Invoice.created_at.desc())
            .all()
        )

    # ==================== CREATE INVOICE ====================

    def _validate_items(self, items: List[Dict]) -> List[Tuple[Dict, Optional[Product]]]:
        if not items:
            raise ValidationError("Invoice must contain at least one item")

        validated = []
        for idx, item in enumerate(items, start=1):
            quantity = _to_quantity(item.get("quantity", 0))
            price = to_money(item.get("price", 0))
            if quantity <= 0:
                raise ValidationError(f"Item {idx}: quantity must be greater than zero")
            if price < 0:
                raise ValidationError(f"Item {idx}: price cannot be negative")

            product = None
            product_id = item.get("product_id")
            if product_id:
                product = self.db.query(Product).filter(Product.id == product_id).first()
                if not product:
                    logger.warning(f"Item {idx}: product {product_id} not found")

            product_name = item.get("product_name") or (product.name if product else None)
            if not product_name:
                raise ValidationError(f"Item {idx}: product not found")

            unit_type = item.get("unit_type") or (product.unit_type.value if product else "")
            validated.append((
                {
                    "product_id": product_id,
                    "product_name": product_name,
                    "unit_type": unit_type,
                    "quantity": quantity,
                    "price": price,
                },
                product,
            ))
        return validated

    def _deduct_stock(self, line: Dict, product: Optional[Product]) -> StockDeduction:
        if product is not None:
            # Re-read the stock under a row lock held until the invoice commits
            product = (
                self.db.query(Product)
                .filter(Product.id == product.id)
                .populate_existing()
                .with_for_update()
                .first()
            )
        if product is None:
            return StockDeduction(
                product_id=line["product_id"],
                product_name=line["product_name"],
                quantity=line["quantity"],
                available=None,
                deducted=False,
            )

        available = _to_quantity(product.current_stock or 0)
        new_stock = available - line["quantity"]
        if new_stock >= 0:
            product.current_stock = new_stock
            self.db.flush()
            logger.info(f"Stock of {product.id} reduced by {line['quantity']} to {new_stock}")
            return StockDeduction(product.id, product.name, line["quantity"], available, True)

        logger.warning(
            f"Insufficient stock for {product.id} ({product.name}): "
            f"requested {line['quantity']}, available {available}; stock left unchanged"
        )
        return StockDeduction(product.id, product.name, line["quantity"], available, False)

    def create_invoice(
        self,
        company_name: str,
        items: List[Dict],
        customer_id: Optional[str] = None,
        company_logo: Optional[str] = None,
        invoice_number: Optional[str] = None,
        record_credit: bool = False,
    ) -> InvoiceCreationResult:
        """
        Create a `sent` invoice and deduct stock for each item.

        Args:
            company_name: name printed on the invoice
            items: [{"product_id": "PRD-XXX", "quantity": 4, "price": 12.5}, ...]
                   product_name/unit_type are taken from the product when omitted
            customer_id: optional customer the invoice is billed to
            invoice_number: defaults to INV-<epoch millis>
            record_credit: also post a credit ledger entry for the total

        Returns:
            InvoiceCreationResult with the invoice and one StockDeduction per item
        """
        if not company_name or not company_name.strip():
            raise ValidationError("Company name is required")

        customer = None
        if customer_id:
            customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
            if not customer:
                raise ValidationError(f"Customer {customer_id} not found")

        validated = self._validate_items(items)
        total = sum((line["quantity"] * line["price"] for line, _ in validated), Decimal("0"))

        logger.info(
            f"Creating invoice - Company: {company_name}, Customer: {customer_id}, "
            f"Items: {len(validated)}, Total: {total}"
        )

        with unit_of_work(self.db):
            invoice = Invoice(
                invoice_number=(invoice_number or "").strip() or generate_invoice_number(),
                customer_id=customer.id if customer else None,
                customer_name=customer.name if customer else None,
                company_name=company_name.strip(),
                company_logo=(company_logo or "").strip() or None,
                total=to_money(total),
                status=InvoiceStatus.sent,
            )
            for line, _ in validated:
                invoice.items.append(InvoiceItem(**line))
            self.db.add(invoice)
            self.db.flush()

            deductions = [self._deduct_stock(line, product) for line, product in validated]

            if record_credit and customer:
                LedgerService(self.db).post_entry(
                    customer_id=customer.id,
                    entry_type=LedgerEntryType.credit,
                    amount=invoice.total,
                    description=f"Invoice {invoice.invoice_number}",
                    invoice_id=invoice.id,
                )

        self.db.refresh(invoice)
        result = InvoiceCreationResult(invoice=invoice, deductions=deductions)
        logger.info(
            f"Invoice {invoice.id} ({invoice.invoice_number}) created; "
            f"stock updated for {len(deductions) - len(result.under_stocked)} of {len(deductions)} item(s)"
        )
        return result

    # ==================== UPDATE / DELETE ====================

    def update_invoice(
        self,
        invoice_id: str,
        company_name: Optional[str] = None,
        company_logo: Optional[str] = None,
        invoice_number: Optional[str] = None,
    ) -> Optional[Invoice]:
        """Edit the printable header fields. Status and items are not editable."""
        invoice = self.get_invoice(invoice_id)
        if not invoice:
            return None

        if company_name is not None:
            if not company_name.strip():
                raise ValidationError("Company name is required")
            invoice.company_name = company_name.strip()
        if company_logo is not None:
            invoice.company_logo = company_logo.strip() or None
        if invoice_number is not None:
            if not invoice_number.strip():
                raise ValidationError("Invoice number is required")
            invoice.invoice_number = invoice_number.strip()

        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def delete_invoice(self, invoice_id: str) -> bool:
        """
        Delete an invoice and its payment records.

        Stock is not restored and ledger entries stay as they are.
        """
        invoice = self.get_invoice(invoice_id)
        if not invoice:
            return False

        with unit_of_work(self.db):
            self.db.delete(invoice)

        logger.info(f"Invoice {invoice_id} deleted")
        return True
