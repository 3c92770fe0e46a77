from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from meatmaster.common.exceptions import ValidationError
from meatmaster.core.database import unit_of_work
from meatmaster.logger_config import logger
from meatmaster.models.invoice import Invoice, InvoiceStatus
from meatmaster.models.ledger import LedgerEntryType
from meatmaster.models.payment import PaymentMethod, PaymentRecord
from meatmaster.services.ledger_service import LedgerService, to_money


def _payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError(f"Invalid payment method: {value}")


def payment_description(method: PaymentMethod, notes: Optional[str] = None) -> str:
    description = f"Payment received via {method.value}"
    if notes:
        description += f" - {notes}"
    return description


class PaymentService:
    """
    Payments against invoices.

    Recording a payment marks the invoice paid and, for invoices billed to a
    customer, posts a debit to the customer's ledger. Deleting a payment sets
    the invoice back to sent but leaves the ledger as it is.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def get_payment(self, payment_id: str) -> Optional[PaymentRecord]:
        return self.db.query(PaymentRecord).filter(PaymentRecord.id == payment_id).first()

    def get_all_payments(
        self,
        skip: int = 0,
        limit: Optional[int] = None,
        invoice_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> Tuple[List[PaymentRecord], int]:
        query = self.db.query(PaymentRecord)

        if invoice_id:
            query = query.filter(PaymentRecord.invoice_id == invoice_id)
        if customer_id:
            query = query.filter(PaymentRecord.customer_id == customer_id)
        if payment_method:
            query = query.filter(PaymentRecord.payment_method == payment_method)

        total = query.count()
        query = query.order_by(PaymentRecord.created_at.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def get_payments_by_invoice(self, invoice_id: str) -> List[PaymentRecord]:
        payments, _ = self.get_all_payments(invoice_id=invoice_id)
        return payments

    def get_payments_by_customer(self, customer_id: str) -> List[PaymentRecord]:
        payments, _ = self.get_all_payments(customer_id=customer_id)
        return payments

    # ==================== RECORD / DELETE ====================

    def record_payment(
        self,
        invoice_id: str,
        amount=None,
        payment_method: PaymentMethod = PaymentMethod.cash,
        transaction_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[PaymentRecord]:
        """
        Record a payment for an invoice.

        Returns None when the invoice does not exist. The amount defaults to
        the invoice total. The payment, the status change and the ledger debit
        are written in one unit of work.
        """
        invoice = self.db.query(Invoice).filter(Invoice.id == invoice_id).first()
        if not invoice:
            logger.warning(f"Invoice {invoice_id} not found; payment not recorded")
            return None

        method = _payment_method(payment_method)
        amount = to_money(invoice.total if amount is None else amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        notes = (notes or "").strip() or None

        with unit_of_work(self.db):
            payment = PaymentRecord(
                invoice_id=invoice.id,
                customer_id=invoice.customer_id,
                amount=amount,
                payment_method=method,
                transaction_id=(transaction_id or "").strip() or None,
                notes=notes,
            )
            self.db.add(payment)

            invoice.status = InvoiceStatus.paid
            self.db.flush()

            if invoice.customer_id:
                LedgerService(self.db).post_entry(
                    customer_id=invoice.customer_id,
                    entry_type=LedgerEntryType.debit,
                    amount=amount,
                    description=payment_description(method, notes),
                    invoice_id=invoice.id,
                )

        self.db.refresh(payment)
        logger.info(f"Payment {payment.id} of {amount} via {method.value} recorded for invoice {invoice.id}")
        return payment

    def delete_payment(self, payment_id: str) -> bool:
        """
        Remove a payment and set its invoice back to sent.

        The ledger debit posted with the payment is not reversed.
        """
        payment = self.get_payment(payment_id)
        if not payment:
            return False

        with unit_of_work(self.db):
            invoice = self.db.query(Invoice).filter(Invoice.id == payment.invoice_id).first()
            if invoice:
                invoice.status = InvoiceStatus.sent
            self.db.delete(payment)

        logger.info(f"Payment {payment_id} deleted; invoice {payment.invoice_id} reverted to sent")
        return True

    def update_payment(
        self,
        payment_id: str,
        transaction_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[PaymentRecord]:
        """Amount and method are fixed once the ledger has been posted."""
        payment = self.get_payment(payment_id)
        if not payment:
            return None

        if transaction_id is not None:
            payment.transaction_id = transaction_id.strip() or None
        if notes is not None:
            payment.notes = notes.strip() or None

        self.db.commit()
        self.db.refresh(payment)
        return payment
