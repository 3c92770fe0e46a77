"""Payments: invoice state machine, ledger debit and customer statements."""

from decimal import Decimal

import pytest

from meatmaster.common.exceptions import ValidationError
from meatmaster.models import InvoiceStatus, LedgerEntry, LedgerEntryType, PaymentMethod
from meatmaster.services.invoice_service import InvoiceService
from meatmaster.services.payment_service import PaymentService
from meatmaster.services.report_service import ReportService


@pytest.fixture
def payments(db):
    return PaymentService(db)


@pytest.fixture
def invoice(db, product, customer):
    items = [{"product_id": product.id, "quantity": 2, "price": "50.00"}]
    return InvoiceService(db).create_invoice("Al Noor Restaurant", items, customer_id=customer.id).invoice


class TestRecordPayment:
    def test_marks_paid_and_posts_one_debit(self, db, payments, invoice, customer):
        payment = payments.record_payment(invoice.id, payment_method=PaymentMethod.cash)

        assert payment.amount == Decimal("100.00")
        assert payment.customer_id == customer.id
        assert InvoiceService(db).get_invoice(invoice.id).status == InvoiceStatus.paid

        entries = db.query(LedgerEntry).all()
        assert len(entries) == 1
        assert entries[0].type == LedgerEntryType.debit
        assert entries[0].amount == Decimal("100.00")
        assert entries[0].description == "Payment received via cash"
        assert entries[0].invoice_id == invoice.id

        db.refresh(customer)
        assert customer.balance == Decimal("-100.00")

    def test_notes_appended_to_description(self, db, payments, invoice):
        payments.record_payment(invoice.id, amount=40, payment_method=PaymentMethod.cheque,
                                transaction_id="CHQ-0042", notes="post-dated")
        entry = db.query(LedgerEntry).one()
        assert entry.description == "Payment received via cheque - post-dated"
        assert entry.amount == Decimal("40.00")

    def test_partial_payment_still_marks_paid(self, db, payments, invoice):
        payments.record_payment(invoice.id, amount=10)
        assert InvoiceService(db).get_invoice(invoice.id).status == InvoiceStatus.paid

    def test_invoice_without_customer_posts_nothing(self, db, payments, product):
        items = [{"product_id": product.id, "quantity": 1, "price": 30}]
        walk_in = InvoiceService(db).create_invoice("Walk-in", items).invoice
        payment = payments.record_payment(walk_in.id)
        assert payment.customer_id is None
        assert db.query(LedgerEntry).count() == 0

    def test_missing_invoice(self, payments):
        assert payments.record_payment("SINV-MISSING") is None

    def test_non_positive_amount(self, db, payments, invoice):
        with pytest.raises(ValidationError):
            payments.record_payment(invoice.id, amount=0)
        assert db.query(LedgerEntry).count() == 0


class TestDeletePayment:
    def test_reverts_to_sent_without_ledger_reversal(self, db, payments, invoice, customer):
        payment = payments.record_payment(invoice.id)
        assert payments.delete_payment(payment.id) is True

        assert InvoiceService(db).get_invoice(invoice.id).status == InvoiceStatus.sent
        assert payments.get_payment(payment.id) is None
        assert db.query(LedgerEntry).count() == 1
        db.refresh(customer)
        assert customer.balance == Decimal("-100.00")

    def test_missing_payment(self, payments):
        assert payments.delete_payment("PAY-MISSING") is False


class TestPaymentQueries:
    def test_by_invoice_and_customer(self, payments, invoice, customer):
        payments.record_payment(invoice.id, amount=30)
        payments.record_payment(invoice.id, amount=70)
        assert len(payments.get_payments_by_invoice(invoice.id)) == 2
        assert len(payments.get_payments_by_customer(customer.id)) == 2

    def test_update_only_reference_fields(self, payments, invoice):
        payment = payments.record_payment(invoice.id, payment_method=PaymentMethod.online)
        updated = payments.update_payment(payment.id, transaction_id="TX-1", notes="bank transfer")
        assert updated.transaction_id == "TX-1"
        assert updated.notes == "bank transfer"
        assert updated.amount == Decimal("100.00")
        assert payments.update_payment("PAY-MISSING", notes="x") is None


class TestCustomerStatement:
    def test_running_balance(self, db, customer, post):
        post(customer.id, "credit", 100)
        post(customer.id, "credit", 50)
        post(customer.id, "debit", 100)

        statement = ReportService(db).customer_statement(customer.id)
        assert [line.running_balance for line in statement.lines] == [
            Decimal("100"), Decimal("150"), Decimal("50"),
        ]
        assert statement.closing_balance == customer.balance
        assert statement.total_credit == Decimal("150.00")
        assert statement.total_debit == Decimal("100.00")

    def test_invoices_then_payment(self, db, payments, product, customer):
        invoices = InvoiceService(db)
        invoice_a = invoices.create_invoice(
            "Al Noor Restaurant", [{"product_id": product.id, "quantity": 2, "price": 50}],
            customer_id=customer.id, record_credit=True,
        ).invoice
        invoice_b = invoices.create_invoice(
            "Al Noor Restaurant", [{"product_id": product.id, "quantity": 1, "price": 50}],
            customer_id=customer.id, record_credit=True,
        ).invoice

        payments.record_payment(invoice_a.id, amount=100)

        db.refresh(customer)
        assert customer.balance == Decimal("50.00")
        assert invoices.get_invoice(invoice_a.id).status == InvoiceStatus.paid
        assert invoices.get_invoice(invoice_b.id).status == InvoiceStatus.sent

        statement = ReportService(db).customer_statement(customer.id)
        assert [line.running_balance for line in statement.lines] == [
            Decimal("100"), Decimal("150"), Decimal("50"),
        ]
        assert [line.entry.invoice_id for line in statement.lines] == [
            invoice_a.id, invoice_b.id, invoice_a.id,
        ]
        assert statement.closing_balance == customer.balance

    def test_unknown_customer(self, db):
        assert ReportService(db).customer_statement("CUS-MISSING") is None
