from datetime import date, timedelta
from decimal import Decimal

import pytest

from meatmaster.models import Invoice, UnitType
from meatmaster.services.expense_service import create_expense
from meatmaster.services.invoice_service import InvoiceService
from meatmaster.services.payment_service import PaymentService
from meatmaster.services.product_service import create_product
from meatmaster.services.report_service import ReportService


@pytest.fixture
def reports(db):
    return ReportService(db)


@pytest.fixture
def sales(db, product, customer):
    chicken = create_product(db, name="Chicken Breast", unit_type=UnitType.Kg, current_stock=100)
    service = InvoiceService(db)
    first = service.create_invoice(
        "Al Noor Restaurant",
        [{"product_id": product.id, "quantity": 2, "price": 40},
         {"product_id": chicken.id, "quantity": 5, "price": 12}],
        customer_id=customer.id,
    ).invoice
    second = service.create_invoice("Gulf Catering", [{"product_id": chicken.id, "quantity": 10, "price": 12}]).invoice
    return first, second


class TestSales:
    def test_statistics(self, reports, sales):
        stats = reports.get_statistics()
        assert stats["total_invoices"] == 2
        assert stats["total_products"] == 2
        assert stats["total_customers"] == 1
        assert stats["total_revenue"] == Decimal("260.00")

    def test_sales_summary(self, reports, sales):
        summary = reports.sales_summary("all")
        assert summary["total_sales"] == 2
        assert summary["total_revenue"] == Decimal("260.00")
        assert summary["average_order"] == Decimal("130.00")
        assert summary["total_items"] == 3
        assert summary["top_product"] == {"name": "Chicken Breast", "quantity": Decimal("15")}

    def test_period_window(self, db, reports, sales):
        old = sales[1]
        stored = db.query(Invoice).filter(Invoice.id == old.id).one()
        stored.created_at = stored.created_at - timedelta(days=10)
        db.commit()

        assert reports.sales_summary("week")["total_sales"] == 1
        assert reports.sales_summary("month")["total_sales"] == 2
        assert reports.sales_summary("today")["total_sales"] == 1

    def test_unknown_period(self, reports):
        with pytest.raises(ValueError):
            reports.sales_summary("decade")

    def test_top_customers_grouped_by_company(self, reports, sales):
        rows = reports.top_customers("all")
        assert [r["name"] for r in rows] == ["Al Noor Restaurant", "Gulf Catering"]
        assert rows[0]["total"] == Decimal("140.00")
        assert rows[0]["count"] == 1

    def test_receivables(self, db, reports, sales, customer, post):
        post(customer.id, "credit", 140)
        PaymentService(db).record_payment(sales[1].id)

        data = reports.receivables()
        assert data["unpaid_invoice_count"] == 1
        assert data["unpaid_invoice_total"] == Decimal("140.00")
        assert data["outstanding_balance_total"] == Decimal("140.00")
        assert data["debtors"][0]["customer_id"] == customer.id


class TestStockAndMoney:
    def test_stock_summary(self, db, reports, product):
        create_product(db, name="Goat Leg", unit_type=UnitType.Piece, current_stock=0)
        create_product(db, name="Lamb Chops", unit_type=UnitType.Kg, current_stock=3)

        summary = reports.stock_summary()
        assert summary["total_products"] == 3
        assert summary["out_of_stock"] == 1
        assert summary["in_stock"] == 2
        # product fixture holds 10, which is not below the default threshold of 10
        assert summary["low_stock"] == 1

    def test_expense_summary(self, db, reports):
        create_expense(db, "Rent", "Cold store", 3000)
        create_expense(db, "Rent", "Shop", 1000)
        create_expense(db, "Utilities", "Water", 200, expense_date=date.today() - timedelta(days=400))

        summary = reports.expense_summary()
        assert summary["total"] == Decimal("4200.00")
        assert summary["count"] == 3
        assert summary["today_total"] == Decimal("4000.00")
        assert summary["month_count"] == 2
        assert summary["average"] == Decimal("1400.00")
        assert summary["by_category"][0] == {"category": "Rent", "total": Decimal("4000.00"), "count": 2}

    def test_profit_summary(self, db, reports, sales):
        create_expense(db, "Rent", "Cold store", 60)
        profit = reports.profit_summary()
        assert profit["revenue"] == Decimal("260.00")
        assert profit["net_profit"] == Decimal("200.00")
        assert profit["margin_percent"] == Decimal("76.92")

    def test_profit_without_revenue(self, reports):
        assert reports.profit_summary()["margin_percent"] == Decimal("0.00")

    def test_ledger_summary(self, reports, customer, post):
        post(customer.id, "credit", 100)
        post(customer.id, "debit", 30)
        summary = reports.ledger_summary(customer.id)
        assert summary["net"] == Decimal("70.00")
        assert summary["entry_count"] == 2
