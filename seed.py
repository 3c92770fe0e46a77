from meatmaster.core.database import SessionLocal, init_db
from meatmaster.models import (
    CompanySettings,
    Customer,
    EXPENSE_CATEGORIES,
    Expense,
    Invoice,
    InvoiceItem,
    LedgerEntry,
    LedgerEntryType,
    PaymentMethod,
    PaymentRecord,
    Product,
    UnitType,
    UserRole,
)
from meatmaster.services.auth_service import AuthService
from meatmaster.services.company_settings_service import set_company_settings
from meatmaster.services.customer_service import create_customer
from meatmaster.services.expense_service import create_expense
from meatmaster.services.invoice_service import InvoiceService
from meatmaster.services.ledger_service import LedgerService
from meatmaster.services.payment_service import PaymentService
from meatmaster.services.product_service import create_product
from meatmaster.services.user_service import get_user_by_email

from faker import Faker
import random

CUTS = ["Beef Ribeye", "Lamb Shoulder", "Chicken Breast", "Mutton Leg", "Beef Mince",
        "Veal Chops", "Chicken Wings", "Lamb Chops", "Goat Leg", "Beef Brisket"]

fake = Faker()
init_db()
db = SessionLocal()

try:
    print("🔄 Clearing existing data...")
    for model in (PaymentRecord, InvoiceItem, Invoice, LedgerEntry, Customer, Product, Expense, CompanySettings):
        db.query(model).delete()
    db.commit()
    print("✅ Data cleared.")

    if not get_user_by_email(db, "admin@meatmaster.ae"):
        AuthService(db).signup("admin@meatmaster.ae", "admin123", name="Admin", role=UserRole.admin)
        print("✅ Admin user: admin@meatmaster.ae / admin123")

    set_company_settings(
        db,
        company_name="MeatMaster Trading LLC",
        company_address=fake.address().replace('\n', ', '),
        company_phone=fake.phone_number(),
        company_email="sales@meatmaster.ae",
    )

    print("🔄 Creating products...")
    products = [
        create_product(db, name=name, unit_type=random.choice(list(UnitType)),
                       current_stock=random.randint(0, 120))
        for name in CUTS
    ]
    print(f"✅ Seeded {len(products)} products")

    print("🔄 Creating customers...")
    customers = [
        create_customer(
            db,
            name=fake.company(),
            phone=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            address=fake.address().replace('\n', ', '),
        )
        for _ in range(random.randint(10, 15))
    ]
    print(f"✅ Seeded {len(customers)} customers")

    print("🔄 Creating invoices, ledger entries and payments...")
    invoices = InvoiceService(db)
    ledger = LedgerService(db)
    payments = PaymentService(db)
    paid = 0
    for _ in range(30):
        customer = random.choice(customers)
        items = [
            {"product_id": p.id, "quantity": random.randint(1, 15), "price": round(random.uniform(15, 90), 2)}
            for p in random.sample(products, random.randint(1, 4))
        ]
        result = invoices.create_invoice(company_name=customer.name, items=items, customer_id=customer.id)
        ledger.create_entry(customer.id, LedgerEntryType.credit, result.invoice.total,
                            description=f"Invoice {result.invoice.invoice_number}",
                            invoice_id=result.invoice.id)
        for warning in result.warnings:
            print(f"⚠️ {warning}")

        if random.choice([True, False]):
            method = random.choice(list(PaymentMethod))
            payments.record_payment(result.invoice.id, payment_method=method,
                                    transaction_id=fake.bothify("TX-########") if method != PaymentMethod.cash else None)
            paid += 1
            print(f"💰 Paid invoice {result.invoice.invoice_number} via {method.value}")

    print(f"✅ Seeded 30 invoices ({paid} paid)")

    print("🔄 Creating expenses...")
    for _ in range(25):
        create_expense(
            db,
            category=random.choice(EXPENSE_CATEGORIES),
            description=fake.sentence(nb_words=4),
            amount=round(random.uniform(20, 1500), 2),
            expense_date=fake.date_between(start_date="-60d", end_date="today"),
        )
    print("✅ Seeded 25 expenses")
    print("🎉 All data seeded successfully!")

except Exception as e:
    db.rollback()
    print(f"❌ SEEDING FAILED: {e}")
finally:
    db.close()
