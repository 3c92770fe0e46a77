# meatmaster/models/__init__.py
from .product import Product, UnitType
from .customer import Customer
from .ledger import LedgerEntry, LedgerEntryType
from .invoice import Invoice, InvoiceItem, InvoiceStatus
from .payment import PaymentRecord, PaymentMethod
from .expense import Expense, EXPENSE_CATEGORIES
from .user import User, UserRole
from .company_settings import CompanySettings
