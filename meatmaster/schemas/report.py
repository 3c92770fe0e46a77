from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional


class StatisticsResponse(BaseModel):
    total_products: int
    total_customers: int
    total_invoices: int
    total_revenue: Decimal


class TopProduct(BaseModel):
    name: str
    quantity: Decimal


class SalesSummaryResponse(BaseModel):
    period: str
    total_sales: int
    total_revenue: Decimal
    average_order: Decimal
    total_items: int
    top_product: Optional[TopProduct] = None


class TopCustomer(BaseModel):
    name: str
    total: Decimal
    count: int


class DebtorRow(BaseModel):
    customer_id: str
    name: str
    balance: Decimal


class ReceivablesResponse(BaseModel):
    unpaid_invoice_total: Decimal
    unpaid_invoice_count: int
    outstanding_balance_total: Decimal
    debtors: List[DebtorRow]


class StockSummaryResponse(BaseModel):
    total_products: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    low_stock_threshold: int


class CategoryTotal(BaseModel):
    category: str
    total: Decimal
    count: int


class ExpenseSummaryResponse(BaseModel):
    total: Decimal
    count: int
    today_total: Decimal
    today_count: int
    month_total: Decimal
    month_count: int
    average: Decimal
    by_category: List[CategoryTotal]


class ProfitSummaryResponse(BaseModel):
    revenue: Decimal
    expenses: Decimal
    net_profit: Decimal
    margin_percent: Decimal
