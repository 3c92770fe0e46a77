"""Entity storage contract: create/get round trip, partial update, idempotent delete."""

from datetime import datetime
from decimal import Decimal

import pytest

from meatmaster.common.exceptions import ValidationError
from meatmaster.models import UnitType
from meatmaster.services import company_settings_service as company
from meatmaster.services import customer_service, product_service


class TestProducts:
    def test_round_trip(self, db, product):
        loaded = product_service.get_product_by_id(db, product.id)
        assert loaded.name == "Beef Ribeye"
        assert loaded.unit_type == UnitType.Kg
        assert loaded.id.startswith("PRD-")

    def test_update_merges_fields(self, db, product):
        # Backdate the row so the refresh on update is visible
        product.updated_at = datetime(2024, 1, 1, 9, 0)
        db.commit()
        before = product_service.get_product_by_id(db, product.id).updated_at

        updated = product_service.update_product(db, product.id, name="Beef Striploin")
        assert updated.name == "Beef Striploin"
        assert updated.unit_type == UnitType.Kg
        assert updated.current_stock == Decimal("10")
        assert updated.updated_at > before

    def test_negative_stock_rejected(self, db, product):
        with pytest.raises(ValidationError):
            product_service.update_product(db, product.id, current_stock=-1)

    def test_search_is_case_insensitive(self, db, product):
        product_service.create_product(db, name="Chicken Breast", unit_type=UnitType.Kg)
        assert [p.name for p in product_service.search_products(db, "RIBEYE")] == ["Beef Ribeye"]

    def test_add_stock_and_mark_out(self, db, product):
        assert product_service.add_stock(db, product.id, "2.5").current_stock == Decimal("12.5")
        assert product_service.mark_out_of_stock(db, product.id).current_stock == Decimal("0")
        with pytest.raises(ValidationError):
            product_service.add_stock(db, product.id, 0)

    def test_receive_stock_merges_by_name_and_unit(self, db, product):
        merged, created = product_service.receive_stock(db, "beef ribeye ", UnitType.Kg, 5)
        assert created is False
        assert merged.id == product.id
        assert merged.current_stock == Decimal("15")

        other, created = product_service.receive_stock(db, "Beef Ribeye", UnitType.Carton, 3)
        assert created is True
        assert other.id != product.id

    def test_delete_is_idempotent(self, db, product):
        assert product_service.delete_product(db, product.id) is True
        assert product_service.delete_product(db, product.id) is False
        assert product_service.get_all_products(db)[1] == 0


class TestCustomers:
    def test_starts_with_zero_balance(self, customer):
        assert customer.balance == Decimal("0")
        assert customer.id.startswith("CUS-")

    def test_update_contact_details(self, db, customer):
        updated = customer_service.update_customer(db, customer.id, phone="0509999999")
        assert updated.phone == "0509999999"
        assert updated.name == "Al Noor Restaurant"

    def test_required_fields(self, db):
        with pytest.raises(ValidationError):
            customer_service.create_customer(db, name=" ", phone="1", address="x")

    def test_search_by_name_or_phone(self, db, customer):
        customer_service.create_customer(db, name="Gulf Catering", phone="0427777777", address="Al Quoz")
        assert [c.name for c in customer_service.search_customers(db, "noor")] == ["Al Noor Restaurant"]
        assert [c.name for c in customer_service.search_customers(db, "042777")] == ["Gulf Catering"]

    def test_missing_ids(self, db, customer):
        assert customer_service.get_customer_by_id(db, "CUS-MISSING") is None
        assert customer_service.update_customer(db, "CUS-MISSING", name="x") is None
        assert customer_service.delete_customer(db, "CUS-MISSING") is False
        assert customer_service.get_all_customers(db)[1] == 1


class TestCompanySettings:
    def test_set_is_an_upsert(self, db):
        assert company.get_company_settings(db) is None
        first = company.set_company_settings(db, company_name="MeatMaster Trading")
        second = company.set_company_settings(db, company_name="MeatMaster LLC", company_phone="04 123")
        assert first.id == second.id
        assert company.get_company_settings(db).company_name == "MeatMaster LLC"

    def test_update_requires_existing(self, db):
        assert company.update_company_settings(db, company_name="X") is None
        company.set_company_settings(db, company_name="MeatMaster", company_email="a@b.ae")
        updated = company.update_company_settings(db, company_phone="04 555")
        assert updated.company_phone == "04 555"
        assert updated.company_email == "a@b.ae"

    def test_clear(self, db):
        company.set_company_settings(db, company_name="MeatMaster")
        assert company.clear_company_settings(db) is True
        assert company.get_company_settings(db) is None
        assert company.clear_company_settings(db) is False
