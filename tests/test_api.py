"""HTTP layer: routing, auth, error envelopes and the main workflows end to end."""

API = "/api/v1"


def _create_customer(client, headers, name="Al Noor Restaurant"):
    response = client.post(f"{API}/customers", json={"name": name, "phone": "0501234567", "address": "Deira"},
                           headers=headers)
    assert response.status_code == 201
    return response.json()


def _create_product(client, headers, stock=10):
    response = client.post(f"{API}/products", json={"name": "Beef Ribeye", "unit_type": "Kg", "current_stock": stock},
                           headers=headers)
    assert response.status_code == 201
    return response.json()


class TestAuth:
    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_signup_login_me(self, client):
        signup = client.post(f"{API}/auth/signup", json={"email": "khalid@meatmaster.ae", "password": "secret123"})
        assert signup.status_code == 201
        assert signup.json()["name"] == "khalid"

        login = client.post(f"{API}/auth/login", json={"email": "khalid@meatmaster.ae", "password": "secret123"})
        assert login.status_code == 200
        token = login.json()["access_token"]

        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["email"] == "khalid@meatmaster.ae"

    def test_duplicate_signup(self, client):
        payload = {"email": "khalid@meatmaster.ae", "password": "secret123"}
        client.post(f"{API}/auth/signup", json=payload)
        response = client.post(f"{API}/auth/signup", json=payload)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already exists", "status_code": 400}

    def test_bad_credentials(self, client):
        response = client.post(f"{API}/auth/login", json={"email": "ghost@meatmaster.ae", "password": "whatever"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_requires_token(self, client):
        assert client.get(f"{API}/customers").status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.get(f"{API}/customers", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_staff_cannot_manage_users(self, client, staff_headers):
        assert client.get(f"{API}/users", headers=staff_headers).status_code == 403

    def test_admin_creates_staff(self, client, admin_headers):
        response = client.post(f"{API}/users", json={"email": "sara@meatmaster.ae", "name": "Sara",
                                                     "password": "secret123"}, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["role"] == "staff"
        assert response.json()["user_id"].startswith("STF-")


class TestCustomerLedgerApi:
    def test_balance_follows_ledger(self, client, admin_headers):
        customer = _create_customer(client, admin_headers)
        url = f"{API}/customers/{customer['id']}"

        credit = client.post(f"{url}/ledger", json={"type": "credit", "amount": "50", "description": "Sale"},
                             headers=admin_headers)
        assert credit.status_code == 201
        entry_id = credit.json()["id"]

        client.put(f"{API}/ledger/{entry_id}", json={"type": "debit", "amount": "20"}, headers=admin_headers)
        assert client.get(url, headers=admin_headers).json()["balance"] in ("-20.00", "-20")

        check = client.get(f"{url}/balance-check", headers=admin_headers).json()
        assert check["consistent"] is True

        assert client.delete(f"{API}/ledger/{entry_id}", headers=admin_headers).status_code == 204
        assert client.delete(f"{API}/ledger/{entry_id}", headers=admin_headers).status_code == 404

    def test_balance_not_accepted_on_create(self, client, admin_headers):
        response = client.post(f"{API}/customers", json={"name": "X", "phone": "1", "address": "Y", "balance": 500},
                               headers=admin_headers)
        assert response.status_code == 201
        assert float(response.json()["balance"]) == 0

    def test_statement(self, client, admin_headers):
        customer = _create_customer(client, admin_headers)
        product = _create_product(client, admin_headers, stock=10)
        url = f"{API}/customers/{customer['id']}"

        invoice_ids = []
        for quantity in (2, 1):
            created = client.post(f"{API}/invoices", json={
                "customer_id": customer["id"],
                "company_name": "Al Noor Restaurant",
                "items": [{"product_id": product["id"], "quantity": quantity, "price": 50}],
                "record_credit": True,
            }, headers=admin_headers)
            assert created.status_code == 201
            invoice_ids.append(created.json()["invoice"]["id"])

        paid = client.post(f"{API}/invoices/{invoice_ids[0]}/payments", json={"amount": 100},
                           headers=admin_headers)
        assert paid.status_code == 201
        assert client.get(f"{API}/invoices/{invoice_ids[0]}", headers=admin_headers).json()["status"] == "paid"

        statement = client.get(f"{url}/statement", headers=admin_headers).json()
        assert [float(line["running_balance"]) for line in statement["lines"]] == [100, 150, 50]
        assert float(statement["balance"]) == 50
        assert float(client.get(url, headers=admin_headers).json()["balance"]) == 50

    def test_rejects_non_positive_amount(self, client, admin_headers):
        customer = _create_customer(client, admin_headers)
        response = client.post(f"{API}/customers/{customer['id']}/ledger",
                               json={"type": "credit", "amount": 0, "description": "x"}, headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_missing_customer(self, client, admin_headers):
        response = client.get(f"{API}/customers/CUS-MISSING", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"


class TestInvoiceApi:
    def test_invoice_payment_cycle(self, client, admin_headers):
        customer = _create_customer(client, admin_headers)
        product = _create_product(client, admin_headers, stock=10)

        created = client.post(f"{API}/invoices", json={
            "customer_id": customer["id"],
            "company_name": "Al Noor Restaurant",
            "items": [{"product_id": product["id"], "quantity": 4, "price": "25.00"}],
        }, headers=admin_headers)
        assert created.status_code == 201
        body = created.json()
        assert body["warnings"] == []
        assert body["invoice"]["status"] == "sent"
        invoice_id = body["invoice"]["id"]

        stock = client.get(f"{API}/products/{product['id']}", headers=admin_headers).json()["current_stock"]
        assert float(stock) == 6

        paid = client.post(f"{API}/invoices/{invoice_id}/payments", json={"payment_method": "cash"},
                           headers=admin_headers)
        assert paid.status_code == 201
        assert float(paid.json()["amount"]) == 100
        assert client.get(f"{API}/invoices/{invoice_id}", headers=admin_headers).json()["status"] == "paid"

        ledger = client.get(f"{API}/customers/{customer['id']}/ledger", headers=admin_headers).json()
        assert ledger["total"] == 1
        assert ledger["entries"][0]["description"] == "Payment received via cash"

        payment_id = paid.json()["id"]
        assert client.delete(f"{API}/payments/{payment_id}", headers=admin_headers).status_code == 204
        assert client.get(f"{API}/invoices/{invoice_id}", headers=admin_headers).json()["status"] == "sent"

    def test_insufficient_stock_is_a_warning(self, client, admin_headers):
        product = _create_product(client, admin_headers, stock=6)
        created = client.post(f"{API}/invoices", json={
            "company_name": "Gulf Catering",
            "items": [{"product_id": product["id"], "quantity": 20, "price": 10}],
        }, headers=admin_headers)
        assert created.status_code == 201
        assert len(created.json()["warnings"]) == 1
        assert created.json()["deductions"][0]["deducted"] is False

        stock = client.get(f"{API}/products/{product['id']}", headers=admin_headers).json()["current_stock"]
        assert float(stock) == 6

    def test_payment_for_missing_invoice(self, client, admin_headers):
        response = client.post(f"{API}/invoices/SINV-MISSING/payments", json={}, headers=admin_headers)
        assert response.status_code == 404

    def test_empty_items_rejected(self, client, admin_headers):
        response = client.post(f"{API}/invoices", json={"company_name": "X", "items": []}, headers=admin_headers)
        assert response.status_code == 422


class TestReportsApi:
    def test_reports_respond(self, client, admin_headers):
        for path in ("statistics", "sales?period=week", "top-customers", "receivables", "stock", "expenses", "profit"):
            assert client.get(f"{API}/reports/{path}", headers=admin_headers).status_code == 200

    def test_unknown_period(self, client, admin_headers):
        assert client.get(f"{API}/reports/sales?period=decade", headers=admin_headers).status_code == 422

    def test_expense_endpoints(self, client, admin_headers):
        created = client.post(f"{API}/expenses", json={"category": "Rent", "description": "Cold store",
                                                       "amount": "1200"}, headers=admin_headers)
        assert created.status_code == 201
        today = client.get(f"{API}/expenses/today", headers=admin_headers).json()
        assert today["total"] == 1
        assert "Rent" in client.get(f"{API}/expenses/categories", headers=admin_headers).json()

    def test_company_settings_admin_only(self, client, admin_headers, staff_headers):
        payload = {"company_name": "MeatMaster Trading"}
        assert client.put(f"{API}/company", json=payload, headers=staff_headers).status_code == 403
        assert client.put(f"{API}/company", json=payload, headers=admin_headers).status_code == 200
        assert client.get(f"{API}/company", headers=staff_headers).json()["company_name"] == "MeatMaster Trading"
