"""Integration tests for API endpoints"""

import pytest
import time
from datetime import datetime
from decimal import Decimal
from fastapi.testclient import TestClient


def create_bank(client: TestClient, **overrides) -> dict:
    body = {
        "name": "Test Bank",
        "credit_limit": "10000000",
        "category": "KTA",
        "billing_day": None,
        "due_day": 15,
        **overrides,
    }
    response = client.post("/v1/banks", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def create_transaction(client: TestClient, bank_id: int, **overrides) -> dict:
    body = {
        "bank_id": bank_id,
        "transaction_date": "2024-01-10T12:00:00",
        "description": "Laptop",
        "amount": "5000000",
        "is_installment": False,
        **overrides,
    }
    response = client.post("/v1/loan-transactions", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def create_payment(client: TestClient, bank_id: int, loan_transaction_id: int, **overrides) -> dict:
    body = {
        "bank_id": bank_id,
        "loan_transaction_id": loan_transaction_id,
        "payment_date": "2024-01-12T12:00:00",
        "amount": "1000000",
        **overrides,
    }
    response = client.post("/v1/payments", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    create_bank(client)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "debt_ledger_mutations_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    """Test X-Request-ID is echoed or generated"""
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"

    response = client.get("/health")
    assert response.headers["X-Request-ID"]


# Banks


def test_create_credit_card_bank(client: TestClient):
    """Test creating a credit card bank"""
    bank = create_bank(client, name="BCA Card", category="KARTU_KREDIT", billing_day=25, due_day=10)

    assert bank["id"] > 0
    assert bank["category"] == "KARTU_KREDIT"
    assert bank["billing_day"] == 25
    assert Decimal(bank["credit_limit"]) == Decimal("10000000")
    assert bank["created_at"] is not None


def test_create_credit_card_bank_without_billing_day(client: TestClient):
    """Test credit card bank without a billing day is rejected"""
    response = client.post(
        "/v1/banks",
        json={"name": "Card", "credit_limit": "1000", "category": "KARTU_KREDIT", "billing_day": None, "due_day": 5},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "InvalidBillingConfigError"


def test_create_bank_billing_day_for_other_category(client: TestClient):
    """Test billing day on a non credit card bank is rejected"""
    response = client.post(
        "/v1/banks",
        json={"name": "KTA", "credit_limit": "1000", "category": "KTA", "billing_day": 5, "due_day": 5},
    )
    assert response.status_code == 422


@pytest.mark.parametrize(
    "override",
    [{"credit_limit": "0"}, {"name": ""}, {"due_day": 32}, {"category": "MORTGAGE"}],
)
def test_create_bank_request_validation(client: TestClient, override: dict):
    """Test malformed bank bodies are rejected"""
    body = {"name": "Bank", "credit_limit": "1000", "category": "KTA", "due_day": 5, **override}
    assert client.post("/v1/banks", json=body).status_code == 422


def test_list_banks(client: TestClient):
    """Test listing banks"""
    create_bank(client, name="One")
    create_bank(client, name="Two", category="PAYLATER")

    response = client.get("/v1/banks")

    assert response.status_code == 200
    assert [b["name"] for b in response.json()] == ["One", "Two"]


def test_update_bank_partial(client: TestClient):
    """Test partial bank update"""
    bank = create_bank(client, category="KARTU_KREDIT", billing_day=20)

    response = client.patch(f"/v1/banks/{bank['id']}", json={"name": "Renamed"})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["billing_day"] == 20
    assert data["due_day"] == bank["due_day"]


def test_update_bank_switch_category_clears_billing_day(client: TestClient):
    """Test switching a credit card bank to another category"""
    bank = create_bank(client, category="KARTU_KREDIT", billing_day=20)

    response = client.patch(f"/v1/banks/{bank['id']}", json={"category": "KTA"})

    assert response.status_code == 200
    assert response.json()["billing_day"] is None


def test_update_bank_rejects_null_billing_day_on_credit_card(client: TestClient):
    """Test clearing a credit card billing day over HTTP"""
    bank = create_bank(client, category="KARTU_KREDIT", billing_day=20)

    response = client.patch(f"/v1/banks/{bank['id']}", json={"billing_day": None})

    assert response.status_code == 422
    assert client.get("/v1/banks").json()[0]["billing_day"] == 20


def test_update_bank_rejects_null_name(client: TestClient):
    """Test null for a non-nullable field is rejected"""
    bank = create_bank(client)
    assert client.patch(f"/v1/banks/{bank['id']}", json={"name": None}).status_code == 422


def test_update_bank_refreshes_updated_at(client: TestClient):
    """Test bank update moves updated_at forward and keeps created_at"""
    bank = create_bank(client)
    time.sleep(1.1)  # SQLite timestamps have one-second resolution

    response = client.patch(f"/v1/banks/{bank['id']}", json={"name": "Renamed"})

    assert response.status_code == 200
    data = response.json()
    assert data["created_at"] == bank["created_at"]
    assert datetime.fromisoformat(data["updated_at"]) > datetime.fromisoformat(bank["updated_at"])


def test_update_missing_bank(client: TestClient):
    """Test updating a missing bank"""
    assert client.patch("/v1/banks/999", json={"name": "X"}).status_code == 404


def test_delete_bank(client: TestClient):
    """Test deleting a bank"""
    bank = create_bank(client)

    response = client.delete(f"/v1/banks/{bank['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    # Second attempt: the bank is gone
    assert client.delete(f"/v1/banks/{bank['id']}").status_code == 404


def test_delete_bank_with_transactions_blocked(client: TestClient):
    """Test deleting a bank that has transactions"""
    bank = create_bank(client)
    create_transaction(client, bank["id"])

    response = client.delete(f"/v1/banks/{bank['id']}")

    assert response.status_code == 409
    assert "1 related loan transactions" in response.json()["detail"]["message"]


# Loan transactions


def test_create_transaction_within_limit(client: TestClient):
    """Test creating a loan transaction within the limit"""
    bank = create_bank(client, credit_limit="10000000")
    txn = create_transaction(client, bank["id"], amount="5000000")

    assert txn["bank_id"] == bank["id"]
    assert Decimal(txn["amount"]) == Decimal("5000000")
    assert txn["is_installment"] is False


def test_create_transaction_over_limit_writes_nothing(client: TestClient):
    """Test over-limit transaction is rejected and not stored"""
    bank = create_bank(client, credit_limit="10000000")
    create_transaction(client, bank["id"], amount="6000000")

    response = client.post(
        "/v1/loan-transactions",
        json={
            "bank_id": bank["id"],
            "transaction_date": "2024-01-11T00:00:00",
            "description": "Too much",
            "amount": "5000000",
            "is_installment": False,
        },
    )

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "LimitExceededError"
    assert len(client.get(f"/v1/loan-transactions?bank_id={bank['id']}").json()) == 1


def test_create_transaction_unknown_bank(client: TestClient):
    """Test creating a transaction for a missing bank"""
    response = client.post(
        "/v1/loan-transactions",
        json={"bank_id": 999, "transaction_date": "2024-01-10T00:00:00", "description": "X", "amount": "1"},
    )
    assert response.status_code == 404


def test_create_installment_before_billing_date(client: TestClient):
    """Test installment before the billing date is rejected"""
    bank = create_bank(client, category="KARTU_KREDIT", billing_day=15, due_day=5)

    response = client.post(
        "/v1/loan-transactions",
        json={
            "bank_id": bank["id"],
            "transaction_date": "2024-01-03T09:00:00",
            "description": "Phone",
            "amount": "1000",
            "is_installment": True,
        },
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "BeforeBillingDateError"

    # Same charge without installments is fine
    create_transaction(client, bank["id"], transaction_date="2024-01-03T09:00:00", amount="1000")


def test_list_transactions_newest_first(client: TestClient):
    """Test transactions list newest first and filter by bank"""
    bank = create_bank(client)
    other = create_bank(client, name="Other")
    create_transaction(client, bank["id"], transaction_date="2024-01-01T00:00:00", amount="1")
    create_transaction(client, bank["id"], transaction_date="2024-03-01T00:00:00", amount="3")
    create_transaction(client, other["id"], transaction_date="2024-02-01T00:00:00", amount="2")

    all_dates = [t["transaction_date"][:10] for t in client.get("/v1/loan-transactions").json()]
    assert all_dates == ["2024-03-01", "2024-02-01", "2024-01-01"]

    by_bank = client.get(f"/v1/loan-transactions?bank_id={bank['id']}").json()
    assert len(by_bank) == 2


def test_update_transaction(client: TestClient):
    """Test updating a loan transaction"""
    bank = create_bank(client, credit_limit="10000")
    txn = create_transaction(client, bank["id"], amount="6000")

    response = client.patch(f"/v1/loan-transactions/{txn['id']}", json={"amount": "9000", "description": "Edited"})

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["amount"]) == Decimal("9000")
    assert data["description"] == "Edited"
    assert data["is_installment"] is False

    response = client.patch(f"/v1/loan-transactions/{txn['id']}", json={"amount": "10001"})
    assert response.status_code == 422


def test_update_transaction_refreshes_updated_at(client: TestClient):
    """Test loan transaction update moves updated_at forward and keeps created_at"""
    bank = create_bank(client)
    txn = create_transaction(client, bank["id"])
    time.sleep(1.1)

    response = client.patch(f"/v1/loan-transactions/{txn['id']}", json={"description": "Edited"})

    assert response.status_code == 200
    data = response.json()
    assert data["created_at"] == txn["created_at"]
    assert datetime.fromisoformat(data["updated_at"]) > datetime.fromisoformat(txn["updated_at"])


def test_update_missing_transaction(client: TestClient):
    """Test updating a missing loan transaction"""
    assert client.patch("/v1/loan-transactions/999", json={"description": "X"}).status_code == 404


def test_delete_transaction_cascades_to_payments(client: TestClient):
    """Test deleting a transaction removes its payments"""
    bank = create_bank(client)
    txn = create_transaction(client, bank["id"])
    keep = create_transaction(client, bank["id"], amount="1000")
    create_payment(client, bank["id"], txn["id"])
    create_payment(client, bank["id"], txn["id"], amount="500")
    create_payment(client, bank["id"], keep["id"], amount="100")

    response = client.delete(f"/v1/loan-transactions/{txn['id']}")
    assert response.status_code == 200

    assert client.get(f"/v1/payments?loan_transaction_id={txn['id']}").json() == []
    assert len(client.get("/v1/payments").json()) == 1
    assert client.delete(f"/v1/loan-transactions/{txn['id']}").status_code == 404


# Payments


def test_create_payment(client: TestClient):
    """Test creating a payment"""
    bank = create_bank(client)
    txn = create_transaction(client, bank["id"])

    payment = create_payment(client, bank["id"], txn["id"], amount="1500000.50")

    assert payment["loan_transaction_id"] == txn["id"]
    assert Decimal(payment["amount"]) == Decimal("1500000.50")


def test_create_payment_mismatched_bank(client: TestClient):
    """Test payment toward another bank's transaction is rejected"""
    bank_a = create_bank(client, name="A")
    bank_b = create_bank(client, name="B")
    txn = create_transaction(client, bank_a["id"])

    response = client.post(
        "/v1/payments",
        json={
            "bank_id": bank_b["id"],
            "loan_transaction_id": txn["id"],
            "payment_date": "2024-01-12T00:00:00",
            "amount": "100",
        },
    )

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "MismatchedOwnerError"


def test_create_payment_unknown_transaction(client: TestClient):
    """Test payment toward a missing transaction"""
    bank = create_bank(client)
    response = client.post(
        "/v1/payments",
        json={"bank_id": bank["id"], "loan_transaction_id": 999, "payment_date": "2024-01-12T00:00:00", "amount": "1"},
    )
    assert response.status_code == 404


def test_list_payments_filters(client: TestClient):
    """Test payment list filters"""
    bank_a = create_bank(client, name="A")
    bank_b = create_bank(client, name="B")
    txn_a = create_transaction(client, bank_a["id"])
    txn_b = create_transaction(client, bank_b["id"])
    create_payment(client, bank_a["id"], txn_a["id"])
    create_payment(client, bank_b["id"], txn_b["id"])

    assert len(client.get("/v1/payments").json()) == 2
    assert len(client.get(f"/v1/payments?bank_id={bank_a['id']}").json()) == 1
    assert len(client.get(f"/v1/payments?loan_transaction_id={txn_b['id']}").json()) == 1


def test_update_payment(client: TestClient):
    """Test updating a payment"""
    bank = create_bank(client)
    txn = create_transaction(client, bank["id"])
    payment = create_payment(client, bank["id"], txn["id"])

    response = client.patch(f"/v1/payments/{payment['id']}", json={"amount": "2500000"})

    assert response.status_code == 200
    assert Decimal(response.json()["amount"]) == Decimal("2500000")

    other = create_bank(client, name="Other")
    response = client.patch(f"/v1/payments/{payment['id']}", json={"bank_id": other["id"]})
    assert response.status_code == 409


def test_delete_payment(client: TestClient):
    """Test deleting a payment, present and absent"""
    bank = create_bank(client)
    txn = create_transaction(client, bank["id"])
    payment = create_payment(client, bank["id"], txn["id"])

    assert client.delete(f"/v1/payments/{payment['id']}").json() == {"success": True}
    assert client.delete(f"/v1/payments/{payment['id']}").json() == {"success": False}


# Reports


def test_monthly_report(client: TestClient):
    """Test monthly report endpoint"""
    bank = create_bank(client)
    create_transaction(client, bank["id"], amount="1500.00", transaction_date="2024-01-05T10:00:00")
    create_transaction(client, bank["id"], amount="2500.00", transaction_date="2024-01-20T10:00:00")
    create_transaction(client, bank["id"], amount="999.00", transaction_date="2024-02-01T00:00:00")

    response = client.get("/v1/reports/monthly?year=2024&month=1")

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["total_loans"]) == Decimal("4000")
    assert Decimal(data["total_payments"]) == 0
    assert Decimal(data["net_debt"]) == Decimal("4000")
    assert data["transaction_count"] == 2
    assert data["payment_count"] == 0


@pytest.mark.parametrize("query", ["year=1999&month=1", "year=2024&month=13", "year=2024"])
def test_monthly_report_validation(client: TestClient, query: str):
    """Test monthly report query validation"""
    assert client.get(f"/v1/reports/monthly?{query}").status_code == 422


def test_category_reports(client: TestClient):
    """Test category report endpoints"""
    bank = create_bank(client, category="PAYLATER")
    txn = create_transaction(client, bank["id"], amount="3000")
    create_payment(client, bank["id"], txn["id"], amount="1000")

    all_reports = client.get("/v1/reports/categories").json()
    assert [r["category"] for r in all_reports] == ["KARTU_KREDIT", "PAYLATER", "KTA", "KUR"]

    data = client.get("/v1/reports/categories/PAYLATER").json()
    assert Decimal(data["outstanding_amount"]) == Decimal("2000")
    assert data["transaction_count"] == 1
    assert data["payment_count"] == 1

    empty = client.get("/v1/reports/categories/KUR").json()
    assert Decimal(empty["total_loans"]) == 0

    assert client.get("/v1/reports/categories/MORTGAGE").status_code == 422


def test_due_date_reports(client: TestClient):
    """Test due date report endpoints"""
    # Clock is frozen at 2024-01-15 10:00
    soon = create_bank(client, name="Soon", due_day=18)
    late = create_bank(client, name="Late", due_day=5)
    paid = create_bank(client, name="Paid", due_day=17)
    for bank in (soon, late, paid):
        create_transaction(client, bank["id"], amount="1000")
    paid_txn = client.get(f"/v1/loan-transactions?bank_id={paid['id']}").json()[0]
    create_payment(client, paid["id"], paid_txn["id"], amount="1000")

    rows = client.get("/v1/reports/due-dates").json()
    assert len(rows) == 3
    by_name = {r["bank_name"]: r for r in rows}
    assert by_name["Soon"]["days_until_due"] == 3
    assert by_name["Late"]["days_until_due"] == -10

    upcoming = client.get("/v1/reports/due-dates/upcoming").json()
    assert [r["bank_name"] for r in upcoming] == ["Soon"]

    assert client.get("/v1/reports/due-dates/upcoming?days=2").json() == []
    assert client.get("/v1/reports/due-dates/upcoming?days=0").status_code == 422

    overdue = client.get("/v1/reports/due-dates/overdue").json()
    assert [r["bank_name"] for r in overdue] == ["Late"]
