"""Integration tests for API endpoints"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from sms_gateway.domain.engine import TransactionEngine
from sms_gateway.infrastructure.clients.notifier import ReviewNotifier
from sms_gateway.infrastructure.database.repositories import TransactionRepository
from tests.sms_samples import (
    BALANCE_ONLY_SMS,
    HDFC_AMAZON_SMS,
    ICICI_UPI_SMS,
    OTP_SMS,
)


def _post_message(client: TestClient, body: str, sender: str, received_at: datetime):
    return client.post(
        "/v1/messages",
        json={"sender": sender, "body": body, "received_at": received_at.isoformat()},
    )


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, received_at):
    """Test Prometheus metrics endpoint"""
    _post_message(client, OTP_SMS, "HDFCBK", received_at)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "sms_classification_total" in response.text


def test_request_id_echoed(client: TestClient):
    """Test the caller's request ID is returned unchanged"""
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_ingest_automatic_mode(client: TestClient, automatic_mode, received_at):
    """Test POST /v1/messages stores an accepted message as recorded"""
    response = _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)

    assert response.status_code == 200
    data = response.json()
    assert data["verdict"] == "accepted"
    assert data["status"] == "recorded"
    assert data["transaction_id"] is not None
    assert data["transaction"]["counterparty"] == "Amazon Retail"

    listing = client.get("/v1/transactions").json()["transactions"]
    assert len(listing) == 1
    assert Decimal(str(listing[0]["amount"])) == Decimal("-2599.00")
    assert listing[0]["category"] == "Shopping"
    assert listing[0]["direction"] == "debit"


def test_ingest_rejection_not_stored(client: TestClient, automatic_mode, received_at):
    """Test rejected messages answer 200 with the verdict and store nothing"""
    for body, verdict in [(OTP_SMS, "rejected_otp"), (BALANCE_ONLY_SMS, "rejected_balance_only")]:
        response = _post_message(client, body, "VM-HDFCBK", received_at)
        assert response.status_code == 200
        assert response.json()["verdict"] == verdict
        assert response.json()["transaction_id"] is None

    assert client.get("/v1/transactions").json()["transactions"] == []


def test_repeat_suppressed_by_receive_cache(client: TestClient, automatic_mode, received_at):
    """Test the same SMS delivered twice is stored once"""
    _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)
    response = _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at + timedelta(seconds=5))

    assert response.json()["verdict"] == "rejected_duplicate"
    assert response.json()["reason"] == "receive_cache"
    assert len(client.get("/v1/transactions").json()["transactions"]) == 1


def test_repeat_suppressed_by_stored_records(
    client: TestClient,
    automatic_mode,
    transaction_engine: TransactionEngine,
    received_at,
):
    """Test the persisted check still catches a repeat once the cache is gone"""
    _post_message(client, ICICI_UPI_SMS, "ICICIB", received_at)
    transaction_engine.duplicate_cache.clear()

    response = _post_message(client, ICICI_UPI_SMS, "ICICIB", received_at + timedelta(seconds=10))

    assert response.json()["verdict"] == "rejected_duplicate"
    assert response.json()["reason"] == "persisted"
    assert len(client.get("/v1/transactions").json()["transactions"]) == 1


def test_retry_accepted_after_storage_failure(client: TestClient, automatic_mode, received_at):
    """Test a message whose storage failed is not rejected as a duplicate when resent"""
    with patch.object(TransactionRepository, "create_transaction", side_effect=RuntimeError("db down")):
        failed = _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)
    assert failed.status_code == 500

    retry = _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at + timedelta(seconds=5))

    assert retry.status_code == 200
    assert retry.json()["verdict"] == "accepted"
    assert len(client.get("/v1/transactions").json()["transactions"]) == 1


def test_preview_does_not_store(client: TestClient, automatic_mode, received_at):
    """Test POST /v1/messages/preview runs extraction only"""
    for _ in range(2):
        response = client.post("/v1/messages/preview", json={"sender": "ICICIB", "body": ICICI_UPI_SMS})
        assert response.json()["verdict"] == "accepted"
        assert response.json()["transaction"]["reference"] == "ICIC333456"

    assert client.get("/v1/transactions").json()["transactions"] == []


@patch.object(ReviewNotifier, "send_pending_review", new_callable=AsyncMock)
def test_manual_mode_review_flow(mock_send: AsyncMock, client: TestClient, manual_mode, received_at):
    """Test manual mode queues for review, notifies and then approves with edits"""
    response = _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)
    data = response.json()

    assert data["status"] == "pending_review"
    mock_send.assert_awaited_once()
    assert mock_send.await_args.args[0]["transaction_id"] == data["transaction_id"]

    # Pending rows are not part of the ledger yet
    assert client.get("/v1/transactions").json()["transactions"] == []
    pending = client.get("/v1/transactions/pending").json()["transactions"]
    assert [p["transaction_id"] for p in pending] == [data["transaction_id"]]

    approved = client.post(f"/v1/transactions/{data['transaction_id']}/approve", json={"category": "food"})
    assert approved.status_code == 200
    assert approved.json()["status"] == "recorded"
    assert approved.json()["category"] == "Food"
    assert approved.json()["sms_sender"] == "VM-HDFCBK"

    again = client.post(f"/v1/transactions/{data['transaction_id']}/approve")
    assert again.status_code == 409


@patch.object(ReviewNotifier, "send_pending_review", new_callable=AsyncMock)
def test_ignore_pending(mock_send: AsyncMock, client: TestClient, manual_mode, received_at):
    """Test ignored transactions leave the queue and never reach the ledger"""
    transaction_id = _post_message(client, ICICI_UPI_SMS, "ICICIB", received_at).json()["transaction_id"]

    response = client.post(f"/v1/transactions/{transaction_id}/ignore")

    assert response.status_code == 200
    assert response.json()["status"] == "ignored"
    assert client.get("/v1/transactions/pending").json()["transactions"] == []
    assert client.get("/v1/transactions").json()["transactions"] == []


def test_review_unknown_transaction(client: TestClient):
    """Test 404 for a missing transaction and 400 for a malformed ID"""
    assert client.post(f"/v1/transactions/{uuid.uuid4()}/approve").status_code == 404
    assert client.post(f"/v1/transactions/{uuid.uuid4()}/ignore").status_code == 404
    assert client.post("/v1/transactions/not-a-uuid/approve").status_code == 400


def test_manual_entry(client: TestClient):
    """Test POST /v1/transactions stores a user-entered transaction"""
    response = client.post(
        "/v1/transactions",
        json={"amount": "320.50", "counterparty": "Uber", "description": "Airport ride"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["sms_sender"] == "Manual Entry"
    assert data["status"] == "recorded"
    assert data["category"] == "Transport"
    assert Decimal(str(data["amount"])) == Decimal("-320.50")


def test_manual_entry_rejects_non_positive_amount(client: TestClient):
    response = client.post("/v1/transactions", json={"amount": "0", "counterparty": "Uber"})
    assert response.status_code == 422


def test_search(client: TestClient, automatic_mode, received_at):
    """Test GET /v1/transactions/search matches counterparty substrings"""
    _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)
    client.post("/v1/transactions", json={"amount": "99", "counterparty": "Local Store", "description": "milk"})

    found = client.get("/v1/transactions/search", params={"q": "AMAZON"}).json()["transactions"]
    assert [t["counterparty"] for t in found] == ["Amazon Retail"]

    by_description = client.get("/v1/transactions/search", params={"q": "milk"}).json()["transactions"]
    assert [t["counterparty"] for t in by_description] == ["Local Store"]


def test_categories(client: TestClient, automatic_mode, received_at):
    """Test GET /v1/categories lists the taxonomy and the categories in use"""
    _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)

    data = client.get("/v1/categories").json()

    assert len(data["taxonomy"]) == 7
    assert data["taxonomy"][-1]["name"] == "Other"
    assert data["in_use"] == ["Shopping"]


def test_monthly_summary(client: TestClient, automatic_mode, received_at):
    """Test GET /v1/summary/monthly adds credits to the base income"""
    _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)
    client.post(
        "/v1/transactions",
        json={
            "amount": "1000",
            "direction": "credit",
            "counterparty": "Freelance Client",
            "observed_at": "2024-02-20T09:00:00",
        },
    )

    response = client.get("/v1/summary/monthly", params={"year": 2024, "month": 2})

    assert response.status_code == 200
    data = response.json()
    assert Decimal(str(data["total_spending"])) == Decimal("2599.00")
    assert Decimal(str(data["credited_income"])) == Decimal("1000.00")
    assert Decimal(str(data["total_income"])) == Decimal("46000.00")
    assert [t["counterparty"] for t in data["income_transactions"]] == ["Freelance Client"]

    empty = client.get("/v1/summary/monthly", params={"year": 2024, "month": 3}).json()
    assert Decimal(str(empty["total_spending"])) == Decimal("0.00")


def test_sms_body_cleanup(client: TestClient, automatic_mode, received_at):
    """Test POST /v1/maintenance/cleanup clears old SMS text but keeps the transaction"""
    _post_message(client, HDFC_AMAZON_SMS, "VM-HDFCBK", received_at)

    first = client.post("/v1/maintenance/cleanup").json()
    second = client.post("/v1/maintenance/cleanup").json()

    assert first["eligible"] == 1
    assert first["cleared"] == 1
    assert second["eligible"] == 0
    assert len(client.get("/v1/transactions").json()["transactions"]) == 1
