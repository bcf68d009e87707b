"""Integration tests for API endpoints"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from tuition_gateway.api.dependencies import get_fee_policy
from tuition_gateway.domain.exceptions import NotificationDeliveryError
from tuition_gateway.domain.models import FeePolicy
from tuition_gateway.infrastructure.database.models import PaymentReminderRecord


@pytest.fixture
def debt_payload():
    """Overdue-pending, paid and exempt-overdue debts for the late-fee endpoints"""
    base = {"student_id": 7, "concept_id": 3, "amount": 4000, "due_date": "2025-04-15", "status": "pending"}
    return [
        {**base, "id": 1, "concept": {"name": "Colegiatura abril"}},
        {**base, "id": 2, "status": "paid"},
        {**base, "id": 3, "concept": {"name": "Seguro", "fee_exempt": True}},
    ]


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "tuition_surcharges_applied_total" in response.text


def test_request_id_is_propagated(client: TestClient):
    """Test caller-supplied request IDs are echoed back"""
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_get_policy(client: TestClient):
    """Test default policy is 10%, enabled"""
    response = client.get("/v1/late-fees/policy")

    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is True
    assert Decimal(data["surcharge_percent"]) == Decimal("10")
    assert data["decimal_places"] == 2


def test_enrich_endpoint(client: TestClient, debt_payload):
    """Test POST /v1/late-fees/enrich annotates each debt in order"""
    response = client.post(
        "/v1/late-fees/enrich",
        json={"debts": debt_payload, "reference_time": "2025-04-20T00:00:00"},
    )

    assert response.status_code == 200
    debts = response.json()["debts"]
    assert [d["id"] for d in debts] == [1, 2, 3]

    overdue, paid, exempt = debts
    assert overdue["is_overdue"] is True
    assert overdue["has_surcharge"] is True
    assert Decimal(overdue["surcharge_amount"]) == Decimal("400.00")
    assert Decimal(overdue["total_with_surcharge"]) == Decimal("4400.00")
    assert overdue["concept"]["name"] == "Colegiatura abril"

    assert Decimal(paid["surcharge_amount"]) == 0
    assert Decimal(paid["total_with_surcharge"]) == Decimal("4000.00")

    assert exempt["is_overdue"] is True
    assert exempt["has_surcharge"] is False


def test_enrich_uses_clock_when_reference_time_missing(client: TestClient, debt_payload):
    """Test the injected clock (2025-04-20) is used by default"""
    response = client.post("/v1/late-fees/enrich", json={"debts": debt_payload[:1]})

    assert response.status_code == 200
    assert response.json()["debts"][0]["is_overdue"] is True


def test_enrich_before_due_date(client: TestClient, debt_payload):
    """Test nothing is overdue on 2025-04-10"""
    response = client.post(
        "/v1/late-fees/enrich",
        json={"debts": debt_payload, "reference_time": "2025-04-10T00:00:00"},
    )

    assert all(d["is_overdue"] is False for d in response.json()["debts"])
    assert all(Decimal(d["surcharge_amount"]) == 0 for d in response.json()["debts"])


def test_summary_endpoint(client: TestClient, debt_payload):
    """Test POST /v1/late-fees/summary totals"""
    response = client.post(
        "/v1/late-fees/summary",
        json={"debts": debt_payload, "reference_time": "2025-04-20T00:00:00"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["count_with_surcharge"] == 1
    assert Decimal(data["total_original"]) == Decimal("12000")
    assert Decimal(data["total_surcharges"]) == Decimal("400.00")
    assert Decimal(data["total_final"]) == Decimal("12400.00")


def test_summary_endpoint_empty(client: TestClient):
    """Test empty batch is all zeros"""
    response = client.post("/v1/late-fees/summary", json={"debts": []})

    data = response.json()
    assert Decimal(data["total_final"]) == 0
    assert data["count_with_surcharge"] == 0


def test_disabled_policy_override(client: TestClient, debt_payload):
    """Test policy comes from the dependency, not a global"""
    client.app.dependency_overrides[get_fee_policy] = lambda: FeePolicy(enabled=False)

    response = client.post("/v1/late-fees/summary", json={"debts": debt_payload})

    assert Decimal(response.json()["total_surcharges"]) == 0


@pytest.mark.parametrize(
    "field,value",
    [("amount", -1), ("amount", "NaN"), ("due_date", "not-a-date"), ("status", "")],
)
def test_enrich_rejects_malformed_debts(client: TestClient, debt_payload, field, value):
    """Test invalid input is rejected at the boundary with 422"""
    bad = {**debt_payload[0], field: value}
    response = client.post("/v1/late-fees/enrich", json={"debts": [bad]})
    assert response.status_code == 422


def test_student_debts(client: TestClient, seeded_student: int):
    """Test GET /v1/students/{student_id}/debts reads and enriches stored debts"""
    response = client.get(f"/v1/students/{seeded_student}/debts")

    assert response.status_code == 200
    data = response.json()
    assert data["student_id"] == seeded_student
    # Oldest due date first
    assert [d["due_date"][:10] for d in data["debts"]] == ["2025-03-01", "2025-04-01", "2025-04-15", "2025-04-22"]

    by_due = {d["due_date"][:10]: d for d in data["debts"]}
    assert Decimal(by_due["2025-04-15"]["surcharge_amount"]) == Decimal("400.00")
    assert by_due["2025-04-01"]["concept"]["fee_exempt"] is True
    assert by_due["2025-04-01"]["has_surcharge"] is False

    assert data["summary"]["count_with_surcharge"] == 1
    assert Decimal(data["summary"]["total_final"]) == Decimal("12100.00")
    assert data["total_final_display"] == "$12,100.00"


def test_student_debts_unknown_student(client: TestClient, db):
    """Test a student without debts gets an empty list"""
    response = client.get("/v1/students/999/debts")

    assert response.status_code == 200
    assert response.json()["debts"] == []
    assert Decimal(response.json()["summary"]["total_final"]) == 0


def test_account_status(client: TestClient, seeded_student: int):
    """Test GET /v1/students/{student_id}/account"""
    response = client.get(f"/v1/students/{seeded_student}/account")

    assert response.status_code == 200
    data = response.json()
    assert data["risk_state"] == "red"
    assert data["payment_risk"] == "yellow"
    assert data["overdue_count"] == 2
    assert Decimal(data["total_owed"]) == Decimal("9200")
    assert data["total_owed_display"] == "$9,200.00"
    assert Decimal(data["summary"]["total_surcharges"]) == Decimal("400.00")


@patch("tuition_gateway.infrastructure.clients.notifications.NotificationClient.send_reminder", new_callable=AsyncMock)
def test_reminders_queued_and_delivered(mock_send: AsyncMock, client: TestClient, seeded_student: int):
    """Test POST /v1/students/{student_id}/reminders queues overdue and soon-due debts"""
    response = client.post(f"/v1/students/{seeded_student}/reminders")

    assert response.status_code == 200
    data = response.json()
    queued = data["queued"]
    assert len(queued) == 3
    assert [r["urgent"] for r in queued] == [True, True, False]
    assert data["skipped_debt_ids"] == []

    assert mock_send.await_count == 3
    first_payload = mock_send.await_args_list[0].args[0]
    assert first_payload["event"] == "PAYMENT_REMINDER"
    assert first_payload["concept_name"] == "Seguro escolar"


@patch("tuition_gateway.infrastructure.clients.notifications.NotificationClient.send_reminder", new_callable=AsyncMock)
def test_reminders_skip_recently_sent(mock_send: AsyncMock, client: TestClient, seeded_student: int):
    """Test a second run inside the cooldown window sends nothing"""
    first = client.post(f"/v1/students/{seeded_student}/reminders").json()
    second = client.post(f"/v1/students/{seeded_student}/reminders").json()

    assert second["queued"] == []
    assert sorted(second["skipped_debt_ids"]) == sorted(r["debt_id"] for r in first["queued"])
    assert mock_send.await_count == 3


def test_grade_category(client: TestClient):
    """Test GET /v1/grades/category"""
    response = client.get("/v1/grades/category", params={"grade": 85})

    assert response.status_code == 200
    data = response.json()
    assert data["normalized_grade"] == 8.5
    assert data["category"] == "satisfactory"
    assert data["label"] == "Satisfactorio"


def test_grade_category_out_of_range(client: TestClient):
    """Test grades outside 0-100 are rejected"""
    assert client.get("/v1/grades/category", params={"grade": 101}).status_code == 422


def _reminder_statuses(db):
    db.expire_all()
    return sorted(r.status for r in db.query(PaymentReminderRecord).all())


@patch("tuition_gateway.infrastructure.clients.notifications.NotificationClient.send_reminder", new_callable=AsyncMock)
def test_delivered_reminders_are_marked_sent(mock_send: AsyncMock, client: TestClient, db, seeded_student: int):
    """Test successful deliveries are stored as sent"""
    client.post(f"/v1/students/{seeded_student}/reminders")

    assert _reminder_statuses(db) == ["sent", "sent", "sent"]


@patch("tuition_gateway.infrastructure.clients.notifications.NotificationClient.send_reminder", new_callable=AsyncMock)
def test_failed_reminders_are_retried_on_next_run(mock_send: AsyncMock, client: TestClient, db, seeded_student: int):
    """Test a webhook outage does not count as a sent reminder"""
    mock_send.side_effect = NotificationDeliveryError("notification service down")

    first = client.post(f"/v1/students/{seeded_student}/reminders").json()
    assert _reminder_statuses(db) == ["failed", "failed", "failed"]

    mock_send.side_effect = None
    second = client.post(f"/v1/students/{seeded_student}/reminders").json()

    assert second["skipped_debt_ids"] == []
    assert [r["debt_id"] for r in second["queued"]] == [r["debt_id"] for r in first["queued"]]
    assert mock_send.await_count == 6
    assert _reminder_statuses(db) == ["failed", "failed", "failed", "sent", "sent", "sent"]
