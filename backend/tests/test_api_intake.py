"""Tests for text intake API endpoints."""

from decimal import Decimal

from conftest import SCENARIO_DEBIT


class TestIntakeAPI:
    """Test intake endpoints."""

    def test_process_message(self, client):
        response = client.post("/api/v1/intake", json={"text": SCENARIO_DEBIT})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["source"] == "message"
        assert data["requires_review"] is False
        assert data["transaction"]["institution"] == "CBE"
        assert Decimal(data["transaction"]["amount"]) == Decimal("1500")

    def test_processed_transaction_is_stored(self, client):
        data = client.post("/api/v1/intake", json={"text": SCENARIO_DEBIT}).json()
        response = client.get(f"/api/v1/transactions/{data['transaction']['id']}")
        assert response.status_code == 200

    def test_duplicate(self, client):
        first = client.post("/api/v1/intake", json={"text": SCENARIO_DEBIT}).json()
        second = client.post("/api/v1/intake", json={"text": SCENARIO_DEBIT}).json()
        assert second["duplicate_of"] == first["transaction"]["id"]

    def test_unparseable(self, client):
        response = client.post("/api/v1/intake", json={"text": "Lunch at noon?", "source": "clipboard"})
        assert response.status_code == 422

    def test_empty_text(self, client):
        response = client.post("/api/v1/intake", json={"text": ""})
        assert response.status_code == 422

    def test_manual_fallback(self, client):
        response = client.post(
            "/api/v1/intake",
            json={"text": "Paid ETB 500 at the market", "source": "manual"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["transaction"]["institution"] == "Unknown"
        assert data["requires_review"] is True

    def test_stats(self, client):
        client.post("/api/v1/intake", json={"text": SCENARIO_DEBIT})
        client.post("/api/v1/intake", json={"text": "nothing", "source": "clipboard"})

        response = client.get("/api/v1/intake/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["total_processed"] == 2
        assert data["success_rate"] == 50.0
        assert data["source_breakdown"] == {"message": 1, "clipboard": 1, "manual": 0}
        assert data["top_counterparties"] == [{"counterparty": "CBE", "count": 1}]

    def test_clear_history(self, client):
        client.post("/api/v1/intake", json={"text": SCENARIO_DEBIT})
        response = client.delete("/api/v1/intake/history")
        assert response.status_code == 200

        assert client.get("/api/v1/intake/stats").json()["total_processed"] == 0
