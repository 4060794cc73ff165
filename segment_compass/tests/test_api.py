"""
API Contract Tests

Exercises every router through FastAPI's TestClient: request validation,
out-of-scale rejection, settings injection and the null/empty results for
insufficient history.
"""

import pytest
from fastapi.testclient import TestClient

from segment_compass.core.config import Settings
from segment_compass.core.dependencies import get_settings_dependency
from segment_compass.main import app


CONFIG = {"satisfactionScale": "1-5", "loyaltyScale": "1-5"}

QUADRANT_POINTS = [
    {"id": "A", "satisfaction": 4, "loyalty": 4},
    {"id": "B", "satisfaction": 2, "loyalty": 2},
    {"id": "C", "satisfaction": 4, "loyalty": 2},
    {"id": "D", "satisfaction": 2, "loyalty": 4},
    {"id": "E", "satisfaction": 3, "loyalty": 3},
]

HISTORY_POINTS = [
    {"id": "1", "email": "ada@example.com", "satisfaction": 2, "loyalty": 2, "date": "2024-01-01"},
    {"id": "2", "email": "bob@example.com", "satisfaction": 4, "loyalty": 4, "date": "2024-01-01"},
    {"id": "3", "email": "ada@example.com", "satisfaction": 2, "loyalty": 4, "date": "2024-02-01"},
    {"id": "4", "email": "bob@example.com", "satisfaction": 5, "loyalty": 4, "date": "2024-03-01"},
    {"id": "5", "email": "ada@example.com", "satisfaction": 4, "loyalty": 5, "date": "2024-03-01"},
]


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, client):
        body = client.get("/").json()
        assert body["version"] == "1.0.0"
        assert body["docs"] == "/docs"


class TestSegmentationEndpoints:

    def test_classify(self, client):
        response = client.post("/segmentation/classify", json={"config": CONFIG, "points": QUADRANT_POINTS})

        assert response.status_code == 200
        body = response.json()
        assert [r["segment"] for r in body["results"]] == [
            "loyalists", "defectors", "mercenaries", "hostages", "neutral",
        ]
        assert body["distribution"]["counts"]["neutral"] == 1
        assert body["distribution"]["total"] == 5

    def test_classify_with_zones_and_override(self, client):
        config = {**CONFIG, "showSpecialZones": True, "manualAssignments": {"B": "hostages"}}
        points = [
            {"id": "A", "satisfaction": 5, "loyalty": 5},
            {"id": "B", "satisfaction": 1, "loyalty": 1},
        ]
        body = client.post("/segmentation/classify", json={"config": config, "points": points}).json()

        assert body["results"][0]["segment"] == "apostles"
        assert body["results"][0]["baseQuadrant"] == "loyalists"
        assert body["results"][1]["segment"] == "hostages"
        assert body["results"][1]["isManual"] is True

    def test_distribution(self, client):
        points = QUADRANT_POINTS + [{"id": "X", "satisfaction": 5, "loyalty": 5, "excluded": True}]
        body = client.post("/segmentation/distribution", json={"config": CONFIG, "points": points}).json()

        assert body["total"] == 5
        assert body["counts"]["loyalists"] == 1

    def test_out_of_scale_rejected(self, client):
        points = [{"id": "bad", "satisfaction": 7, "loyalty": 3}]
        response = client.post("/segmentation/classify", json={"config": CONFIG, "points": points})

        assert response.status_code == 422
        violations = response.json()["detail"]["violations"]
        assert violations[0]["id"] == "bad"
        assert violations[0]["axis"] == "satisfaction"

    def test_invalid_config_rejected(self, client):
        config = {**CONFIG, "midpoint": {"sat": 9, "loy": 3}}
        response = client.post("/segmentation/classify", json={"config": config, "points": []})
        assert response.status_code == 422

    def test_proximity_with_threshold(self, client):
        points = [{"id": "a", "satisfaction": 4, "loyalty": 5}]
        response = client.post(
            "/segmentation/proximity",
            params={"threshold": 1},
            json={"config": CONFIG, "points": points},
        )

        assert response.status_code == 200
        body = response.json()
        assert [d["relationship"] for d in body["analysis"]] == ["loyalists_close_to_hostages"]
        assert body["analysis"][0]["customers"][0]["riskScore"] == 50
        assert body["settings"]["threshold"] == 1
        assert body["settings"]["isAvailable"] is True

    def test_proximity_settings_injected(self, client):
        app.dependency_overrides[get_settings_dependency] = lambda: Settings(proximity_threshold=1)
        points = [{"id": "a", "satisfaction": 4, "loyalty": 5}]
        body = client.post("/segmentation/proximity", json={"config": CONFIG, "points": points}).json()

        assert len(body["analysis"]) == 1

    def test_proximity_negative_threshold_rejected(self, client):
        response = client.post(
            "/segmentation/proximity",
            params={"threshold": -1},
            json={"config": CONFIG, "points": []},
        )
        assert response.status_code == 422


class TestHistoryEndpoints:

    def test_timelines(self, client):
        body = client.post("/history/timelines", json={"config": CONFIG, "points": HISTORY_POINTS}).json()

        assert [t["identifier"] for t in body] == ["ada@example.com", "bob@example.com"]
        assert body[0]["dates"] == ["2024-01-01", "2024-02-01", "2024-03-01"]

    def test_trends(self, client):
        body = client.post("/history/trends", json={"config": CONFIG, "points": HISTORY_POINTS}).json()

        assert [t["date"] for t in body] == ["2024-01-01", "2024-02-01", "2024-03-01"]
        assert body[2]["averageSatisfaction"] == 4.5
        assert body[2]["dateObj"] == "2024-03-01"

    def test_movements(self, client):
        body = client.post("/history/movements", json={"config": CONFIG, "points": HISTORY_POINTS}).json()

        assert body["positiveMovements"] == 2
        assert body["neutralMovements"] == 1
        assert body["totalMovements"] == 3
        assert body["movements"][0]["fromSegment"] == "defectors"
        assert body["movements"][0]["direction"] == "positive"

    def test_period_comparison(self, client):
        body = client.post(
            "/history/period-comparison", json={"config": CONFIG, "points": HISTORY_POINTS}
        ).json()

        assert body["satisfactionChange"] == 1.5
        assert body["loyaltyChange"] == 1.5

    def test_period_comparison_null_without_history(self, client):
        response = client.post(
            "/history/period-comparison", json={"config": CONFIG, "points": QUADRANT_POINTS}
        )
        assert response.status_code == 200
        assert response.json() is None

    def test_forecast(self, client):
        response = client.post(
            "/history/forecast",
            params={"monthsAhead": 3},
            json={"config": CONFIG, "points": HISTORY_POINTS},
        )

        assert response.status_code == 200
        body = response.json()
        assert [p["monthsAhead"] for p in body["forecast"]] == [1, 3]
        assert body["forecast"][0]["date"] == "2024-04-01"
        assert body["confidence"] == "low"

    def test_forecast_null_without_history(self, client):
        response = client.post("/history/forecast", json={"config": CONFIG, "points": QUADRANT_POINTS})
        assert response.status_code == 200
        assert response.json() is None

    def test_forecast_rejects_zero_months(self, client):
        response = client.post(
            "/history/forecast",
            params={"monthsAhead": 0},
            json={"config": CONFIG, "points": HISTORY_POINTS},
        )
        assert response.status_code == 422

    def test_trends_with_date_format(self, client):
        points = [
            {"id": "a", "satisfaction": 4, "loyalty": 4, "date": "02/03/2024"},
            {"id": "a", "satisfaction": 2, "loyalty": 2, "date": "15/01/2024"},
        ]
        body = client.post(
            "/history/trends",
            json={"config": CONFIG, "points": points, "dateFormat": "dd/MM/yyyy"},
        ).json()

        assert [t["dateObj"] for t in body] == ["2024-01-15", "2024-03-02"]

    @pytest.mark.parametrize("date_format,direction", [
        ("dd/MM/yyyy", "positive"),
        ("MM/dd/yyyy", "negative"),
    ])
    def test_movements_follow_date_format(self, client, date_format, direction):
        points = [
            {"id": "a", "satisfaction": 4, "loyalty": 4, "date": "03/02/2024"},
            {"id": "a", "satisfaction": 2, "loyalty": 2, "date": "05/01/2024"},
        ]
        body = client.post(
            "/history/movements",
            json={"config": CONFIG, "points": points, "dateFormat": date_format},
        ).json()

        assert body["totalMovements"] == 1
        assert body["movements"][0]["direction"] == direction

    def test_movements_skip_unparseable_dates(self, client):
        points = HISTORY_POINTS + [
            {"id": "6", "email": "ada@example.com", "satisfaction": 2, "loyalty": 2, "date": "not a date"},
        ]
        body = client.post("/history/movements", json={"config": CONFIG, "points": points}).json()

        assert body["totalMovements"] == 3
        assert body["negativeMovements"] == 0
