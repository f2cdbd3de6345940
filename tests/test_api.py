from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from narration_service.api.deps import get_catalog, get_engine
from narration_service.domain.narration import NarrationEngine
from narration_service.main import app
from narration_service.services import POICatalog, load_catalog_file

GATE = {"latitude": 10.76055, "longitude": 106.70322}
OC_OANH = {"latitude": 10.76087, "longitude": 106.70351}
OUTSIDE = {"latitude": 10.7700, "longitude": 106.7100}


@pytest.fixture
def api_engine(clock) -> NarrationEngine:
    return NarrationEngine(POICatalog(load_catalog_file()), clock=clock)


@pytest.fixture
def client(api_engine):
    app.dependency_overrides[get_engine] = lambda: api_engine
    app.dependency_overrides[get_catalog] = lambda: api_engine.catalog
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _register(client, device_id="phone-1", **extra):
    response = client.post("/api/v1/visitors", json={"device_id": device_id, **extra})
    assert response.status_code == 201
    return response.json()


def test_register_and_fetch_visitor(client):
    visitor = _register(client, preferred_language="en", location=GATE)

    response = client.get(f"/api/v1/visitors/{visitor['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["device_id"] == "phone-1"
    assert body["preferred_language"] == "en"
    assert body["current_location"]["latitude"] == pytest.approx(GATE["latitude"])
    assert body["visit_history"] == []


def test_trigger_narration_plays_then_suppresses(client):
    visitor = _register(client, preferred_language="en")
    url = f"/api/v1/visitors/{visitor['id']}/narration"

    first = client.post(url, json=OC_OANH).json()
    second = client.post(url, json=OC_OANH).json()

    assert first["should_play"] is True
    assert first["trigger_reason"] == "proximity_detected"
    assert first["poi"]["code"] == "VK001"
    assert first["content"]["language"] == "en"
    assert first["content"]["media_url"].endswith("vk001-en.mp3")
    assert second["should_play"] is False

    history = client.get(f"/api/v1/visitors/{visitor['id']}").json()["visit_history"]
    assert [entry["poi_code"] for entry in history] == ["VK001"]


def test_trigger_outside_every_radius(client):
    visitor = _register(client)

    body = client.post(f"/api/v1/visitors/{visitor['id']}/narration", json=OUTSIDE).json()

    assert body["should_play"] is False
    assert body["poi"] is None
    assert body["message"] == "No point of interest nearby"


def test_inactive_translation_falls_back_to_vietnamese(client):
    visitor = _register(client, preferred_language="en")

    body = client.post(
        f"/api/v1/visitors/{visitor['id']}/narration",
        json={"latitude": 10.76121, "longitude": 106.70389},
    ).json()

    assert body["poi"]["code"] == "VK002"
    assert body["content"]["language"] == "vi"


def test_unknown_visitor_is_404(client):
    missing = uuid4()

    assert client.post(f"/api/v1/visitors/{missing}/narration", json=GATE).status_code == 404
    assert client.put(f"/api/v1/visitors/{missing}/location", json=GATE).status_code == 404
    assert client.put(f"/api/v1/visitors/{missing}/language", json={"language": "en"}).status_code == 404
    assert client.get(f"/api/v1/visitors/{missing}").status_code == 404


def test_location_and_language_updates(client, api_engine):
    visitor = _register(client)

    location = client.put(f"/api/v1/visitors/{visitor['id']}/location", json=GATE)
    language = client.put(f"/api/v1/visitors/{visitor['id']}/language", json={"language": "ko"})

    assert location.status_code == 204
    assert language.status_code == 204
    body = client.get(f"/api/v1/visitors/{visitor['id']}").json()
    assert body["preferred_language"] == "ko"
    assert body["visit_history"] == []


@pytest.mark.parametrize(
    "payload",
    [
        {"latitude": 91.0, "longitude": 106.7},
        {"latitude": 10.7, "longitude": -181.0},
        {"latitude": 10.7},
    ],
)
def test_out_of_range_coordinates_are_rejected(client, payload):
    visitor = _register(client)

    response = client.post(f"/api/v1/visitors/{visitor['id']}/narration", json=payload)

    assert response.status_code == 422


@pytest.mark.parametrize(
    "location",
    [
        '{"latitude": 10.76, "longitude": 106.70, "altitude": Infinity}',
        '{"latitude": NaN, "longitude": 106.70}',
    ],
)
def test_register_rejects_non_finite_location(client, api_engine, location):
    body = '{"device_id": "phone-1", "location": ' + location + "}"

    response = client.post(
        "/api/v1/visitors",
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert len(api_engine.store) == 0


def test_manual_request_and_unknown_poi(client):
    visitor = _register(client, preferred_language="ko", location=OUTSIDE)
    url = f"/api/v1/visitors/{visitor['id']}/narration/request"

    played = client.post(url, json={"poi_code": "VK001"}).json()
    missing = client.post(url, json={"poi_code": "VK999"})
    inactive = client.post(url, json={"poi_code": "VK005"})

    assert played["should_play"] is True
    assert played["trigger_reason"] == "manual_request"
    assert played["content"]["language"] == "ko"
    assert played["content"]["metadata"] == {"narrator": "guest"}
    assert missing.status_code == 404
    assert inactive.status_code == 404


def test_request_rejects_proximity_reason(client):
    visitor = _register(client)

    response = client.post(
        f"/api/v1/visitors/{visitor['id']}/narration/request",
        json={"poi_code": "VK001", "reason": "proximity_detected"},
    )

    assert response.status_code == 422


def test_scheduled_video_request(client):
    visitor = _register(client, preferred_language="en")

    body = client.post(
        f"/api/v1/visitors/{visitor['id']}/narration/request",
        json={"poi_code": "VK000", "reason": "scheduled_event", "content_type": "video"},
    ).json()

    assert body["trigger_reason"] == "scheduled_event"
    assert body["content"]["type"] == "video"
    assert body["content"]["media_url"].endswith(".mp4")


def test_welcome_targets_entrance_once(client):
    visitor = _register(client, location=OC_OANH)
    url = f"/api/v1/visitors/{visitor['id']}/narration/welcome"

    first = client.post(url).json()
    second = client.post(url).json()

    assert first["should_play"] is True
    assert first["trigger_reason"] == "first_visit"
    assert first["poi"]["code"] == "VK000"
    assert second["should_play"] is False


def test_list_pois_hides_inactive_by_default(client):
    active = client.get("/api/v1/pois").json()
    everything = client.get("/api/v1/pois", params={"include_inactive": True}).json()

    assert "VK005" not in {poi["code"] for poi in active}
    assert "VK005" in {poi["code"] for poi in everything}
    gate = next(poi for poi in active if poi["code"] == "VK000")
    assert gate["languages"] == ["vi", "en"]


def test_health_and_readiness(client):
    health = client.get("/healthz")
    ready = client.get("/readyz")

    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert ready.status_code == 200
    assert ready.json()["pois"] == 6


def test_trace_id_is_echoed(client):
    response = client.get("/healthz", headers={"X-Request-Id": "ABCDEF0123456789"})

    assert response.headers["X-Trace-Id"] == "abcdef0123456789"
