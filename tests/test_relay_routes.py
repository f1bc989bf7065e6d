import httpx
import pytest
from fastapi.testclient import TestClient

from sareestage.config import Settings
from sareestage.edge import create_edge_app

ORIGIN = "http://localhost:3000"
BACKEND = "http://backend.test"


@pytest.fixture
def forwarded():
    return []


@pytest.fixture
def make_client(forwarded):
    def factory(handler=None, **overrides):
        values = {"backend_url": BACKEND, "allowed_origins": [ORIGIN], "relay_allow_credentials": False}
        values.update(overrides)

        def recording(request):
            forwarded.append(request)
            if handler is not None:
                return handler(request)
            return httpx.Response(200, json={"imageData": "UkVTVUxU"})

        app = create_edge_app(Settings(**values), transport=httpx.MockTransport(recording))
        return TestClient(app)

    return factory


def test_preflight_for_allowed_origin(make_client, forwarded):
    with make_client() as client:
        response = client.options("/api/generate", headers={"Origin": ORIGIN})

    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert response.headers["access-control-allow-methods"] == "GET,POST,OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type,Authorization"
    assert "access-control-allow-credentials" not in response.headers
    assert forwarded == []


def test_preflight_for_unknown_origin_has_no_allow_origin(make_client):
    with make_client() as client:
        response = client.options("/api/edit", headers={"Origin": "https://evil.example"})

    assert response.status_code == 204
    assert "access-control-allow-origin" not in response.headers
    assert response.headers["vary"] == "Origin"


def test_non_post_is_rejected(make_client, forwarded):
    with make_client() as client:
        response = client.get("/api/generate", headers={"Origin": ORIGIN})

    assert response.status_code == 405
    assert response.json() == {"message": "Method Not Allowed"}
    assert response.headers["allow"] == "POST, OPTIONS"
    assert forwarded == []


def test_non_post_checked_before_backend_config(make_client):
    with make_client(backend_url=None) as client:
        response = client.put("/api/edit", json={})

    assert response.status_code == 405


def test_missing_backend_url(make_client, forwarded):
    with make_client(backend_url=None) as client:
        response = client.post("/api/generate", json={"modelImage": {}})

    assert response.status_code == 500
    assert response.json() == {"message": "BACKEND_URL not set"}
    assert forwarded == []


def test_body_is_forwarded_verbatim(make_client, forwarded):
    raw = b'{"image": {"mimeType": "image/png", "data": "SU1H"}, "prompt": "Blur"}'

    with make_client() as client:
        response = client.post(
            "/api/edit",
            content=raw,
            headers={"Origin": ORIGIN, "Content-Type": "application/json"},
        )

    assert response.status_code == 200
    assert response.json() == {"imageData": "UkVTVUxU"}
    assert response.headers["access-control-allow-origin"] == ORIGIN
    assert str(forwarded[0].url) == f"{BACKEND}/api/edit"
    assert forwarded[0].method == "POST"
    assert forwarded[0].content == raw


def test_empty_body_is_sent_as_empty_object(make_client, forwarded):
    with make_client() as client:
        client.post("/api/generate")

    assert forwarded[0].content == b"{}"


@pytest.mark.parametrize(
    "status_code, body",
    [
        (429, b'{"message": "The service is currently experiencing high traffic."}'),
        (422, b'{"message": "The generation was blocked for safety reasons."}'),
        (500, b'{"message": "Server configuration error."}'),
    ],
)
def test_backend_errors_pass_through(make_client, status_code, body):
    def upstream(request):
        return httpx.Response(
            status_code, content=body, headers={"Content-Type": "application/json"}
        )

    with make_client(upstream) as client:
        response = client.post("/api/generate", json={})

    assert response.status_code == status_code
    assert response.content == body


def test_unreachable_backend_is_502(make_client):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(refuse) as client:
        response = client.post("/api/generate", json={}, headers={"Origin": ORIGIN})

    assert response.status_code == 502
    assert response.json()["message"]
    assert response.headers["access-control-allow-origin"] == ORIGIN


def test_credentials_header_when_enabled(make_client):
    with make_client(relay_allow_credentials=True) as client:
        response = client.options("/api/generate", headers={"Origin": ORIGIN})

    assert response.headers["access-control-allow-credentials"] == "true"


def test_health_reports_backend_configuration(make_client):
    with make_client(backend_url=None) as client:
        response = client.get("/api/health")

    assert response.json()["backend_configured"] is False
