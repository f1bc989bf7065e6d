import json

import httpx
import pytest
from fastapi.testclient import TestClient

from sareestage.config import Settings
from sareestage.core.errors import UpstreamMisconfigured
from sareestage.main import create_app

ORIGIN = "http://localhost:5173"

GENERATE_BODY = {
    "modelImage": {"mimeType": "image/jpeg", "data": "TU9ERUw="},
    "spec": {
        "body": {"image": {"mimeType": "image/png", "data": "Qk9EWQ=="}, "text": "silk"},
        "pallu": {"image": {"mimeType": "image/png", "data": "UEFMTFU="}, "text": ""},
        "blouse": {"type": "running", "description": ""},
    },
}


def _settings(**overrides):
    values = {
        "gemini_key": "test-key",
        "gemini_model": "test-model",
        "gemini_api_base": "https://gemini.test/v1beta",
        "allowed_origins": [ORIGIN],
    }
    values.update(overrides)
    return Settings(**values)


def _image_response(data="UkVTVUxU"):
    return {"candidates": [{"content": {"parts": [{"inlineData": {"data": data}}]}}]}


@pytest.fixture
def gemini_calls():
    return []


@pytest.fixture
def make_client(gemini_calls):
    def factory(handler=None, **overrides):
        def recording(request):
            gemini_calls.append(json.loads(request.content))
            if handler is not None:
                return handler(request)
            return httpx.Response(200, json=_image_response())

        app = create_app(_settings(**overrides), transport=httpx.MockTransport(recording))
        return TestClient(app)

    return factory


def test_generate_returns_image_data(make_client, gemini_calls):
    with make_client() as client:
        response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == 200
    assert response.json() == {"imageData": "UkVTVUxU"}
    assert len(gemini_calls) == 1


def test_generate_forwards_tweak_prompt(make_client, gemini_calls):
    body = dict(GENERATE_BODY, tweakPrompt="Increase pallu length and flow subtly.")

    with make_client() as client:
        client.post("/api/generate", json=body)

    texts = [part.get("text", "") for part in gemini_calls[0]["contents"][0]["parts"]]
    assert any("Additional Tweaks" in text for text in texts)


def test_edit_returns_image_data(make_client):
    with make_client() as client:
        response = client.post(
            "/api/edit",
            json={"image": {"mimeType": "image/png", "data": "SU1H"}, "prompt": "Add a retro filter"},
        )

    assert response.status_code == 200
    assert response.json()["imageData"] == "UkVTVUxU"


@pytest.mark.parametrize(
    "path, body, message",
    [
        ("/api/generate", {"spec": GENERATE_BODY["spec"]}, "Missing modelImage or spec in request body."),
        ("/api/edit", {"image": {"mimeType": "image/png", "data": "SU1H"}}, "Missing image or prompt in request body."),
        ("/api/edit", {"image": {"mimeType": "image/png", "data": "SU1H"}, "prompt": ""}, "Missing image or prompt in request body."),
    ],
)
def test_malformed_bodies_are_400(make_client, gemini_calls, path, body, message):
    with make_client() as client:
        response = client.post(path, json=body)

    assert response.status_code == 400
    assert response.json() == {"message": message}
    assert gemini_calls == []


@pytest.mark.parametrize(
    "upstream, status_code",
    [
        (httpx.Response(429, text="quota"), 429),
        (httpx.Response(400, text="bad"), 400),
        (httpx.Response(503, text="down"), 502),
        (httpx.Response(200, json={"candidates": [{"content": {"parts": []}, "finishReason": "SAFETY"}]}), 422),
        (httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "no"}]}}]}), 500),
    ],
)
def test_provider_failures_map_to_status(make_client, upstream, status_code):
    with make_client(lambda request: upstream) as client:
        response = client.post("/api/generate", json=GENERATE_BODY)

    assert response.status_code == status_code
    assert response.json()["message"]


async def test_missing_key_aborts_startup():
    app = create_app(_settings(gemini_key=None))

    with pytest.raises(UpstreamMisconfigured):
        async with app.router.lifespan_context(app):
            pass


def test_cors_preflight_for_allowed_origin(make_client):
    with make_client() as client:
        response = client.options(
            "/api/generate",
            headers={"Origin": ORIGIN, "Access-Control-Request-Method": "POST"},
        )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == ORIGIN


def test_health(make_client):
    with make_client() as client:
        response = client.get("/api/health")

    assert response.json()["status"] == "healthy"
