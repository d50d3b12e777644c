import base64
import json

import httpx
import pytest

from ingestion.config import GatewaySettings
from ingestion.errors import ExtractionError, GatewayError
from ingestion.gateway import GatewayClient

SETTINGS = GatewaySettings(api_key="secret", url="https://gateway.test/v1/chat/completions")


def _client(handler) -> GatewayClient:
    return GatewayClient(SETTINGS, client=httpx.Client(transport=httpx.MockTransport(handler)))


def _completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def test_parse_syllabus_sends_document_as_data_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _completion('{"schedule": null}')

    with _client(handler) as gateway:
        text = gateway.parse_syllabus(b"%PDF-1.7", weekday_hours=3)

    assert text == '{"schedule": null}'
    assert seen["auth"] == "Bearer secret"
    body = seen["body"]
    assert body["model"] == SETTINGS.model
    assert "3h per weekday" in body["messages"][0]["content"]
    image = body["messages"][1]["content"][1]["image_url"]["url"]
    assert image == "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.7").decode()


def test_plan_sessions_includes_assignments():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return _completion("[]")

    assignments = [{"title": "Essay", "type": "hw", "dueDate": None, "estimatedMinutes": 90}]
    with _client(handler) as gateway:
        assert gateway.plan_sessions(assignments, weekday_hours=1, weekend_hours=5) == "[]"

    system, user = seen["body"]["messages"]
    assert "Weekdays: 1h max" in system["content"]
    assert "Weekends: 5h max" in system["content"]
    assert json.dumps(assignments) in user["content"]


def test_error_status_raises_gateway_error():
    with _client(lambda request: httpx.Response(429, text="slow down")) as gateway:
        with pytest.raises(GatewayError) as excinfo:
            gateway.plan_sessions([])

    assert excinfo.value.status_code == 429
    assert excinfo.value.detail == "slow down"


@pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {"content": None}}]}])
def test_missing_content_raises_extraction_error(payload):
    with _client(lambda request: httpx.Response(200, json=payload)) as gateway:
        with pytest.raises(ExtractionError):
            gateway.parse_syllabus(b"x")


def test_settings_from_env():
    settings = GatewaySettings.from_env({
        "SYLLABUS2CAL_GATEWAY_API_KEY": "k",
        "SYLLABUS2CAL_GATEWAY_MODEL": "other/model",
        "SYLLABUS2CAL_GATEWAY_TIMEOUT": "30",
    })

    assert settings.api_key == "k"
    assert settings.model == "other/model"
    assert settings.timeout == 30.0
    assert settings.url.startswith("https://")


@pytest.mark.parametrize("environ", [
    {},
    {"SYLLABUS2CAL_GATEWAY_API_KEY": "  "},
    {"SYLLABUS2CAL_GATEWAY_API_KEY": "k", "SYLLABUS2CAL_GATEWAY_TIMEOUT": "soon"},
    {"SYLLABUS2CAL_GATEWAY_API_KEY": "k", "SYLLABUS2CAL_GATEWAY_TIMEOUT": "-1"},
])
def test_settings_from_env_rejects_bad_values(environ):
    with pytest.raises(ValueError):
        GatewaySettings.from_env(environ)


def test_timeout_is_forwarded_and_capped_by_settings():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.extensions["timeout"]["read"])
        return _completion("[]")

    with _client(handler) as gateway:
        gateway.plan_sessions([], timeout=1.5)
        gateway.plan_sessions([], timeout=SETTINGS.timeout + 100)

    assert seen == [1.5, SETTINGS.timeout]


def test_slow_gateway_raises_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("gateway too slow", request=request)

    with _client(handler) as gateway:
        with pytest.raises(httpx.TimeoutException):
            gateway.parse_syllabus(b"x", timeout=0.5)
