import json
import logging

from fakes import FakeProvider
from fastapi.testclient import TestClient

from imagegen_api.main import create_app
from imagegen_api.observability import JsonLogFormatter


def test_json_formatter_includes_request_fields() -> None:
    record = logging.LogRecord("imagegen.access", logging.INFO, __file__, 1, "request_complete", None, None)
    record.request_id = "abc"
    record.status_code = 200
    record.stage = "uploading"

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "request_complete"
    assert payload["request_id"] == "abc"
    assert payload["status_code"] == 200
    assert payload["stage"] == "uploading"
    assert "latency_ms" not in payload


def test_request_id_header_is_echoed(test_settings, uploader) -> None:
    client = TestClient(create_app(test_settings, provider=FakeProvider({"data": []}), uploader=uploader))

    response = client.get("/health", headers={"x-request-id": "req-1"})

    assert response.headers["x-request-id"] == "req-1"


def test_generated_key_is_logged_on_request_complete(test_settings, uploader, caplog) -> None:
    caplog.set_level(logging.INFO, logger="imagegen.access")
    provider = FakeProvider({"data": [{"b64_json": "aGk="}]})
    client = TestClient(create_app(test_settings, provider=provider, uploader=uploader))

    response = client.post("/generate", json={"sessionId": "s1", "prompt": "a cat"})

    records = [r for r in caplog.records if r.name == "imagegen.access" and r.getMessage() == "request_complete"]
    assert records
    assert records[-1].key == response.json()["key"]
    assert records[-1].path == "/generate"
