import logging

from fastapi.testclient import TestClient

from imagegen_api.config import Settings, missing_settings
from imagegen_api.main import create_app


def test_missing_settings_lists_empty_required_keys(test_settings) -> None:
    assert missing_settings(test_settings) == []

    partial = Settings(image_api_key="k", storage_bucket="media", public_base_url="  ")
    assert missing_settings(partial) == [
        "R2_ENDPOINT",
        "R2_ACCESS_KEY",
        "R2_SECRET_KEY",
        "PUBLIC_BASE_URL",
    ]


def test_startup_warns_instead_of_failing(caplog, uploader) -> None:
    caplog.set_level(logging.WARNING, logger="imagegen")
    app = create_app(Settings(image_api_key="", storage_bucket="media"), uploader=uploader)

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200

    assert any("missing configuration" in record.getMessage() for record in caplog.records)
