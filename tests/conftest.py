import os

import pytest

# Keep tests offline-safe and independent of a developer .env.
for _name in ("IMAGE_API_KEY", "R2_ENDPOINT", "R2_BUCKET", "R2_ACCESS_KEY", "R2_SECRET_KEY", "PUBLIC_BASE_URL"):
    os.environ[_name] = ""
os.environ["LOG_JSON"] = "false"

from fakes import PUBLIC_BASE, FakeS3Client, make_png_2x2  # noqa: E402

from imagegen_api.config import Settings  # noqa: E402
from imagegen_api.storage import StorageUploader  # noqa: E402


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_2x2()


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def uploader(s3_client: FakeS3Client) -> StorageUploader:
    return StorageUploader(s3_client, "media", PUBLIC_BASE)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        image_api_key="test-key",
        storage_endpoint="https://account.r2.example.test",
        storage_bucket="media",
        storage_access_key="ak",
        storage_secret_key="sk",
        public_base_url=PUBLIC_BASE,
        retry_attempts=3,
        retry_base_delay_ms=0,
        log_json=False,
    )
