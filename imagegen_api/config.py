import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    image_api_key: str = os.getenv("IMAGE_API_KEY", "")
    image_api_base_url: str = os.getenv("IMAGE_API_BASE_URL", "https://api.openai.com/v1")
    image_model: str = os.getenv("IMAGE_MODEL", "gpt-image-1")
    image_size: str = os.getenv("IMAGE_SIZE", "1024x1024")
    provider_timeout_s: float = float(os.getenv("PROVIDER_TIMEOUT_S", "60"))
    fetch_timeout_s: float = float(os.getenv("FETCH_TIMEOUT_S", "30"))
    retry_attempts: int = int(os.getenv("RETRY_ATTEMPTS", "3"))
    retry_base_delay_ms: int = int(os.getenv("RETRY_BASE_DELAY_MS", "500"))
    storage_endpoint: str = os.getenv("R2_ENDPOINT", "")
    storage_bucket: str = os.getenv("R2_BUCKET", "")
    storage_access_key: str = os.getenv("R2_ACCESS_KEY", "")
    storage_secret_key: str = os.getenv("R2_SECRET_KEY", "")
    storage_region: str = os.getenv("R2_REGION", "auto")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "")
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"


settings = Settings()

_REQUIRED = {
    "IMAGE_API_KEY": "image_api_key",
    "R2_ENDPOINT": "storage_endpoint",
    "R2_BUCKET": "storage_bucket",
    "R2_ACCESS_KEY": "storage_access_key",
    "R2_SECRET_KEY": "storage_secret_key",
    "PUBLIC_BASE_URL": "public_base_url",
}


def missing_settings(current: Settings | None = None) -> list[str]:
    current = current or settings
    return [env_name for env_name, attr in _REQUIRED.items() if not str(getattr(current, attr)).strip()]
