import httpx

from imagegen_api.config import Settings


class ImageProviderClient:
    """OpenAI-compatible `/images/generations` client.

    One instance is built at startup and shared by every request. Pass
    `http_client` to reuse a preconfigured `httpx.AsyncClient` (tests hand in one
    backed by `httpx.MockTransport`).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-image-1",
        size: str = "1024x1024",
        timeout_s: float = 60.0,
        fetch_timeout_s: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.size = size
        self.timeout_s = timeout_s
        self.fetch_timeout_s = fetch_timeout_s
        self._client = http_client or httpx.AsyncClient()

    @classmethod
    def from_settings(cls, current: Settings) -> "ImageProviderClient":
        return cls(
            api_key=current.image_api_key,
            base_url=current.image_api_base_url,
            model=current.image_model,
            size=current.image_size,
            timeout_s=current.provider_timeout_s,
            fetch_timeout_s=current.fetch_timeout_s,
        )

    async def generate(self, prompt: str, size: str | None = None) -> dict:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        body = {
            "model": self.model,
            "prompt": prompt,
            "size": size or self.size,
            "n": 1,
        }
        response = await self._client.post(
            f"{self.base_url}/images/generations",
            headers=headers,
            json=body,
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise httpx.DecodingError("provider response is not a json object")
        return data

    async def fetch_bytes(self, url: str) -> bytes:
        response = await self._client.get(url, timeout=self.fetch_timeout_s, follow_redirects=True)
        response.raise_for_status()
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()
