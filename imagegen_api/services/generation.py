import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from imagegen_api.errors import (
    BadRequest,
    ErrorKind,
    GenerationError,
    ProviderError,
    StorageUnavailable,
)
from imagegen_api.keys import build_key, now_millis
from imagegen_api.normalizer import Fetcher, normalize_response
from imagegen_api.retry import retry_with_backoff
from imagegen_api.schemas import GenerateRequest

logger = logging.getLogger(__name__)


class ImageProvider(Protocol):
    async def generate(self, prompt: str) -> dict: ...

    async def fetch_bytes(self, url: str) -> bytes: ...


class Uploader(Protocol):
    async def upload(self, data: bytes, key: str, content_type: str) -> None: ...

    def public_url_for(self, key: str) -> str: ...


class PipelineStage(str, Enum):
    RECEIVED = "received"
    GENERATING = "generating"
    NORMALIZING = "normalizing"
    KEY_BUILT = "key_built"
    UPLOADING = "uploading"
    COMPLETED = "completed"


_ERROR_TITLES = {
    ErrorKind.BAD_REQUEST: "Missing sessionId or prompt",
    ErrorKind.PROVIDER_ERROR: "Image generation failed",
    ErrorKind.STORAGE_ERROR: "Storage upload failed",
}

_STATUS_CODES = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.PROVIDER_ERROR: 500,
    ErrorKind.STORAGE_ERROR: 500,
}


@dataclass(frozen=True)
class PipelineSuccess:
    url: str
    key: str


@dataclass(frozen=True)
class PipelineFailure:
    kind: ErrorKind
    stage: PipelineStage
    error: str
    details: str | None = None

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @classmethod
    def from_error(cls, exc: GenerationError, stage: PipelineStage) -> "PipelineFailure":
        return cls(kind=exc.kind, stage=stage, error=_ERROR_TITLES[exc.kind], details=str(exc))


PipelineOutcome = PipelineSuccess | PipelineFailure


class GenerationPipeline:
    """Prompt -> provider image -> bucket object -> public url.

    Stages run strictly in order; any failure ends the run with a
    `PipelineFailure` and nothing is resumed from the middle.
    """

    def __init__(
        self,
        provider: ImageProvider,
        uploader: Uploader,
        *,
        fetch: Fetcher | None = None,
        max_attempts: int = 3,
        base_delay_ms: int = 500,
        clock: Callable[[], int] = now_millis,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        extension: str = "png",
        content_type: str = "image/png",
    ) -> None:
        self.provider = provider
        self.uploader = uploader
        self.fetch = fetch or provider.fetch_bytes
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.clock = clock
        self.sleep = sleep
        self.extension = extension
        self.content_type = content_type

    async def run(self, request: GenerateRequest) -> PipelineOutcome:
        stage = PipelineStage.RECEIVED
        session_id = request.session_id or ""
        prompt = request.prompt or ""
        log_extra = {"session_id": session_id}

        try:
            if not session_id.strip() or not prompt.strip():
                raise BadRequest("sessionId and prompt are required")

            stage = self._enter(PipelineStage.GENERATING, log_extra)
            try:
                response = await retry_with_backoff(
                    lambda: self.provider.generate(prompt),
                    max_attempts=self.max_attempts,
                    base_delay_ms=self.base_delay_ms,
                    sleep=self.sleep,
                )
            except Exception as exc:  # noqa: BLE001
                raise ProviderError(str(exc)) from exc

            stage = self._enter(PipelineStage.NORMALIZING, log_extra)
            try:
                image_bytes = await normalize_response(response, self.fetch)
            except ProviderError:
                raise
            except Exception as exc:  # noqa: BLE001
                raise ProviderError(f"image fetch failed: {exc}") from exc

            stage = self._enter(PipelineStage.KEY_BUILT, log_extra)
            key = build_key(session_id, self.clock(), self.extension)

            stage = self._enter(PipelineStage.UPLOADING, {**log_extra, "key": key})
            await self.uploader.upload(image_bytes, key, self.content_type)
        except (BadRequest, ProviderError, StorageUnavailable) as exc:
            failure = PipelineFailure.from_error(exc, stage)
            logger.warning(
                "generation failed at %s: %s",
                stage.value,
                failure.details,
                extra={**log_extra, "stage": stage.value},
            )
            return failure

        url = self.uploader.public_url_for(key)
        self._enter(PipelineStage.COMPLETED, {**log_extra, "key": key})
        return PipelineSuccess(url=url, key=key)

    @staticmethod
    def _enter(stage: PipelineStage, extra: dict) -> PipelineStage:
        logger.info("generation stage %s", stage.value, extra={**extra, "stage": stage.value})
        return stage
