import contextlib
import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from imagegen_api.config import Settings, missing_settings, settings as default_settings
from imagegen_api.errors import GenerationError
from imagegen_api.observability import RequestLoggingMiddleware, configure_logging
from imagegen_api.provider import ImageProviderClient
from imagegen_api.schemas import (
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    ImageUrlResponse,
    PassthroughUploadRequest,
    PassthroughUploadResponse,
)
from imagegen_api.services.generation import (
    GenerationPipeline,
    ImageProvider,
    PipelineFailure,
    Uploader,
)
from imagegen_api.services.passthrough import AUDIO_CONTENT_TYPE, IMAGE_CONTENT_TYPE, upload_base64
from imagegen_api.storage import StorageUploader

logger = logging.getLogger("imagegen")


def create_app(
    current: Settings | None = None,
    provider: ImageProvider | None = None,
    uploader: Uploader | None = None,
) -> FastAPI:
    """Build the HTTP app.

    Clients passed in are used as-is; anything left out is built from
    settings when the app starts.
    """
    current = current or default_settings

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = missing_settings(current)
        if missing:
            logger.warning("missing configuration, running degraded: %s", ", ".join(missing))
        owned_provider: ImageProviderClient | None = None
        if getattr(app.state, "provider", None) is None:
            owned_provider = ImageProviderClient.from_settings(current)
            app.state.provider = owned_provider
        if getattr(app.state, "uploader", None) is None:
            app.state.uploader = StorageUploader.from_settings(current)
        try:
            yield
        finally:
            if owned_provider is not None:
                await owned_provider.aclose()

    app = FastAPI(title="Image Generation Upload API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestLoggingMiddleware)
    app.state.settings = current
    app.state.provider = provider
    app.state.uploader = uploader
    app.state.started_at = time.monotonic()

    @app.exception_handler(GenerationError)
    async def generation_error_handler(_: Request, exc: GenerationError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request body", "details": str(exc.errors())})

    _register_routes(app)
    return app


def get_uploader(request: Request) -> Uploader:
    return request.app.state.uploader


def get_pipeline(request: Request) -> GenerationPipeline:
    state = request.app.state
    current: Settings = state.settings
    return GenerationPipeline(
        state.provider,
        state.uploader,
        max_attempts=current.retry_attempts,
        base_delay_ms=current.retry_base_delay_ms,
    )


def _register_routes(app: FastAPI) -> None:
    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        request: GenerateRequest,
        http_request: Request,
        pipeline: GenerationPipeline = Depends(get_pipeline),
    ):
        outcome = await pipeline.run(request)
        if isinstance(outcome, PipelineFailure):
            content = {"error": outcome.error, "code": outcome.code}
            if outcome.status_code >= 500 and outcome.details:
                content["details"] = outcome.details
            return JSONResponse(status_code=outcome.status_code, content=content)
        http_request.state.generated_key = outcome.key
        return GenerateResponse(url=outcome.url, key=outcome.key)

    @app.get("/health", response_model=HealthResponse)
    def health(request: Request) -> HealthResponse:
        uptime = time.monotonic() - request.app.state.started_at
        return HealthResponse(status="ok", uptime=round(uptime, 3))

    @app.get("/image/{key:path}", response_model=ImageUrlResponse)
    def image_url(key: str, uploader: Uploader = Depends(get_uploader)):
        if not key.strip():
            return JSONResponse(status_code=400, content={"error": "Missing key"})
        return ImageUrlResponse(url=uploader.public_url_for(key))

    @app.post("/upload-audio", response_model=PassthroughUploadResponse)
    async def upload_audio(
        request: PassthroughUploadRequest,
        uploader: Uploader = Depends(get_uploader),
    ) -> PassthroughUploadResponse:
        url = await _passthrough(uploader, request, AUDIO_CONTENT_TYPE, "audio")
        return PassthroughUploadResponse(url=url)

    @app.post("/upload-image", response_model=PassthroughUploadResponse)
    async def upload_image(
        request: PassthroughUploadRequest,
        uploader: Uploader = Depends(get_uploader),
    ) -> PassthroughUploadResponse:
        url = await _passthrough(uploader, request, IMAGE_CONTENT_TYPE, "image")
        return PassthroughUploadResponse(url=url)


async def _passthrough(
    uploader: Uploader,
    request: PassthroughUploadRequest,
    content_type: str,
    label: str,
) -> str:
    try:
        return await upload_base64(uploader, request.filename, request.base64, content_type)
    except GenerationError as exc:
        if exc.status_code >= 500:
            logger.error("%s upload failed: %s", label, exc)
        raise


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=default_settings.port)
