from enum import Enum


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    PROVIDER_ERROR = "provider_error"
    STORAGE_ERROR = "storage_error"


class GenerationError(Exception):
    """Base for failures that map onto a single JSON error response."""

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR
    status_code: int = 500
    message: str = "request failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class BadRequest(GenerationError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400
    message = "invalid request"


class ProviderError(GenerationError):
    kind = ErrorKind.PROVIDER_ERROR
    message = "image generation failed"


class EmptyResponse(ProviderError):
    message = "provider returned no image entries"


class UnrecognizedFormat(ProviderError):
    message = "provider entry has neither inline data nor a url"


class StorageUnavailable(GenerationError):
    kind = ErrorKind.STORAGE_ERROR
    message = "storage upload failed"
