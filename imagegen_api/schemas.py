from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    prompt: str | None = None


class GenerateResponse(BaseModel):
    url: str
    key: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    uptime: float


class ImageUrlResponse(BaseModel):
    url: str


class PassthroughUploadRequest(BaseModel):
    filename: str | None = None
    base64: str | None = None


class PassthroughUploadResponse(BaseModel):
    uploaded: bool = True
    url: str
