import base64
import binascii

from imagegen_api.errors import BadRequest
from imagegen_api.services.generation import Uploader

AUDIO_CONTENT_TYPE = "audio/mpeg"
IMAGE_CONTENT_TYPE = "image/png"


async def upload_base64(
    uploader: Uploader,
    filename: str | None,
    base64_payload: str | None,
    content_type: str,
) -> str:
    if not filename or not base64_payload:
        raise BadRequest("Missing filename or base64 data")
    try:
        data = base64.b64decode(base64_payload)
    except (binascii.Error, ValueError) as exc:
        raise BadRequest(f"invalid base64 data: {exc}") from exc

    await uploader.upload(data, filename, content_type)
    return uploader.public_url_for(filename)
