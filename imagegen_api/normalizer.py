import base64
import binascii
from collections.abc import Awaitable, Callable

from imagegen_api.errors import EmptyResponse, UnrecognizedFormat

Fetcher = Callable[[str], Awaitable[bytes]]


async def normalize_response(response: dict, fetch: Fetcher) -> bytes:
    """Return the image bytes carried by a provider response.

    Only the first entry of `data` is used; additional candidates are ignored.
    An entry may carry inline `b64_json` or a remote `url`, which is fetched
    once with no retry.
    """
    entries = response.get("data") if isinstance(response, dict) else None
    if not entries:
        raise EmptyResponse()

    if not isinstance(entries, list):
        raise UnrecognizedFormat(f"data is {type(entries).__name__}, expected a list")

    entry = entries[0]
    if not isinstance(entry, dict):
        raise UnrecognizedFormat(f"unexpected entry type: {type(entry).__name__}")

    inline = entry.get("b64_json")
    if inline:
        try:
            return base64.b64decode(inline)
        except (binascii.Error, ValueError) as exc:
            raise UnrecognizedFormat(f"invalid base64 payload: {exc}") from exc

    remote_url = entry.get("url")
    if remote_url:
        return await fetch(str(remote_url))

    raise UnrecognizedFormat(f"entry keys: {sorted(entry.keys())}")
