import re
import time

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_session_id(session_id: str) -> str:
    return _UNSAFE.sub("_", session_id)


def build_key(session_id: str, now_ms: int, extension: str = "png") -> str:
    return f"{sanitize_session_id(session_id)}-{now_ms}.{extension}"


def now_millis() -> int:
    return time.time_ns() // 1_000_000
