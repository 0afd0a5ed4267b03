from __future__ import annotations

from .errors import DecodeError

EMPTY_PAYLOAD = "Record payload is empty."

def decode_record(payload: bytes) -> str:
    """Strict UTF-8; empty payloads render as a placeholder so they stay visible in a tail."""
    if not payload:
        return EMPTY_PAYLOAD
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(str(e)) from e
