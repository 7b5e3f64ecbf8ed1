from __future__ import annotations

import os
import secrets
import string
import time
import uuid

_TOKEN_BYTES = 32
_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_uuid7() -> str:
    """
    Generate a UUIDv7 string (time-ordered).

    UUIDv7 layout per draft:
    - 48-bit Unix timestamp in milliseconds
    - 4-bit version (0b0111)
    - 74-bit randomness

    Used as a column default, so it must be callable with no arguments.
    """
    ts_ms = int(time.time() * 1000)
    ts_bytes = ts_ms.to_bytes(6, "big", signed=False)
    rand_bytes = os.urandom(10)
    raw = bytearray(ts_bytes + rand_bytes)
    raw[6] = (raw[6] & 0x0F) | 0x70
    raw[8] = (raw[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(raw)))


def generate_magic_token() -> str:
    """URL-safe opaque token for link-based (login-free) training access."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def random_code(length: int = 6) -> str:
    """Uppercase letters and digits, e.g. '7K2Q0P'."""
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))
