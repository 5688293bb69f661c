"""Locally synthesised identifiers."""

import secrets
import time

LOCAL_ID_PREFIX = "local-"


def local_id() -> str:
    """Return ``local-<epoch-ms>-<hex>`` for records no authority has keyed.

    The random suffix keeps ids unique when several requests land in the
    same millisecond.
    """
    return f"{LOCAL_ID_PREFIX}{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def is_local_id(value: str) -> bool:
    """Check whether an id was synthesised locally."""
    return value.startswith(LOCAL_ID_PREFIX)
