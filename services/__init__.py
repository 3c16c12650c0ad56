# services/__init__.py
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def new_record_id() -> str:
    """``<epoch millis>-<9 random base36 chars>``"""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"
