# errors.py

from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class ValidationError(TrackerError, ValueError):
    pass


class NotFoundError(TrackerError, LookupError):
    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} {ident!r} not found")
        self.kind = kind
        self.ident = ident


class MalformedDateError(TrackerError, ValueError):
    def __init__(self, value):
        super().__init__(f"Unparseable date: {value!r}")
        self.value = value


class StoreError(TrackerError):
    """A tabular store call failed. ``transient`` marks timeouts and dropped connections."""

    def __init__(self, message: str, *, table: str | None = None, transient: bool = False):
        super().__init__(message)
        self.table = table
        self.transient = transient


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class DispatchError(TrackerError):
    def __init__(self, recipient: str, message: str):
        super().__init__(f"Could not deliver to {recipient}: {message}")
        self.recipient = recipient
