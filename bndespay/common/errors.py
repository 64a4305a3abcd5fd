"""Error taxonomy raised by the BNDES session client.

Hierarchy:
    BndesError
    ├── ConfigError        certificate/key missing at construction
    ├── ValidationError    caller argument rejected before any I/O
    ├── PreconditionError  call issued before the state it depends on exists
    ├── TransportError     request never got an HTTP response
    ├── ProtocolError      unexpected HTTP status, no error envelope expected
    └── DomainError        API rejected the call with an error envelope
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bndespay.client.models import ErrorDetail


class BndesError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(BndesError):
    pass


class ValidationError(BndesError):
    pass


class PreconditionError(BndesError):
    pass


class TransportError(BndesError):
    """The underlying HTTP request could not be completed (network/TLS)."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} - request failed: {message}")
        self.operation = operation


class ProtocolError(BndesError):
    """HTTP status differs from the documented success status."""

    def __init__(self, operation: str, status_code: int) -> None:
        super().__init__(f"{operation} - BNDES returned HTTP {status_code}")
        self.operation = operation
        self.status_code = status_code


class DomainError(BndesError):
    """The API refused the call; `detail` holds the parsed code/message pair."""

    def __init__(
        self,
        operation: str,
        detail: ErrorDetail | None = None,
        *,
        status_code: int | None = None,
        message: str | None = None,
    ) -> None:
        text = message if message is not None else f"BNDES returned {detail}"
        super().__init__(f"{operation} - {text}")
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
