"""Session/order lifecycle state owned by one client instance.

The phase is derived from the stored fields so it can never drift from them:

    UNAUTHENTICATED -> AUTHENTICATED -> ORDER_OPEN -> ORDER_FINALIZED
        -> PAYMENT_AUTHORIZED -> CAPTURED
    any authenticated phase -> LOGGED_OUT
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from bndespay.common.errors import PreconditionError


class SessionPhase(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATED = "AUTHENTICATED"
    ORDER_OPEN = "ORDER_OPEN"
    ORDER_FINALIZED = "ORDER_FINALIZED"
    PAYMENT_AUTHORIZED = "PAYMENT_AUTHORIZED"
    CAPTURED = "CAPTURED"
    LOGGED_OUT = "LOGGED_OUT"


@dataclass
class SessionState:
    """Mutable session fields; not synchronized, one caller at a time."""

    token: int | None = None
    order_id: int | None = None
    order_finalized: bool = False
    payment_result: Any | None = None
    capture_result: Any | None = None
    capture_error: Any | None = None
    logged_out: bool = False

    @property
    def phase(self) -> SessionPhase:
        if self.logged_out:
            return SessionPhase.LOGGED_OUT
        if self.capture_result is not None:
            return SessionPhase.CAPTURED
        if self.payment_result is not None:
            return SessionPhase.PAYMENT_AUTHORIZED
        if self.order_finalized:
            return SessionPhase.ORDER_FINALIZED
        if self.order_id is not None:
            return SessionPhase.ORDER_OPEN
        if self.token is not None:
            return SessionPhase.AUTHENTICATED
        return SessionPhase.UNAUTHENTICATED

    def start_session(self, token: int) -> None:
        self.token = token
        self.logged_out = False

    def end_session(self) -> None:
        self.token = None
        self.logged_out = True

    def open_order(self, order_id: int) -> None:
        """Track a new order and forget results tied to the previous one."""

        self.order_id = order_id
        self.order_finalized = False
        self.payment_result = None
        self.capture_result = None
        self.capture_error = None


def require_session(state: SessionState, operation: str) -> int:
    """Return the session token or raise when no session is active."""

    if state.token is None or state.token <= 0:
        raise PreconditionError(f"{operation} - no active session token, call login first")
    return state.token


def require_order(state: SessionState, operation: str) -> int:
    """Return the current order id or raise when no order was created."""

    if not state.order_id:
        raise PreconditionError(f"{operation} - no order id, call create_order first")
    return state.order_id
