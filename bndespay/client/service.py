"""BNDES card payments session client.

Sequences the remote calls of one purchase:

    login -> create_order -> finalize_order -> pre_authorize_payment
          -> confirm_capture -> logout

Each step depends on state stored by an earlier one (session token, order id).
Calls are single-shot and synchronous; nothing is retried. A client instance
keeps mutable session state and must not be shared between threads without
external locking.
"""

import re
import time
from collections.abc import Iterable, Mapping
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from bndespay.client.http import build_request, open_client
from bndespay.client.models import (
    Address,
    CaptureResult,
    ClientConfig,
    ErrorDetail,
    OrderItem,
    PaymentResult,
)
from bndespay.client.responses import decode_body, parse_error_detail, parse_identifier
from bndespay.common.config import BndesSettings
from bndespay.common.errors import (
    DomainError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from bndespay.common.logging import logger, operation_ctx, order_id_ctx
from bndespay.common.metrics import (
    bndes_request_duration_seconds,
    bndes_requests_total,
    bndes_transport_errors_total,
)
from bndespay.common.startup import log_startup_config
from bndespay.common.state_machine import SessionPhase, SessionState, require_order, require_session


_DIGITS = re.compile(r"[0-9]+")


def format_amount(amount: float) -> str:
    """Shortest text that round-trips the amount, without a trailing `.0`."""

    text = repr(float(amount))
    if text.endswith(".0"):
        return text[:-2]
    return text


class PaymentSessionClient:
    """Client for the BNDES payments API over mutual TLS."""

    def __init__(self, config: ClientConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self.state = SessionState()
        self._transport = transport
        if not config.verify_tls:
            logger.warning("TLS peer verification disabled url=%s", config.url)

    @classmethod
    def from_settings(
        cls,
        settings: BndesSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "PaymentSessionClient":
        """Build a client from `BNDES_*` environment variables."""

        settings = settings or BndesSettings()
        log_startup_config("bndespay", settings)
        return cls(settings.to_client_config(), transport=transport)

    # -- inspection --

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def session_token(self) -> int | None:
        return self.state.token

    @property
    def order_id(self) -> int | None:
        return self.state.order_id

    @property
    def payment_result(self) -> PaymentResult | None:
        return self.state.payment_result

    @property
    def capture_result(self) -> CaptureResult | None:
        return self.state.capture_result

    @property
    def capture_error(self) -> ErrorDetail | None:
        return self.state.capture_error

    @property
    def capture_error_code(self) -> str | None:
        detail = self.state.capture_error
        return detail.code if detail is not None else None

    @property
    def capture_error_description(self) -> str | None:
        detail = self.state.capture_error
        return detail.message if detail is not None else None

    # -- transport --

    def _send(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        attach_token: bool = True,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[int, str]:
        """Run one round trip and return (status_code, normalized body)."""

        operation_token = operation_ctx.set(operation)
        order_token = order_id_ctx.set(str(self.state.order_id or ""))
        try:
            if attach_token and self.state.token is None:
                logger.warning("authenticated call without session token path=%s", path)
            started = time.perf_counter()
            with open_client(self.config, self._transport) as client:
                request = build_request(
                    client,
                    method,
                    path,
                    token=self.state.token,
                    attach_token=attach_token,
                    payload=payload,
                    params=params,
                )
                try:
                    response = client.send(request)
                except httpx.TransportError as exc:
                    bndes_transport_errors_total.labels(operation=operation).inc()
                    logger.error("bndes_transport_error method=%s path=%s error=%s", method, path, exc)
                    raise TransportError(operation, str(exc)) from exc
                body = decode_body(response.content)
            elapsed = max(0.0, time.perf_counter() - started)
            bndes_request_duration_seconds.labels(operation=operation).observe(elapsed)
            bndes_requests_total.labels(operation=operation, status_code=str(response.status_code)).inc()
            logger.info(
                "bndes_response method=%s path=%s status=%s elapsed_ms=%d",
                method,
                path,
                response.status_code,
                elapsed * 1000,
            )
            return response.status_code, body
        finally:
            operation_ctx.reset(operation_token)
            order_id_ctx.reset(order_token)

    def _domain_error(self, operation: str, status_code: int, body: str) -> DomainError:
        detail = parse_error_detail(body)
        logger.warning("bndes_rejected operation=%s status=%s detail=%s", operation, status_code, detail)
        return DomainError(operation, detail, status_code=status_code)

    # -- session --

    def login(self) -> int:
        """Open a session; BNDES answers 201 with a bare integer token."""

        status, body = self._send(
            "login",
            "POST",
            "/v1/sessao",
            attach_token=False,
            payload={"cnpj": self.config.cnpj, "login": self.config.login, "senha": self.config.password},
        )
        if status != 201:
            raise ProtocolError("login", status)
        token = parse_identifier(body)
        if token is None:
            raise DomainError(
                "login",
                status_code=status,
                message=f'token "{body.strip()}" returned by BNDES looks invalid',
            )
        self.state.start_session(token)
        logger.info("bndes_session_opened")
        return token

    def logout(self) -> None:
        """Close the session and forget the token."""

        require_session(self.state, "logout")
        status, _ = self._send("logout", "DELETE", "/v1/sessao")
        if status != 200:
            raise ProtocolError("logout", status)
        self.state.end_session()
        logger.info("bndes_session_closed")

    # -- financing --

    def simulate_financing(self, amount: float) -> str:
        """Return the raw JSON simulation for `amount`, undecoded."""

        status, body = self._send(
            "simulate_financing",
            "GET",
            "/v1/simulacao/financiamento",
            params={"valor": format_amount(amount)},
        )
        if status != 200:
            raise self._domain_error("simulate_financing", status, body)
        return body

    # -- order lifecycle --

    def create_order(self, buyer_tax_id: str, card_bin: str) -> int:
        """Create an order for the buyer; `card_bin` is the card's first digits."""

        if not isinstance(card_bin, str) or _DIGITS.fullmatch(card_bin) is None:
            raise ValidationError(f"create_order - card_bin must contain only digits, got {card_bin!r}")
        status, body = self._send(
            "create_order",
            "POST",
            "/v1/pedido",
            payload={"cnpjComprador": buyer_tax_id, "binCartao": card_bin},
        )
        if status != 201:
            raise self._domain_error("create_order", status, body)
        order_id = parse_identifier(body)
        if order_id is None:
            raise DomainError(
                "create_order",
                status_code=status,
                message=f'order id "{body.strip()}" returned by BNDES looks invalid',
            )
        self.state.open_order(order_id)
        logger.info("bndes_order_created order_id=%s", order_id)
        return order_id

    def finalize_order(
        self,
        address: Address | Mapping[str, Any],
        items: Iterable[OrderItem | Mapping[str, Any]],
        payment_amount: float,
        installments: int,
    ) -> float:
        """Send delivery address, items and payment terms; returns the amount."""

        order_id = require_order(self.state, "finalize_order")
        try:
            address = Address.model_validate(address)
            items = [OrderItem.model_validate(item) for item in items]
        except PydanticValidationError as exc:
            raise ValidationError(f"finalize_order - invalid address or items: {exc}") from exc

        payload = address.model_dump(by_alias=True)
        payload.update(
            {
                "itens": [item.model_dump(by_alias=True) for item in items],
                "valorPagamento": payment_amount,
                "parcelas": installments,
            }
        )
        status, body = self._send("finalize_order", "PUT", f"/v1/pedido/{order_id}", payload=payload)
        if status != 200:
            raise self._domain_error("finalize_order", status, body)
        self.state.order_finalized = True
        return payment_amount

    def pre_authorize_payment(
        self,
        card_number: str,
        exp_month: int,
        exp_year: int,
        security_code: int | str,
    ) -> PaymentResult:
        """Reserve the order amount against the card limit (not a charge)."""

        order_id = require_order(self.state, "pre_authorize_payment")
        status, body = self._send(
            "pre_authorize_payment",
            "POST",
            f"/v1/pedido/{order_id}/pagamento",
            payload={
                "numeroCartao": card_number,
                "mesValidade": exp_month,
                "anoValidade": exp_year,
                "codigoSeguranca": str(security_code),
            },
        )
        if status != 200:
            raise self._domain_error("pre_authorize_payment", status, body)
        result = self._decode_result("pre_authorize_payment", PaymentResult, status, body)
        self.state.payment_result = result
        logger.info("bndes_payment_authorized order_id=%s situation=%s", order_id, result.situation)
        return result

    def confirm_capture(self, order_id: int, invoice_number: int) -> CaptureResult:
        """Capture a pre-authorized order, possibly one from another session."""

        if order_id != self.state.order_id:
            self.state.open_order(order_id)
        else:
            self.state.capture_error = None
        status, body = self._send(
            "confirm_capture",
            "POST",
            f"/v1/pedido/{order_id}/captura",
            payload={"notaFiscal": invoice_number},
        )
        if status != 200:
            error = self._domain_error("confirm_capture", status, body)
            self.state.capture_error = error.detail
            raise error
        result = self._decode_result("confirm_capture", CaptureResult, status, body)
        self.state.capture_result = result
        logger.info("bndes_order_captured order_id=%s situation=%s", order_id, result.situation)
        return result

    def _decode_result(self, operation: str, model, status: int, body: str):
        try:
            return model.model_validate_json(body)
        except PydanticValidationError as exc:
            raise DomainError(
                operation,
                status_code=status,
                message=f"unreadable success body: {exc}",
            ) from exc
