"""Structured JSON logging with per-call context fields."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from bndespay.common.config import settings


operation_ctx: ContextVar[str] = ContextVar("operation", default="")
order_id_ctx: ContextVar[str] = ContextVar("order_id", default="")


class ContextFilter(logging.Filter):
    """Inject service and call identifiers into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = settings.service_name
        record.operation = operation_ctx.get()
        record.order_id = order_id_ctx.get()
        return True


def configure_logging() -> None:
    """Configure root logger once per process."""

    handler = logging.StreamHandler(sys.stdout)
    context_filter = ContextFilter()
    handler.addFilter(context_filter)
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(service_name)s %(operation)s %(order_id)s %(message)s"
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)
    root.addFilter(context_filter)


logger = logging.getLogger("bndespay")
