"""Decoding helpers for BNDES response bodies."""

import re

from pydantic import ValidationError as PydanticValidationError

from bndespay.client.models import ErrorDetail, ErrorEnvelope
from bndespay.common.logging import logger


_IDENTIFIER = re.compile(r'\s*"?\s*(-?\d+)\s*"?\s*')


def decode_body(content: bytes) -> str:
    """Normalize a response body to text before any JSON decoding.

    BNDES answers in UTF-8, but some error pages still come back in a legacy
    single-byte charset; those are read as Latin-1 instead of failing.
    """

    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("non-utf8 response body, decoding as latin-1 bytes=%s", len(content))
        return content.decode("latin-1")


def parse_identifier(text: str) -> int | None:
    """Read the bare integer BNDES returns for tokens and order ids.

    Returns None unless the whole body is one positive integer.
    """

    match = _IDENTIFIER.fullmatch(text)
    if match is None:
        return None
    value = int(match.group(1))
    if value <= 0:
        return None
    return value


def parse_error_detail(text: str) -> ErrorDetail:
    """Extract the first code/message pair, or the unknown-error placeholder."""

    try:
        envelope = ErrorEnvelope.model_validate_json(text)
    except PydanticValidationError:
        return ErrorDetail()
    first = envelope.mensagens[0]
    return ErrorDetail(code=_code_text(first.codigo), message=first.mensagem.strip())


def _code_text(codigo) -> str:
    if codigo is None:
        return ""
    if isinstance(codigo, float) and codigo.is_integer():
        codigo = int(codigo)
    return str(codigo).strip()
