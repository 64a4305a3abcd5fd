"""Client configuration and BNDES request/response shapes.

Wire field names follow the BNDES API (Portuguese); Python attributes are
snake_case and the models serialize with `by_alias=True`.
"""

import os
from dataclasses import dataclass, field
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field

from bndespay.common.errors import ConfigError


UNKNOWN_ERROR = "(erro desconhecido)"


class OrderSituation(IntEnum):
    """Order situation codes returned by the payment and capture calls."""

    ABERTO = 10
    AUTORIZADO = 20
    NAO_AUTORIZADO = 30
    CAPTURADO = 40
    NAO_CAPTURADO = 50


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for one supplier accredited by BNDES."""

    cnpj: str
    login: str
    password: str = field(repr=False)
    url: str
    cert_path: str
    key_path: str
    # Peer/hostname verification; only disable for legacy deployments.
    verify_tls: bool = True
    connect_timeout: float = 10.0

    def __post_init__(self) -> None:
        if not os.path.exists(self.cert_path):
            raise ConfigError(f'certificate file "{self.cert_path}" does not exist')
        if not os.path.exists(self.key_path):
            raise ConfigError(f'private key file "{self.key_path}" does not exist')
        object.__setattr__(self, "url", self.url.rstrip("/"))


class Address(BaseModel):
    """Buyer address sent when finalizing an order."""

    # Numbers and CEPs often arrive as ints; BNDES accepts them as text.
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    street: str = Field(alias="endereco")
    number: str = Field(alias="numero")
    complement: str | None = Field(default="", alias="complemento")
    neighborhood: str = Field(alias="bairro")
    postal_code: str = Field(alias="cep")
    city: str = Field(alias="municipio")
    state: str = Field(alias="uf")


class OrderItem(BaseModel):
    """One order line; BNDES expects product code, unit price and quantity."""

    model_config = ConfigDict(populate_by_name=True)

    product: str | int = Field(alias="produto")
    unit_price: float = Field(alias="precoUnitario", ge=0)
    quantity: int = Field(alias="quantidade", gt=0)


class _SituationResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    situation: int | None = Field(default=None, alias="situacao")

    @property
    def order_situation(self) -> OrderSituation | None:
        if self.situation is None:
            return None
        try:
            return OrderSituation(self.situation)
        except ValueError:
            return None

    def raw(self) -> dict:
        """Payload as received, wire names included."""

        return self.model_dump(by_alias=True)


class PaymentResult(_SituationResult):
    """Decoded `/pagamento` response (pre-authorization)."""


class CaptureResult(_SituationResult):
    """Decoded `/captura` response."""


class ErrorDetail(BaseModel):
    """First entry of the BNDES `mensagens` error list."""

    model_config = ConfigDict(frozen=True)

    code: str = ""
    message: str = UNKNOWN_ERROR

    @property
    def is_unknown(self) -> bool:
        return not self.code

    def __str__(self) -> str:
        if self.is_unknown:
            return self.message
        return f"{self.code} | {self.message}"


class ErrorMessage(BaseModel):
    codigo: str | int | float | None = None
    mensagem: str


class ErrorEnvelope(BaseModel):
    """Error body: `{"mensagens": [{"codigo": ..., "mensagem": ...}]}`."""

    model_config = ConfigDict(extra="ignore")

    mensagens: list[ErrorMessage] = Field(min_length=1)
