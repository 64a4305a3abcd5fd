"""Environment-driven settings for the BNDES client.

Process-level knobs (service name, log level) are loaded once at import time.
Credentials are only read when a client is built from the environment (see
`.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of process configuration from environment variables."""

    service_name: str = "bndespay"
    log_level: str = "INFO"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class BndesSettings(BaseSettings):
    """Credentials and transport options for the BNDES payments API."""

    cnpj: str
    login: str
    password: str
    url: str = "https://www.cartaobndes.gov.br/cbdsrv/api"
    cert_path: str
    key_path: str
    verify_tls: bool = True
    connect_timeout: float = 10.0
    model_config = SettingsConfigDict(env_prefix="BNDES_", env_file=".env", extra="ignore")

    def to_client_config(self):
        # Deferred import keeps config free of client-side dependencies.
        from bndespay.client.models import ClientConfig

        return ClientConfig(
            cnpj=self.cnpj,
            login=self.login,
            password=self.password,
            url=self.url,
            cert_path=self.cert_path,
            key_path=self.key_path,
            verify_tls=self.verify_tls,
            connect_timeout=self.connect_timeout,
        )


settings = CommonSettings()
