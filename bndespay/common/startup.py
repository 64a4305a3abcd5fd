"""Startup-time helpers for safe config logging."""

from pydantic_settings import BaseSettings

from bndespay.common.logging import logger


def _safe_value(name: str, value) -> str:
    """Return the loaded value with simple redaction for secret-like field names."""

    if value is None:
        return "<unset>"
    if any(secret in name.upper() for secret in ["API_KEY", "SECRET", "PASSWORD", "TOKEN", "SENHA"]):
        return "<redacted>"
    return str(value)


def log_startup_config(service_name: str, loaded: BaseSettings) -> dict[str, str]:
    """Log the effective settings (env and `.env` alike) for quick troubleshooting."""

    config = {"service": service_name}
    for name, value in loaded.model_dump().items():
        config[name] = _safe_value(name, value)
    logger.info("startup_config=%s", config)
    return config
