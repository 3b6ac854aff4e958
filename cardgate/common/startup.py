"""Startup-time helpers for safe config logging.

The gateway's config is mostly URLs; a bank or collector URL may carry
`user:password@` credentials, which are replaced before logging.
"""

import os
from urllib.parse import urlsplit, urlunsplit

from cardgate.common.logging import logger

STARTUP_KEYS = [
    "SERVICE_NAME",
    "LOG_LEVEL",
    "BANK_BASE_URL",
    "BANK_TIMEOUT_SECONDS",
    "TRACING_ENABLED",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
]


def redact_url_credentials(value: str) -> str:
    """Replace any userinfo in a URL with `<redacted>`; non-URLs pass through."""

    parts = urlsplit(value)
    if not parts.netloc or "@" not in parts.netloc:
        return value
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=f"<redacted>@{host}"))


def _safe_env(name: str) -> str:
    value = os.getenv(name)
    if value is None:
        return "<unset>"
    return redact_url_credentials(value)


def log_startup_config(service_name: str, keys: list[str] = STARTUP_KEYS) -> dict[str, str]:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name}
    for key in keys:
        config[key] = _safe_env(key)
    logger.info("startup_config=%s", config)
    return config
