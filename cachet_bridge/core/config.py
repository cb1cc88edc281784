# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — env-driven, CLI flags as fallback.
A non-empty environment variable always wins over the matching flag.
"""

import argparse
import os
from typing import List, Optional


def _env(name: str, default: str) -> str:
    value = os.getenv(name, "")
    return value if value != "" else default


def _env_flag(name: str, default: bool) -> bool:
    return True if os.getenv(name, "") == "true" else default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = "cachet-bridge"
    SERVICE_VERSION: str = "1.0.0"
    WEBHOOK_PATH: str = "/api/v1/alerts/webhook"
    KEEP_ALIVE_TIMEOUT_SECONDS: int = 10

    def __init__(self, **flags):
        self.PROMETHEUS_TOKEN: str = _env("PROMETHEUS_TOKEN", flags.get("prometheus_token", ""))

        self.CACHETHQ_URL: str = _env("CACHETHQ_URL", flags.get("cachethq_url", "http://127.0.0.1/"))
        self.CACHETHQ_TOKEN: str = _env("CACHETHQ_TOKEN", flags.get("cachethq_token", ""))
        self.CACHETHQ_ROOT_CA: str = _env("CACHETHQ_ROOT_CA", flags.get("cachethq_root_ca", ""))
        self.CACHETHQ_SKIP_VERIFY_SSL: bool = _env_flag(
            "CACHETHQ_SKIP_VERIFY_SSL", flags.get("cachethq_skip_verify_ssl", False)
        )
        self.CACHETHQ_VISIBLE: bool = _env_flag("CACHETHQ_VISIBLE", flags.get("visible", False))
        self.CACHETHQ_TIMEOUT: float = _env_float("CACHETHQ_TIMEOUT", flags.get("cachethq_timeout", 5.0))

        # Retry is off unless explicitly enabled; Alertmanager re-delivers on 5xx.
        self.CACHETHQ_RETRY_ATTEMPTS: int = _env_int(
            "CACHETHQ_RETRY_ATTEMPTS", flags.get("cachethq_retry_attempts", 0)
        )
        self.CACHETHQ_RETRY_BACKOFF: float = _env_float(
            "CACHETHQ_RETRY_BACKOFF", flags.get("cachethq_retry_backoff", 0.3)
        )

        self.LABEL_NAME: str = _env("LABEL_NAME", flags.get("label_name", "alertname"))
        self.LOG_LEVEL: str = "DEBUG" if _env("LOG_LEVEL", flags.get("log_level", "info")).lower() == "debug" else "INFO"

        self.HTTP_PORT: int = _env_int("HTTP_PORT", flags.get("http_port", 8080))
        self.SSL_CERT_FILE: str = _env("SSL_CERT_FILE", flags.get("ssl_cert_file", ""))
        self.SSL_KEY_FILE: str = _env("SSL_KEY_FILE", flags.get("ssl_key_file", ""))

    @property
    def AUTH_ENABLED(self) -> bool:
        return self.PROMETHEUS_TOKEN != ""

    @property
    def TLS_ENABLED(self) -> bool:
        return self.SSL_CERT_FILE != "" and self.SSL_KEY_FILE != ""


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cachet-bridge",
        description="Reflect Prometheus Alertmanager notifications as CachetHQ incidents.",
    )
    parser.add_argument("--prometheus_token", default="",
                        help="token sent by Prometheus in the webhook configuration")
    parser.add_argument("--cachethq_url", default="http://127.0.0.1/", help="where to find CachetHQ")
    parser.add_argument("--cachethq_token", default="", help="token to send to CachetHQ")
    parser.add_argument("--cachethq_root_ca", default="", help="root SSL CA to use against CachetHQ")
    parser.add_argument("--cachethq_skip_verify_ssl", action="store_true",
                        help="don't check the SSL certificate of the https access to CachetHQ")
    parser.add_argument("--cachethq_timeout", type=float, default=5.0,
                        help="connect/read/write timeout in seconds for CachetHQ calls")
    parser.add_argument("--cachethq_retry_attempts", type=int, default=0,
                        help="extra attempts for retryable CachetHQ failures (0 disables retry)")
    parser.add_argument("--cachethq_retry_backoff", type=float, default=0.3,
                        help="base delay in seconds for exponential retry backoff")
    parser.add_argument("--log_level", default="info", choices=["info", "debug"], help="log level")
    parser.add_argument("--ssl_cert_file", default="", help="to be used with ssl_key_file: enable https server")
    parser.add_argument("--ssl_key_file", default="", help="to be used with ssl_cert_file: enable https server")
    parser.add_argument("--label_name", default="alertname", help="label to look for in Prometheus alert info")
    parser.add_argument("--http_port", type=int, default=8080, help="port to listen on")
    parser.add_argument("--visible", action="store_true", help="CachetHQ incident visibility")
    return parser


def load_settings(argv: Optional[List[str]] = None) -> Settings:
    """Parse CLI flags, then let the environment override them."""
    args = build_arg_parser().parse_args(argv)
    return Settings(**vars(args))
