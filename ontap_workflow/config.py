"""Configuration loader for the ONTAP workflow core.

This module provides configuration management using Pydantic models
for validation and environment variable loading.

Example:
    >>> from ontap_workflow.config import load_config
    >>> config = load_config()
    >>> print(config.client.job_timeout)
    300000

Environment Variables:
    ONTAP_HOST: Cluster management host (optional).
    ONTAP_PORT: Cluster management port (default: 443).
    ONTAP_USERNAME: Default username (optional).
    ONTAP_PASSWORD: Default password (optional).
    ONTAP_ALLOW_INSECURE_TLS: Skip certificate validation (default: false).
    ONTAP_MAX_PAGES: Safety cap on followed pagination links (default: unset).
    REQUEST_TIMEOUT: Request timeout in milliseconds (default: 30000).
    JOB_TIMEOUT: Job wait timeout in milliseconds (default: 300000).
    JOB_POLL_INTERVAL: Job polling interval in milliseconds (default: 2000).
    LOG_LEVEL: Logging level (default: INFO).
    LOG_JSON: Emit JSON logs (default: false).
    LOG_FILE: Optional log file path.
"""

from __future__ import annotations

import ipaddress
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 443
DEFAULT_JOB_TIMEOUT_MS = 300000
DEFAULT_POLL_INTERVAL_MS = 2000


def _is_ipv6(host: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(host.strip("[]")), ipaddress.IPv6Address)
    except ValueError:
        return False


class OntapTarget(BaseModel):
    """Connection target for a single ONTAP cluster.

    Supplied per call by the host; the client keeps no session beyond it.

    Attributes:
        host: Cluster management hostname or IP address.
        port: HTTPS port of the management interface.
        username: Username for basic authentication.
        password: Password for basic authentication.
        allow_insecure_tls: Skip TLS certificate validation (self-signed certs).
    """

    host: str = Field(description="Cluster management host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="HTTPS port")
    username: str = Field(default="", description="ONTAP username")
    password: str = Field(default="", repr=False, description="ONTAP password")
    allow_insecure_tls: bool = Field(
        default=False,
        description="Connect even if the certificate is invalid",
    )

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Strip whitespace and reject an empty host or one carrying a port.

        Raises:
            ValueError: If the host is empty, or is not a bare hostname or
                IP address (e.g. "cluster1:8443" or "https://cluster1").
        """
        v = v.strip()
        if not v:
            raise ValueError("host is required")
        if _is_ipv6(v):
            return v.strip("[]")
        if ":" in v:
            raise ValueError("host must not include a scheme or port; set port separately")
        if any(c in v for c in "/?#@ "):
            raise ValueError(f"invalid host: {v}")
        return v

    @property
    def base_url(self) -> str:
        """Base URL of the management interface, without the ``/api`` prefix."""
        host = f"[{self.host}]" if _is_ipv6(self.host) else self.host
        return f"https://{host}:{self.port}"

    model_config = {"extra": "ignore"}


class ClientConfig(BaseModel):
    """Client behaviour settings.

    Attributes:
        log_level: Logging level.
        log_json: Use JSON format for logs.
        log_file: Optional log file path.
        request_timeout: Per-request timeout in milliseconds.
        job_timeout: How long to wait for an async job, in milliseconds.
        poll_interval: Delay between job status polls, in milliseconds.
        max_pages: Optional cap on followed pagination links (None = unbounded).
    """

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level",
    )
    log_json: bool = Field(default=False, description="Use JSON format for logs")
    log_file: str | None = Field(default=None, description="Optional log file path")
    request_timeout: int = Field(
        default=30000,
        ge=1000,
        le=600000,
        description="Request timeout in milliseconds",
    )
    job_timeout: int = Field(
        default=DEFAULT_JOB_TIMEOUT_MS,
        ge=0,
        description="Job wait timeout in milliseconds",
    )
    poll_interval: int = Field(
        default=DEFAULT_POLL_INTERVAL_MS,
        ge=0,
        description="Job polling interval in milliseconds",
    )
    max_pages: int | None = Field(
        default=None,
        ge=1,
        description="Maximum pages to follow during pagination",
    )

    model_config = {"extra": "ignore"}


class Config(BaseModel):
    """Main configuration container.

    Attributes:
        target: Default cluster target, if one is configured.
        client: Client settings.
    """

    target: OntapTarget | None = None
    client: ClientConfig = Field(default_factory=ClientConfig)

    model_config = {"extra": "ignore"}


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from environment variables.

    Args:
        env_file: Optional path to .env file.

    Returns:
        Validated Config object. ``target`` is None when ONTAP_HOST is unset.

    Raises:
        ConfigurationError: If a value fails validation.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    logger.debug("Loading configuration from environment")

    try:
        target = None
        host = os.getenv("ONTAP_HOST")
        if host:
            target = OntapTarget(
                host=host,
                port=int(os.getenv("ONTAP_PORT", str(DEFAULT_PORT))),
                username=os.getenv("ONTAP_USERNAME", ""),
                password=os.getenv("ONTAP_PASSWORD", ""),
                allow_insecure_tls=_env_bool("ONTAP_ALLOW_INSECURE_TLS"),
            )

        max_pages = os.getenv("ONTAP_MAX_PAGES")
        client_config = ClientConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOG_JSON"),
            log_file=os.getenv("LOG_FILE"),
            request_timeout=int(os.getenv("REQUEST_TIMEOUT", "30000")),
            job_timeout=int(os.getenv("JOB_TIMEOUT", str(DEFAULT_JOB_TIMEOUT_MS))),
            poll_interval=int(
                os.getenv("JOB_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL_MS))
            ),
            max_pages=int(max_pages) if max_pages else None,
        )

        config = Config(target=target, client=client_config)

    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logger.info(
        "Configuration loaded successfully",
        extra={
            "host": target.host if target else None,
            "job_timeout": config.client.job_timeout,
        },
    )
    return config
