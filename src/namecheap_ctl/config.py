"""Environment-driven configuration loader."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .models import ConfigError

PRODUCTION_URL = "https://api.namecheap.com/xml.response"
SANDBOX_URL = "https://api.sandbox.namecheap.com/xml.response"

NAMECHEAP_DEFAULT_NS = ("dns1.registrar-servers.com", "dns2.registrar-servers.com")
NAMECHEAP_NS_DOMAIN = "registrar-servers.com"


@dataclass(frozen=True)
class RegistrarDefaults:
    """Nameservers the registrar delegates to when its own DNS is in use."""

    nameservers: tuple[str, ...] = NAMECHEAP_DEFAULT_NS

    def is_registrar_host(self, host: str) -> bool:
        """Return True for a default nameserver or any host under registrar-servers.com."""
        candidate = host.strip().rstrip(".").lower()
        if candidate.endswith(f".{NAMECHEAP_NS_DOMAIN}"):
            return True
        return any(candidate == known.rstrip(".").lower() for known in self.nameservers)


@dataclass(frozen=True)
class Credentials:
    """Holds Namecheap API credentials."""

    api_user: str
    api_key: str
    username: str
    client_ip: str


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    credentials: Credentials
    base_url: str = PRODUCTION_URL
    timeout: float = 30.0
    max_attempts: int = 23
    backoff: float = 5.0
    default_record_ttl: int = 1800
    log_level: str = "INFO"
    defaults: RegistrarDefaults = field(default_factory=RegistrarDefaults)


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Return a boolean parsed from a string."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_number(name: str, default: str, kind: type = int):
    """Parse a numeric environment variable."""
    raw = os.getenv(name, default)
    try:
        value = kind(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got '{raw}'.") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative.")
    return value


def _parse_nameservers(raw: str | None) -> RegistrarDefaults:
    """Parse a comma-separated nameserver override."""
    if not raw:
        return RegistrarDefaults()
    names = tuple(part.strip().rstrip(".").lower() for part in raw.split(",") if part.strip())
    if not names:
        return RegistrarDefaults()
    return RegistrarDefaults(nameservers=names)


def load_credentials() -> Credentials:
    """Read API credentials from the environment, failing fast when absent."""
    api_user = os.getenv("NAMECHEAP_API_USER", "").strip()
    api_key = os.getenv("NAMECHEAP_API_KEY", "").strip()
    if not api_user or not api_key:
        raise ConfigError("NAMECHEAP_API_USER and NAMECHEAP_API_KEY must be provided.")
    return Credentials(
        api_user=api_user,
        api_key=api_key,
        username=os.getenv("NAMECHEAP_USERNAME", "").strip() or api_user,
        client_ip=os.getenv("NAMECHEAP_CLIENT_IP", "127.0.0.1").strip(),
    )


def load_config() -> AppConfig:
    """Load configuration values from the environment (and .env)."""
    load_dotenv()
    credentials = load_credentials()

    base_url = os.getenv("NAMECHEAP_BASE_URL")
    if not base_url:
        base_url = SANDBOX_URL if _parse_bool(os.getenv("NAMECHEAP_SANDBOX")) else PRODUCTION_URL

    max_attempts = _parse_number("RATE_LIMIT_MAX_ATTEMPTS", "23")
    if max_attempts < 1:
        raise ConfigError("RATE_LIMIT_MAX_ATTEMPTS must be at least 1.")

    return AppConfig(
        credentials=credentials,
        base_url=base_url,
        timeout=_parse_number("NAMECHEAP_TIMEOUT", "30", float),
        max_attempts=max_attempts,
        backoff=_parse_number("RATE_LIMIT_BACKOFF", "5", float),
        default_record_ttl=_parse_number("DEFAULT_RECORD_TTL", "1800"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        defaults=_parse_nameservers(os.getenv("NAMECHEAP_DEFAULT_NAMESERVERS")),
    )
