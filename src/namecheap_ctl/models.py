"""Core data models used by namecheap-ctl."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Union

HOSTNAME_TYPES = {"CNAME", "NS", "MX", "ALIAS", "PTR"}

MAX_TTL = 2**32 - 1
MAX_MX_PREFERENCE = 2**16 - 1


class NamecheapCtlError(Exception):
    """Base exception for namecheap-ctl."""


class ValidationError(NamecheapCtlError):
    """Raised when desired-state input is invalid."""


class ConfigError(NamecheapCtlError):
    """Raised when required configuration is missing or malformed."""


class RegistrarAPIError(NamecheapCtlError):
    """Raised when the registrar API reports a failure."""

    def __init__(self, message: str, number: str | None = None):
        super().__init__(message)
        self.message = message
        self.number = number

    def __str__(self) -> str:
        if self.number:
            return f"Error {self.number}: {self.message}"
        return self.message


class RateLimitedError(RegistrarAPIError):
    """Raised when the registrar rejects a call for exceeding its request quota."""


def _coerce_uint(value: Any, upper: int, label: str) -> int:
    """Return value as an int within [0, upper]."""
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be an integer, got {value!r}.") from exc
    if number < 0 or number > upper:
        raise ValidationError(f"{label} {number} is out of range 0..{upper}.")
    return number


def _absolute_host(value: str) -> str:
    """Return a lower-cased hostname with a trailing dot."""
    stripped = value.strip().lower()
    if not stripped:
        return "."
    return stripped if stripped.endswith(".") else f"{stripped}."


@dataclass
class RecordConfig:
    """A single DNS record, either desired or reconstructed from the registrar."""

    name: str
    name_fqdn: str
    type: str
    target: str
    ttl: int = 1800
    mx_preference: int = 0
    original: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.ttl = _coerce_uint(self.ttl, MAX_TTL, "TTL")
        self.mx_preference = _coerce_uint(self.mx_preference, MAX_MX_PREFERENCE, "MX preference")

    def canonical_name(self) -> str:
        return self.name_fqdn.strip().rstrip(".").lower()

    def canonical_type(self) -> str:
        return self.type.strip().upper()

    def canonical_target(self) -> str:
        """Return the target in the form used for comparisons."""
        if self.canonical_type() in HOSTNAME_TYPES:
            return _absolute_host(self.target)
        return self.target.strip()

    def key(self) -> tuple[str, str]:
        """Return the (name, type) pair records are grouped by."""
        return (self.canonical_name(), self.canonical_type())

    def content(self) -> tuple[str, int]:
        """Return the comparable payload, excluding TTL."""
        mx = self.mx_preference if self.canonical_type() == "MX" else 0
        return (self.canonical_target(), mx)

    def __str__(self) -> str:
        target = self.target
        if self.canonical_type() == "MX":
            target = f"{self.mx_preference} {target}"
        return f"{self.type} {self.name_fqdn} {target} ttl={self.ttl}"


@dataclass(frozen=True)
class Nameserver:
    """A delegation target."""

    name: str


@dataclass
class DomainConfig:
    """Desired state for one domain."""

    name: str
    records: list[RecordConfig] = field(default_factory=list)
    nameservers: list[Nameserver] = field(default_factory=list)

    def punycode(self) -> None:
        """Convert the domain and record names to their ASCII form in place."""
        from .normalize import to_ascii

        self.name = to_ascii(self.name)
        for record in self.records:
            if record.name != "@":
                record.name = to_ascii(record.name)
            record.name_fqdn = to_ascii(record.name_fqdn)

    def filter(self, predicate: Callable[[RecordConfig], bool]) -> None:
        """Keep only the records for which predicate returns True."""
        self.records = [record for record in self.records if predicate(record)]


@dataclass(frozen=True)
class RemoteHost:
    """A host entry as stored by the registrar."""

    name: str
    type: str
    address: str
    ttl: int = 1800
    mx_pref: int = 0
    host_id: int | None = None


@dataclass(frozen=True)
class DomainInfo:
    """Registrar-level details of a domain."""

    domain: str
    nameservers: tuple[str, ...] = ()
    using_registrar_dns: bool = False


@dataclass(frozen=True)
class ReplaceRecords:
    """Replace every host record of a zone."""

    domain: str
    sld: str
    tld: str
    hosts: tuple[RemoteHost, ...]

    kind = "replace_records"


@dataclass(frozen=True)
class SetNameservers:
    """Delegate a domain to a custom nameserver set."""

    domain: str
    sld: str
    tld: str
    nameservers: tuple[str, ...]

    kind = "set_nameservers"


CorrectionAction = Union[ReplaceRecords, SetNameservers]


@dataclass(frozen=True)
class Correction:
    """A described change that the provider knows how to execute."""

    description: str
    action: CorrectionAction

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable view of the correction."""
        action = self.action
        data: dict[str, Any] = {
            "description": self.description,
            "action": action.kind,
            "domain": action.domain,
        }
        if isinstance(action, ReplaceRecords):
            data["hosts"] = [
                {
                    "id": host.host_id,
                    "name": host.name,
                    "type": host.type,
                    "address": host.address,
                    "ttl": host.ttl,
                    "mx_pref": host.mx_pref,
                }
                for host in action.hosts
            ]
        else:
            data["nameservers"] = list(action.nameservers)
        return data
