"""Helpers that turn desired and remote records into a comparable shape."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import dns.exception
import dns.name
import tldextract

from .config import RegistrarDefaults
from .models import HOSTNAME_TYPES, DomainConfig, RecordConfig, RemoteHost, ValidationError

LOG = logging.getLogger("namecheap_ctl")

PARKING_MARKER = "parkingpage"

# Offline extractor backed by the public suffix snapshot bundled with tldextract.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


def to_ascii(name: str) -> str:
    """Return the IDNA (punycode) form of a domain name, lower-cased and without trailing dot."""
    stripped = name.strip().rstrip(".")
    if not stripped:
        return stripped
    try:
        return dns.name.from_text(stripped).to_text(omit_final_dot=True).lower()
    except (dns.exception.DNSException, UnicodeError) as exc:
        raise ValidationError(f"Invalid domain name '{name}': {exc}") from exc


def split_domain(domain: str) -> tuple[str, str]:
    """Split a domain into the (SLD, TLD) pair the registrar addresses zones by."""
    parts = _EXTRACT(domain)
    if not parts.domain or not parts.suffix:
        raise ValidationError(f"Cannot determine the registrable domain of '{domain}'.")
    return parts.domain, parts.suffix


def add_origin(name: str, origin: str) -> str:
    """Return name as a fully qualified name (without trailing dot) under origin."""
    stripped = name.strip()
    trimmed_origin = origin.strip().rstrip(".")
    if stripped in {"", "@"}:
        return trimmed_origin
    if stripped.endswith("."):
        return stripped[:-1]
    return f"{stripped}.{trimmed_origin}"


def trim_domain_name(fqdn: str, origin: str) -> str:
    """Return fqdn relative to origin, using '@' for the apex."""
    try:
        name = dns.name.from_text(fqdn.strip().rstrip(".") or "@", origin=None)
        zone = dns.name.from_text(origin.strip().rstrip("."))
    except dns.exception.DNSException as exc:
        raise ValidationError(f"Invalid record name '{fqdn}': {exc}") from exc
    if not name.is_absolute():
        name = name.derelativize(dns.name.root)
    if not name.is_subdomain(zone):
        return fqdn.rstrip(".")
    return name.relativize(zone).to_text()


def downcase(records: Iterable[RecordConfig]) -> None:
    """Case-normalize names, types and hostname targets in place."""
    for record in records:
        record.name = record.name.lower()
        record.name_fqdn = record.name_fqdn.lower()
        record.type = record.canonical_type()
        if record.type in HOSTNAME_TYPES:
            record.target = record.target.lower()


def records_from_hosts(hosts: Sequence[RemoteHost], domain: str) -> list[RecordConfig]:
    """Convert registrar hosts into records, dropping SOA entries."""
    records: list[RecordConfig] = []
    for host in hosts:
        if host.type.upper() == "SOA":
            continue
        records.append(
            RecordConfig(
                name=host.name or "@",
                name_fqdn=add_origin(host.name, domain),
                type=host.type,
                target=host.address,
                ttl=host.ttl,
                mx_preference=host.mx_pref,
                original=host,
            )
        )
    downcase(records)
    return records


def filter_apex_ns(domain: DomainConfig, defaults: RegistrarDefaults) -> None:
    """Drop desired apex NS records; the registrar does not let them be changed."""
    apex = domain.name.rstrip(".").lower()

    def _keep(record: RecordConfig) -> bool:
        if record.canonical_type() != "NS":
            return True
        if record.name != "@" and record.canonical_name() != apex:
            return True
        if not defaults.is_registrar_host(record.target):
            LOG.warning(
                "%s: Namecheap does not support changing apex NS records. Skipping.",
                record.target,
            )
        return False

    domain.filter(_keep)


def is_parking_placeholder(desired: Sequence[RecordConfig], hosts: Sequence[RemoteHost]) -> bool:
    """Return True when the zone only holds the registrar's automatic parking records."""
    if desired or len(hosts) != 2:
        return False
    by_type = {host.type.upper(): host for host in hosts}
    cname = by_type.get("CNAME")
    return cname is not None and "URL" in by_type and PARKING_MARKER in cname.address.lower()
