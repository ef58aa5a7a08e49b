"""Namecheap DNS and registrar provider."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from .config import RegistrarDefaults
from .diffing import Differ, incremental_diff
from .models import (
    Correction,
    DomainConfig,
    NamecheapCtlError,
    Nameserver,
    RemoteHost,
    ReplaceRecords,
    SetNameservers,
)
from .namecheap_api import RegistrarAPI
from .normalize import (
    filter_apex_ns,
    is_parking_placeholder,
    records_from_hosts,
    split_domain,
    to_ascii,
    trim_domain_name,
)
from .retry import RetryPolicy

LOG = logging.getLogger("namecheap_ctl")

T = TypeVar("T")


def _join_nameservers(names) -> str:
    """Return the sorted, comma-joined form used to compare nameserver sets."""
    return ",".join(sorted(name.strip().rstrip(".").lower() for name in names if name.strip()))


class NamecheapProvider:
    """Computes and executes corrections for domains hosted at Namecheap."""

    def __init__(
        self,
        api: RegistrarAPI,
        defaults: RegistrarDefaults | None = None,
        retry: Callable[[Callable[[], T]], T] | None = None,
        differ: Differ = incremental_diff,
    ):
        self.api = api
        self.defaults = defaults or RegistrarDefaults()
        self.retry = retry or RetryPolicy()
        self.differ = differ

    def get_nameservers(self, domain: str) -> list[Nameserver]:
        """Return the nameservers that serve zones hosted by the registrar."""
        return [Nameserver(name=name) for name in self.defaults.nameservers]

    def get_domain_corrections(self, dc: DomainConfig) -> list[Correction]:
        """Return the corrections needed to make the zone match dc.records."""
        dc.punycode()
        sld, tld = split_domain(dc.name)
        filter_apex_ns(dc, self.defaults)

        hosts = self.retry(lambda: self.api.get_hosts(sld, tld))

        if is_parking_placeholder(dc.records, hosts):
            LOG.debug("%s only holds the parking page placeholder; nothing to do.", dc.name)
            return []

        actual = records_from_hosts(hosts, dc.name)
        _, create, delete, modify = self.differ(dc.records, actual)
        changes = [*create, *delete, *modify]
        if not changes:
            LOG.info("%s: records are up to date.", dc.name)
            return []

        lines = "".join(f"\n{change}" for change in changes)
        description = f"GENERATE_ZONE: {dc.name} ({len(dc.records)} records){lines}"
        LOG.info(
            "%s: %d to create, %d to delete, %d to modify.",
            dc.name,
            len(create),
            len(delete),
            len(modify),
        )
        action = ReplaceRecords(
            domain=dc.name,
            sld=sld,
            tld=tld,
            hosts=tuple(self.generate_hosts(dc)),
        )
        return [Correction(description=description, action=action)]

    def generate_hosts(self, dc: DomainConfig) -> list[RemoteHost]:
        """Convert the desired records into the registrar's flat host list."""
        hosts = []
        for host_id, record in enumerate(dc.records, start=1):
            hosts.append(
                RemoteHost(
                    name=trim_domain_name(record.name_fqdn, dc.name),
                    type=record.canonical_type(),
                    address=record.target,
                    ttl=record.ttl,
                    mx_pref=record.mx_preference,
                    host_id=host_id,
                )
            )
        return hosts

    def get_registrar_corrections(self, dc: DomainConfig) -> list[Correction]:
        """Return a correction if the delegation differs from dc.nameservers."""
        domain = to_ascii(dc.name)
        if not dc.nameservers:
            LOG.debug("%s declares no nameservers; delegation is left alone.", domain)
            return []
        info = self.retry(lambda: self.api.get_domain_info(domain))
        found = _join_nameservers(info.nameservers)
        desired = _join_nameservers(ns.name for ns in dc.nameservers)
        if found == desired:
            return []
        if info.using_registrar_dns:
            LOG.info("%s currently uses Namecheap DNS; delegation will move to %s.", domain, desired)

        sld, tld = split_domain(domain)
        action = SetNameservers(
            domain=domain,
            sld=sld,
            tld=tld,
            nameservers=tuple(desired.split(",")),
        )
        return [
            Correction(
                description=f"Change Nameservers from '{found}' to '{desired}'",
                action=action,
            )
        ]

    def execute(self, correction: Correction) -> None:
        """Apply a correction against the registrar."""
        action = correction.action
        if isinstance(action, ReplaceRecords):
            LOG.info("Replacing %d host records for %s", len(action.hosts), action.domain)
            self.retry(lambda: self.api.set_hosts(action.sld, action.tld, list(action.hosts)))
        elif isinstance(action, SetNameservers):
            nameservers = ",".join(action.nameservers)
            LOG.info("Setting nameservers of %s to %s", action.domain, nameservers)
            self.retry(lambda: self.api.set_custom_nameservers(action.sld, action.tld, nameservers))
        else:
            raise NamecheapCtlError(f"Unsupported correction action {action!r}")
