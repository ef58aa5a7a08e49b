from __future__ import annotations

from namecheap_ctl.models import (
    DomainConfig,
    DomainInfo,
    Nameserver,
    RateLimitedError,
    RecordConfig,
    RemoteHost,
)
from namecheap_ctl.normalize import add_origin

PARKING_HOSTS = [
    RemoteHost(name="@", type="CNAME", address="parkingpage.namecheap.com.", ttl=1800, host_id=1),
    RemoteHost(name="www", type="URL", address="http://www.example.com/?from=@", ttl=1800, host_id=2),
]


class FakeRegistrar:
    """In-memory stand-in for the Namecheap API."""

    def __init__(self, hosts=None, nameservers=None, domain="example.com"):
        self.zones: dict[tuple[str, str], list[RemoteHost]] = {}
        sld, tld = domain.split(".", 1)
        self.zones[(sld, tld)] = list(hosts or [])
        self.nameservers: dict[str, list[str]] = {domain: list(nameservers or [])}
        self.calls: list[tuple] = []
        self.rate_limited = 0

    def _maybe_rate_limit(self):
        if self.rate_limited:
            self.rate_limited -= 1
            raise RateLimitedError("Too many requests", number="500000")

    def get_hosts(self, sld, tld):
        self.calls.append(("get_hosts", sld, tld))
        self._maybe_rate_limit()
        return list(self.zones.get((sld, tld), []))

    def set_hosts(self, sld, tld, hosts):
        self.calls.append(("set_hosts", sld, tld, list(hosts)))
        self._maybe_rate_limit()
        self.zones[(sld, tld)] = list(hosts)

    def get_domain_info(self, domain):
        self.calls.append(("get_domain_info", domain))
        self._maybe_rate_limit()
        return DomainInfo(domain=domain, nameservers=tuple(self.nameservers.get(domain, [])))

    def set_custom_nameservers(self, sld, tld, nameservers):
        self.calls.append(("set_custom_nameservers", sld, tld, nameservers))
        self._maybe_rate_limit()
        self.nameservers[f"{sld}.{tld}"] = nameservers.split(",")

    def call_names(self):
        return [call[0] for call in self.calls]


def no_retry(operation):
    return operation()


def record(name, rtype, target, ttl=1800, mx=0, domain="example.com"):
    return RecordConfig(
        name=name,
        name_fqdn=add_origin(name, domain),
        type=rtype,
        target=target,
        ttl=ttl,
        mx_preference=mx,
    )


def domain_config(records=(), nameservers=(), name="example.com"):
    return DomainConfig(
        name=name,
        records=list(records),
        nameservers=[Nameserver(name=ns) for ns in nameservers],
    )
