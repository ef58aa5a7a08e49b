"""Thin client for the Namecheap XML API."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Protocol, Sequence

import requests

from .config import PRODUCTION_URL, Credentials
from .models import ConfigError, DomainInfo, RateLimitedError, RegistrarAPIError, RemoteHost

LOG = logging.getLogger("namecheap_ctl")

RATE_LIMIT_ERROR = "500000"
RATE_LIMIT_TEXT = "too many requests"


class RegistrarAPI(Protocol):
    """Operations the provider needs from the registrar."""

    def get_hosts(self, sld: str, tld: str) -> list[RemoteHost]:
        ...

    def set_hosts(self, sld: str, tld: str, hosts: Sequence[RemoteHost]) -> None:
        ...

    def get_domain_info(self, domain: str) -> DomainInfo:
        ...

    def set_custom_nameservers(self, sld: str, tld: str, nameservers: str) -> None:
        ...


def _int_attr(element: ET.Element, name: str, default: int = 0) -> int:
    raw = element.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RegistrarAPIError(f"Unexpected {name} value '{raw}' in API response.") from exc


def _is_rate_limited(number: str | None, message: str) -> bool:
    return number == RATE_LIMIT_ERROR or RATE_LIMIT_TEXT in message.lower()


class NamecheapClient:
    """Client for the subset of the Namecheap API used to manage DNS."""

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        api_user: str,
        api_key: str,
        username: str | None = None,
        client_ip: str = "127.0.0.1",
        base_url: str = PRODUCTION_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        if not api_user or not api_key:
            raise ConfigError("Namecheap apikey and apiuser must be provided.")
        self.api_user = api_user
        self.api_key = api_key
        self.username = username or api_user
        self.client_ip = client_ip
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_credentials(cls, credentials: Credentials, base_url: str, timeout: float) -> "NamecheapClient":
        return cls(
            api_user=credentials.api_user,
            api_key=credentials.api_key,
            username=credentials.username,
            client_ip=credentials.client_ip,
            base_url=base_url,
            timeout=timeout,
        )

    def _call(self, command: str, params: dict[str, Any] | None = None, post: bool = False) -> ET.Element:
        """Issue an API command and return its CommandResponse element."""
        payload: dict[str, Any] = {
            "ApiUser": self.api_user,
            "ApiKey": self.api_key,
            "UserName": self.username,
            "ClientIp": self.client_ip,
            "Command": command,
        }
        payload.update(params or {})
        LOG.debug("Namecheap API call %s", command)
        try:
            if post:
                resp = self.session.post(self.base_url, data=payload, timeout=self.timeout)
            else:
                resp = self.session.get(self.base_url, params=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RegistrarAPIError(f"{command} request failed: {exc}") from exc

        if resp.status_code == 429:
            raise RateLimitedError("Too many requests", number=RATE_LIMIT_ERROR)
        if resp.status_code != 200:
            raise RegistrarAPIError(f"{command} returned HTTP {resp.status_code}")
        return self._parse(command, resp.text)

    def _parse(self, command: str, text: str) -> ET.Element:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise RegistrarAPIError(f"{command} returned malformed XML: {exc}") from exc

        if root.get("Status", "").upper() == "ERROR":
            error = root.find("{*}Errors/{*}Error")
            if error is None:
                raise RegistrarAPIError(f"{command} failed without error detail")
            number = error.get("Number")
            message = (error.text or "").strip()
            if _is_rate_limited(number, message):
                raise RateLimitedError(message or "Too many requests", number=number)
            raise RegistrarAPIError(message, number=number)

        response = root.find("{*}CommandResponse")
        if response is None:
            raise RegistrarAPIError(f"{command} response has no CommandResponse")
        return response

    def get_hosts(self, sld: str, tld: str) -> list[RemoteHost]:
        response = self._call("namecheap.domains.dns.getHosts", {"SLD": sld, "TLD": tld})
        result = response.find("{*}DomainDNSGetHostsResult")
        if result is None:
            raise RegistrarAPIError("getHosts response has no DomainDNSGetHostsResult")
        hosts = []
        for element in result.findall("{*}host"):
            hosts.append(
                RemoteHost(
                    name=element.get("Name", ""),
                    type=element.get("Type", ""),
                    address=element.get("Address", ""),
                    ttl=_int_attr(element, "TTL", 1800),
                    mx_pref=_int_attr(element, "MXPref"),
                    host_id=_int_attr(element, "HostId"),
                )
            )
        return hosts

    def set_hosts(self, sld: str, tld: str, hosts: Sequence[RemoteHost]) -> None:
        params: dict[str, Any] = {"SLD": sld, "TLD": tld}
        for position, host in enumerate(hosts, start=1):
            params[f"HostName{position}"] = host.name
            params[f"RecordType{position}"] = host.type
            params[f"Address{position}"] = host.address
            params[f"TTL{position}"] = str(host.ttl)
            if host.type.upper() == "MX":
                params[f"MXPref{position}"] = str(host.mx_pref)
        if any(host.type.upper() == "MX" for host in hosts):
            params["EmailType"] = "MX"
        response = self._call("namecheap.domains.dns.setHosts", params, post=True)
        result = response.find("{*}DomainDNSSetHostsResult")
        if result is not None and result.get("IsSuccess", "true").lower() != "true":
            raise RegistrarAPIError(f"setHosts was not accepted for {sld}.{tld}")

    def get_domain_info(self, domain: str) -> DomainInfo:
        response = self._call("namecheap.domains.getInfo", {"DomainName": domain})
        details = response.find("{*}DomainGetInfoResult/{*}DnsDetails")
        if details is None:
            raise RegistrarAPIError("getInfo response has no DnsDetails")
        nameservers = tuple(
            (element.text or "").strip() for element in details.findall("{*}Nameserver") if element.text
        )
        return DomainInfo(
            domain=domain,
            nameservers=nameservers,
            using_registrar_dns=details.get("IsUsingOurDNS", "false").lower() == "true",
        )

    def set_custom_nameservers(self, sld: str, tld: str, nameservers: str) -> None:
        response = self._call(
            "namecheap.domains.dns.setCustom",
            {"SLD": sld, "TLD": tld, "Nameservers": nameservers},
        )
        result = response.find("{*}DomainDNSSetCustomResult")
        if result is not None and result.get("Updated", "true").lower() != "true":
            raise RegistrarAPIError(f"setCustom was not accepted for {sld}.{tld}")
