import logging

import pytest

from namecheap_ctl.config import RegistrarDefaults
from namecheap_ctl.models import HOSTNAME_TYPES, RemoteHost, ValidationError
from namecheap_ctl.normalize import (
    add_origin,
    downcase,
    filter_apex_ns,
    is_parking_placeholder,
    records_from_hosts,
    split_domain,
    to_ascii,
    trim_domain_name,
)

from tests.support import PARKING_HOSTS, domain_config, record


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("@", "example.com"),
        ("", "example.com"),
        ("www", "www.example.com"),
        ("a.b", "a.b.example.com"),
        ("mail.other.org.", "mail.other.org"),
    ],
)
def test_add_origin(name, expected):
    assert add_origin(name, "example.com") == expected


@pytest.mark.parametrize(
    ("fqdn", "expected"),
    [
        ("example.com", "@"),
        ("www.example.com", "www"),
        ("WWW.Example.com.", "WWW"),
        ("a.b.example.com", "a.b"),
        ("*.example.com", "*"),
        ("other.org", "other.org"),
    ],
)
def test_trim_domain_name(fqdn, expected):
    assert trim_domain_name(fqdn, "example.com") == expected


def test_to_ascii_encodes_unicode_and_lowercases():
    assert to_ascii("Bücher.DE.") == "xn--bcher-kva.de"
    assert to_ascii("Example.com") == "example.com"


@pytest.mark.parametrize(
    ("domain", "expected"),
    [
        ("example.com", ("example", "com")),
        ("example.co.uk", ("example", "co.uk")),
        ("www.example.net", ("example", "net")),
    ],
)
def test_split_domain_uses_public_suffix_rules(domain, expected):
    assert split_domain(domain) == expected


def test_split_domain_rejects_bare_suffix():
    with pytest.raises(ValidationError):
        split_domain("co.uk")


def test_records_from_hosts_drops_soa_and_normalizes_case():
    hosts = [
        RemoteHost(name="@", type="SOA", address="ns hostmaster 1 2 3 4 5", host_id=1),
        RemoteHost(name="WWW", type="cname", address="Target.Example.net.", ttl=600, host_id=2),
        RemoteHost(name="@", type="MX", address="mail.example.com.", mx_pref=10, host_id=3),
        RemoteHost(name="txt", type="TXT", address="Keep Case", host_id=4),
    ]

    records = records_from_hosts(hosts, "example.com")

    assert [(r.name_fqdn, r.type, r.target) for r in records] == [
        ("www.example.com", "CNAME", "target.example.net."),
        ("example.com", "MX", "mail.example.com."),
        ("txt.example.com", "TXT", "Keep Case"),
    ]
    assert records[0].ttl == 600
    assert records[1].mx_preference == 10
    assert records[0].original is hosts[1]


def test_filter_apex_ns_keeps_other_records():
    domain = domain_config(
        records=[
            record("@", "NS", "ns.otherprovider.com."),
            record("@", "ns", "dns2.registrar-servers.com."),
            record("sub", "NS", "ns.otherprovider.com."),
            record("@", "A", "1.2.3.4"),
        ]
    )

    filter_apex_ns(domain, RegistrarDefaults())

    assert [(r.name, r.type) for r in domain.records] == [("sub", "NS"), ("@", "A")]


def test_registrar_defaults_recognise_sibling_hosts():
    defaults = RegistrarDefaults()

    assert defaults.is_registrar_host("dns1.registrar-servers.com.")
    assert defaults.is_registrar_host("DNS3.Registrar-Servers.com")
    assert not defaults.is_registrar_host("ns1.example.com")


def test_parking_placeholder_detection():
    assert is_parking_placeholder([], PARKING_HOSTS)
    assert is_parking_placeholder([], list(reversed(PARKING_HOSTS)))
    assert not is_parking_placeholder([record("@", "A", "1.2.3.4")], PARKING_HOSTS)
    assert not is_parking_placeholder([], PARKING_HOSTS[:1])
    other_cname = [RemoteHost(name="@", type="CNAME", address="site.example.net."), PARKING_HOSTS[1]]
    assert not is_parking_placeholder([], other_cname)


def test_overridden_defaults_match_exact_names_only():
    defaults = RegistrarDefaults(nameservers=("ns1.example.com",))

    assert defaults.is_registrar_host("ns1.example.com.")
    assert not defaults.is_registrar_host("ns2.example.com")
    assert defaults.is_registrar_host("dns1.registrar-servers.com")


def test_apex_ns_sibling_of_overridden_default_still_warns(caplog):
    domain = domain_config(records=[record("@", "NS", "ns2.example.com.")])
    caplog.set_level(logging.WARNING, logger="namecheap_ctl")

    filter_apex_ns(domain, RegistrarDefaults(nameservers=("ns1.example.com",)))

    assert domain.records == []
    assert "Namecheap does not support changing apex NS records" in caplog.text


def test_downcase_lowers_every_hostname_type():
    records = [record("@", rtype, "Target.Example.com.") for rtype in sorted(HOSTNAME_TYPES)]
    records.append(record("@", "txt", "Mixed Case"))

    downcase(records)

    assert {r.target for r in records[:-1]} == {"target.example.com."}
    assert records[-1].type == "TXT"
    assert records[-1].target == "Mixed Case"
