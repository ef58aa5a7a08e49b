import json

import yaml

from namecheap_ctl.exporter import domain_to_json, domain_to_yaml, write_state
from namecheap_ctl.models import RemoteHost
from namecheap_ctl.normalize import records_from_hosts

HOSTS = [
    RemoteHost(name="www", type="CNAME", address="example.com.", ttl=300),
    RemoteHost(name="@", type="MX", address="mail.example.com.", mx_pref=10),
    RemoteHost(name="@", type="A", address="1.2.3.4"),
]


def test_yaml_export_matches_desired_state_schema():
    records = records_from_hosts(HOSTS, "example.com")

    data = yaml.safe_load(domain_to_yaml("example.com", records, ["dns2.registrar-servers.com", "dns1.registrar-servers.com"]))

    (domain,) = data["domains"]
    assert domain["name"] == "example.com"
    assert domain["nameservers"] == ["dns1.registrar-servers.com", "dns2.registrar-servers.com"]
    assert domain["records"] == [
        {"name": "@", "type": "A", "value": "1.2.3.4", "ttl": 1800},
        {"name": "@", "type": "MX", "value": "mail.example.com.", "ttl": 1800, "priority": 10},
        {"name": "www", "type": "CNAME", "value": "example.com.", "ttl": 300},
    ]


def test_json_export_without_nameservers():
    data = json.loads(domain_to_json("example.com", records_from_hosts(HOSTS[:1], "example.com")))

    assert "nameservers" not in data["domains"][0]
    assert data["domains"][0]["records"][0]["name"] == "www"


def test_write_state_creates_parent_directories(tmp_path):
    target = tmp_path / "state" / "example.com.yaml"

    write_state(target, "domains: []\n")

    assert target.read_text(encoding="utf-8") == "domains: []\n"
