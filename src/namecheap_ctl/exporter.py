"""Utilities to serialise a live zone into the desired-state format."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import yaml

from .models import RecordConfig


def _record_to_dict(record: RecordConfig) -> dict[str, Any]:
    """Convert a record into a serialisable dictionary."""
    entry: dict[str, Any] = {
        "name": record.name or "@",
        "type": record.type,
        "value": record.target,
        "ttl": record.ttl,
    }
    if record.canonical_type() == "MX":
        entry["priority"] = record.mx_preference
    return entry


def domain_to_dict(domain: str, records: Sequence[RecordConfig], nameservers: Sequence[str] = ()) -> dict[str, Any]:
    """Create a desired-state document describing one domain."""
    entry: dict[str, Any] = {"name": domain}
    if nameservers:
        entry["nameservers"] = sorted(nameservers)
    entry["records"] = [
        _record_to_dict(record)
        for record in sorted(records, key=lambda rec: (rec.name, rec.type, rec.target))
    ]
    return {"domains": [entry]}


def domain_to_yaml(domain: str, records: Sequence[RecordConfig], nameservers: Sequence[str] = ()) -> str:
    """Return YAML representation of a domain's records."""
    return yaml.safe_dump(domain_to_dict(domain, records, nameservers), sort_keys=False)


def domain_to_json(domain: str, records: Sequence[RecordConfig], nameservers: Sequence[str] = ()) -> str:
    """Return JSON representation of a domain's records."""
    return json.dumps(domain_to_dict(domain, records, nameservers), indent=2)


def write_state(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
