"""Load and validate desired-state YAML files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError
from pydantic import BaseModel, Field, field_validator

from .models import DomainConfig, Nameserver, RecordConfig, ValidationError
from .normalize import add_origin

FQDN_TYPES = {"CNAME", "MX", "NS", "ALIAS"}
SUPPORTED_TYPES = {"A", "AAAA", "ALIAS", "CAA", "CNAME", "MX", "MXE", "NS", "TXT", "URL", "URL301", "FRAME"}


class RecordSpec(BaseModel):
    """Schema for a desired DNS record."""

    name: str = "@"
    type: str
    value: str
    ttl: int | None = Field(default=None, ge=60)
    priority: int | None = Field(default=None, ge=0, le=65535, description="Preference for MX records")

    @field_validator("type")
    @classmethod
    def _uppercase_type(cls, value: str) -> str:
        """Normalise RR type to uppercase."""
        upper = value.strip().upper()
        if upper not in SUPPORTED_TYPES:
            raise ValueError(f"record type {value} is not supported by Namecheap")
        return upper


class DomainSpec(BaseModel):
    """Schema for one domain."""

    name: str
    default_ttl: int | None = Field(default=None, ge=60)
    nameservers: list[str] = Field(default_factory=list)
    records: list[RecordSpec] = Field(default_factory=list)


class DesiredStateSpec(BaseModel):
    """Schema for the YAML document."""

    default_ttl: int | None = Field(default=None, ge=60)
    domains: list[DomainSpec]


def _normalise_value(rtype: str, value: str, origin: str) -> str:
    """Return hostname targets as absolute names; other values unchanged."""
    cleaned = value.strip()
    if rtype not in FQDN_TYPES or cleaned.endswith("."):
        return cleaned
    return f"{add_origin(cleaned, origin)}."


def _render_yaml(path: Path, extra_context: dict[str, Any] | None = None) -> str:
    """Render a YAML file through Jinja2."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template(path.name)
    context = {"env": os.environ}
    if extra_context:
        context.update(extra_context)
    return template.render(**context)


def _build_domain(spec: DomainSpec, default_ttl: int) -> DomainConfig:
    """Turn a validated DomainSpec into a DomainConfig."""
    origin = spec.name.strip().rstrip(".")
    if not origin:
        raise ValidationError("Domain name must not be empty.")
    ttl_default = spec.default_ttl or default_ttl
    records = []
    for record in spec.records:
        if record.type == "MX" and record.priority is None:
            raise ValidationError(f"MX record {record.name} in {origin} needs a priority.")
        records.append(
            RecordConfig(
                name=record.name.strip() or "@",
                name_fqdn=add_origin(record.name, origin),
                type=record.type,
                target=_normalise_value(record.type, record.value, origin),
                ttl=record.ttl or ttl_default,
                mx_preference=record.priority or 0,
            )
        )
    nameservers = [Nameserver(name=ns.strip().rstrip(".")) for ns in spec.nameservers if ns.strip()]
    return DomainConfig(name=origin, records=records, nameservers=nameservers)


def load_desired_domains(
    path: Path,
    default_ttl: int = 1800,
    template_vars: dict[str, Any] | None = None,
) -> list[DomainConfig]:
    """Load a desired-state YAML file and return one DomainConfig per domain."""
    if not path.exists():
        raise ValidationError(f"Desired-state file {path} does not exist.")
    try:
        rendered = _render_yaml(path, template_vars)
    except TemplateError as exc:
        raise ValidationError(f"Failed to render {path}: {exc}") from exc
    try:
        data = yaml.safe_load(rendered) or {}
    except yaml.YAMLError as exc:  # noqa: BLE001
        raise ValidationError(f"Failed to parse YAML: {exc}") from exc

    try:
        spec = DesiredStateSpec(**data)
    except Exception as exc:  # noqa: BLE001
        raise ValidationError(f"YAML validation error: {exc}") from exc

    ttl = spec.default_ttl or default_ttl
    domains = [_build_domain(domain, ttl) for domain in spec.domains]
    names = [domain.name.lower() for domain in domains]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValidationError(f"Domains declared more than once: {', '.join(duplicates)}")
    return domains
