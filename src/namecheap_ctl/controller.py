"""High-level orchestration for namecheap-ctl."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .config import AppConfig
from .models import Correction, NamecheapCtlError, RecordConfig
from .namecheap_api import NamecheapClient
from .normalize import records_from_hosts, split_domain, to_ascii
from .provider import NamecheapProvider
from .retry import RetryPolicy
from .yaml_loader import load_desired_domains

LOG = logging.getLogger("namecheap_ctl")


@dataclass
class DomainPlan:
    """Corrections computed for one domain, or the error that prevented it."""

    domain: str
    corrections: list[Correction] = field(default_factory=list)
    error: NamecheapCtlError | None = None

    def has_changes(self) -> bool:
        return self.error is None and bool(self.corrections)


@dataclass
class PlanResult:
    """Holds everything needed to apply a change."""

    domains: list[DomainPlan] = field(default_factory=list)

    def has_changes(self) -> bool:
        """Return True when any domain needs a correction."""
        return any(plan.has_changes() for plan in self.domains)

    def failed(self) -> list[DomainPlan]:
        return [plan for plan in self.domains if plan.error is not None]

    def total(self) -> int:
        """Return the total number of corrections."""
        return sum(len(plan.corrections) for plan in self.domains if plan.error is None)


def build_provider(config: AppConfig) -> NamecheapProvider:
    """Create a provider wired to the live API using config."""
    client = NamecheapClient.from_credentials(config.credentials, config.base_url, config.timeout)
    return NamecheapProvider(
        client,
        defaults=config.defaults,
        retry=RetryPolicy(max_attempts=config.max_attempts, backoff=config.backoff),
    )


class DomainController:
    """Coordinates plan/apply/pull operations."""

    def __init__(self, config: AppConfig, provider: NamecheapProvider | None = None):
        """Store configuration for subsequent runs."""
        self.config = config
        self.provider = provider or build_provider(config)

    def plan(
        self,
        desired_path: Path,
        template_vars: dict[str, Any] | None = None,
        include_registrar: bool = True,
        only: list[str] | None = None,
    ) -> PlanResult:
        """Compute the corrections for every domain in the desired-state file."""
        domains = load_desired_domains(desired_path, self.config.default_record_ttl, template_vars)
        if only:
            wanted = {to_ascii(name) for name in only}
            domains = [domain for domain in domains if to_ascii(domain.name) in wanted]
            if not domains:
                raise NamecheapCtlError(f"None of {', '.join(only)} is declared in {desired_path}.")

        result = PlanResult()
        for domain in domains:
            plan = DomainPlan(domain=domain.name)
            try:
                corrections = self.provider.get_domain_corrections(domain)
                if include_registrar:
                    corrections = corrections + self.provider.get_registrar_corrections(domain)
                plan.corrections = corrections
            except NamecheapCtlError as exc:
                LOG.error("Failed to reconcile %s: %s", domain.name, exc)
                plan.error = exc
            # reconciliation rewrites the name to its ASCII form
            plan.domain = domain.name
            result.domains.append(plan)
        return result

    def apply(self, plan_result: PlanResult, assume_yes: bool = False) -> int:
        """Execute the planned corrections; return the number that failed."""
        if not plan_result.has_changes():
            LOG.info("No changes detected; nothing to apply.")
            return 0
        if not assume_yes and not _confirm(plan_result.total()):
            LOG.info("Apply aborted by user.")
            return 0
        failures = 0
        for plan in plan_result.domains:
            if plan.error is not None:
                LOG.warning("Skipping %s: %s", plan.domain, plan.error)
                continue
            for correction in plan.corrections:
                try:
                    self.provider.execute(correction)
                except NamecheapCtlError as exc:
                    LOG.error("Correction for %s failed: %s", plan.domain, exc)
                    failures += 1
                    # remaining corrections for this domain are skipped
                    break
            else:
                if plan.corrections:
                    LOG.info("Apply complete for %s", plan.domain)
        return failures

    def pull(self, domain: str) -> tuple[str, list[RecordConfig], list[str]]:
        """Fetch the live records and delegation of a domain."""
        name = to_ascii(domain)
        sld, tld = split_domain(name)
        api = self.provider.api
        hosts = self.provider.retry(lambda: api.get_hosts(sld, tld))
        info = self.provider.retry(lambda: api.get_domain_info(name))
        return name, records_from_hosts(hosts, name), list(info.nameservers)


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _confirm(count: int) -> bool:
    """Prompt the operator to confirm apply."""
    prompt = f"Apply {count} correction(s)? [y/N]: "
    response = input(prompt).strip().lower()  # noqa: S322
    return response in {"y", "yes"}
