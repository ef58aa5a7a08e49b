"""Command-line entry point for namecheap-ctl."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .controller import DomainController, PlanResult, configure_logging
from .exporter import domain_to_json, domain_to_yaml, write_state
from .models import NamecheapCtlError


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Manage Namecheap DNS records declaratively.")
    parser.add_argument("--log-level", help="Override log level (default from config).")

    subparsers = parser.add_subparsers(dest="command", required=True)
    plan_parser = subparsers.add_parser("plan", help="Show corrections needed to reach the desired state.")
    _register_common_arguments(plan_parser)
    plan_parser.add_argument("--json", help="Optional path to write the plan as JSON.")

    apply_parser = subparsers.add_parser("apply", help="Apply corrections to the registrar.")
    _register_common_arguments(apply_parser)
    apply_parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt.")

    pull_parser = subparsers.add_parser("pull", help="Fetch the live records of a domain.")
    pull_parser.add_argument("--domain", required=True, help="Domain name to pull.")
    pull_parser.add_argument("--output", help="Path to write the exported state (default stdout).")
    pull_parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Serialization format for the exported state.",
    )

    return parser


def _register_common_arguments(subparser: argparse.ArgumentParser) -> None:
    """Register arguments shared by plan/apply."""
    subparser.add_argument("--desired", required=True, help="Path to the desired-state YAML file.")
    subparser.add_argument(
        "--domain",
        action="append",
        help="Only reconcile this domain. Can be repeated.",
    )
    subparser.add_argument(
        "--no-registrar",
        action="store_true",
        help="Skip the nameserver delegation check.",
    )
    subparser.add_argument(
        "-e",
        "--var",
        action="append",
        help="Template variable in KEY=VALUE form. Can be repeated.",
    )


def _parse_template_vars(values: list[str] | None) -> dict[str, str]:
    """Convert KEY=VALUE pairs into a dict."""
    result: dict[str, str] = {}
    if not values:
        return result
    for value in values:
        if "=" not in value:
            raise NamecheapCtlError(f"Invalid template var '{value}', expected KEY=VALUE.")
        key, val = value.split("=", 1)
        result[key] = val
    return result


def _emit_plan(plan: PlanResult, json_path: str | None = None) -> None:
    """Print every correction, optionally writing JSON."""
    for domain_plan in plan.domains:
        print(f"Domain: {domain_plan.domain}")
        if domain_plan.error is not None:
            print(f" ! {domain_plan.error}")
            continue
        if not domain_plan.corrections:
            print(" = no changes")
        for number, correction in enumerate(domain_plan.corrections, start=1):
            print(f" #{number}: {correction.description}")
    if json_path:
        payload = {
            "domains": [
                {
                    "domain": domain_plan.domain,
                    "error": str(domain_plan.error) if domain_plan.error else None,
                    "corrections": [c.to_dict() for c in domain_plan.corrections],
                }
                for domain_plan in plan.domains
            ]
        }
        Path(json_path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Wrote plan JSON to {json_path}")


def _run_plan(controller: DomainController, args: argparse.Namespace) -> PlanResult:
    """Execute the plan command."""
    plan_result = controller.plan(
        Path(args.desired),
        template_vars=_parse_template_vars(args.var),
        include_registrar=not args.no_registrar,
        only=args.domain,
    )
    _emit_plan(plan_result, getattr(args, "json", None))
    if not plan_result.has_changes():
        print("No changes detected.")
    return plan_result


def _run_apply(controller: DomainController, args: argparse.Namespace) -> int:
    """Execute the apply command."""
    plan_result = _run_plan(controller, args)
    failures = controller.apply(plan_result, assume_yes=args.yes)
    return failures + len(plan_result.failed())


def _run_pull(controller: DomainController, args: argparse.Namespace) -> None:
    """Execute the pull command."""
    domain, records, nameservers = controller.pull(args.domain)
    if args.format == "json":
        content = domain_to_json(domain, records, nameservers)
    else:
        content = domain_to_yaml(domain, records, nameservers)
    if args.output:
        write_state(Path(args.output), content)
        print(f"Wrote domain state to {args.output}")
    else:
        print(content)


def main() -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()
    try:
        config = load_config()
        configure_logging(args.log_level or config.log_level)
        controller = DomainController(config)
        if args.command == "plan":
            failed = len(_run_plan(controller, args).failed())
        elif args.command == "apply":
            failed = _run_apply(controller, args)
        elif args.command == "pull":
            _run_pull(controller, args)
            failed = 0
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except NamecheapCtlError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
