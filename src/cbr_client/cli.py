"""CLI commands for context-based restrictions management.

Provides a command-line interface for creating and cleaning up CBR zones
and rules. Credentials and scope come from the environment (see CBRSettings).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from cbr_client.client import CBRClient
from cbr_client.config import load_zone_spec
from cbr_client.exceptions import CBRAPIError
from cbr_client.models import (
    COS_SERVICE,
    KMS_SERVICE,
    KUBERNETES_SERVICE,
    VPC_SERVICE,
    ZoneSpec,
)

TARGETS = {
    "vpc": VPC_SERVICE,
    "kubernetes": KUBERNETES_SERVICE,
    "cos": COS_SERVICE,
    "kms": KMS_SERVICE,
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI output.

    Args:
        verbose: Enable debug logging.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def cmd_create_zone(args: argparse.Namespace) -> int:
    """Create a zone.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success).
    """
    spec = load_zone_spec(args.from_file) if args.from_file else ZoneSpec()
    spec = ZoneSpec(
        vpc=spec.vpc + args.vpc,
        address=spec.address + args.address,
        service_ref=spec.service_ref + args.service_ref,
    )

    client = CBRClient()
    zone_id = client.create_zone(args.name, spec)
    print(zone_id)
    return 0


def cmd_create_rule(args: argparse.Namespace) -> int:
    """Create a rule for a zone.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success).
    """
    service_name = args.service or TARGETS[args.target]
    client = CBRClient()
    rule_id = client.create_rule(args.zone_id, service_name, api_type=args.api_type)
    print(rule_id)
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete a rule and/or a zone by ID.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (0 for success).
    """
    client = CBRClient()
    client.delete_rule_zone(rule_id=args.rule_id, zone_id=args.zone_id)
    return 0


def cmd_cleanup(args: argparse.Namespace) -> int:
    """Delete zones or rules matching a pattern.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code (1 if any matched object could not be deleted).
    """
    client = CBRClient()
    if args.kind == "zones":
        result = client.delete_zones_with_pattern(args.match)
    else:
        result = client.delete_rules_with_pattern(args.match)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(
            f"\nMatched {result.matched_count} of {result.listed_count} "
            f"{args.kind} for '{result.pattern}'"
        )
        for object_id in result.deleted_ids:
            print(f"  ✓ deleted {object_id}")
        for outcome in result.failed:
            print(f"  ❌ {outcome.id} ({outcome.name}): {outcome.error}")

    return 1 if result.has_failures else 0


def cmd_list(args: argparse.Namespace) -> int:
    """List zones or rules in the account.

    Args:
        args: Parsed command line arguments.

    Returns:
        Exit code.
    """
    client = CBRClient()
    if args.kind == "zones":
        items = [
            {"id": z.id, "name": z.name, "addresses": len(z.addresses)}
            for z in client.list_zones()
        ]
    else:
        items = [
            {
                "id": r.id,
                "description": r.description,
                "enforcement_mode": r.enforcement_mode.value if r.enforcement_mode else None,
            }
            for r in client.list_rules()
        ]

    if args.json:
        print(json.dumps(items, indent=2))
    else:
        print(f"\n{args.kind.capitalize()} ({len(items)}):")
        print("-" * 60)
        for item in items:
            label = item.get("name", item.get("description"))
            print(f"{item['id']}  {label}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command line arguments.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        description="Manage context-based restriction zones and rules",
        prog="cbr-client",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Create zone command
    zone_parser = subparsers.add_parser("create-zone", help="Create a network zone")
    zone_parser.add_argument("name", help="Zone name (the pattern is appended)")
    zone_parser.add_argument(
        "--vpc", action="append", default=[], help="VPC CRN (repeatable)"
    )
    zone_parser.add_argument(
        "--address",
        action="append",
        default=[],
        help="IP address, range (a-b) or subnet (a/n) (repeatable)",
    )
    zone_parser.add_argument(
        "--service-ref", action="append", default=[], help="Service name (repeatable)"
    )
    zone_parser.add_argument(
        "-f", "--from-file",
        type=Path,
        help="YAML file with VPC, Address and ServiceRef lists",
    )
    zone_parser.set_defaults(func=cmd_create_zone)

    # Create rule command
    rule_parser = subparsers.add_parser("create-rule", help="Create a rule for a zone")
    rule_parser.add_argument("zone_id", help="Zone to bind to the rule")
    target_group = rule_parser.add_mutually_exclusive_group(required=True)
    target_group.add_argument("--service", help="Target service name")
    target_group.add_argument(
        "--target", choices=sorted(TARGETS), help="Well-known target service"
    )
    rule_parser.add_argument(
        "--api-type",
        help="Kubernetes API type restriction (management or cluster)",
    )
    rule_parser.set_defaults(func=cmd_create_rule)

    # Delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a rule and/or zone")
    delete_parser.add_argument("--rule-id", default="", help="Rule to delete")
    delete_parser.add_argument("--zone-id", default="", help="Zone to delete")
    delete_parser.set_defaults(func=cmd_delete)

    # Cleanup command
    cleanup_parser = subparsers.add_parser(
        "cleanup", help="Delete zones or rules matching a pattern"
    )
    cleanup_parser.add_argument("kind", choices=["zones", "rules"])
    cleanup_parser.add_argument(
        "-m", "--match",
        default="",
        help="Substring to match (default: configured pattern)",
    )
    cleanup_parser.add_argument("--json", action="store_true", help="Output as JSON")
    cleanup_parser.set_defaults(func=cmd_cleanup)

    # List command
    list_parser = subparsers.add_parser("list", help="List zones or rules")
    list_parser.add_argument("kind", choices=["zones", "rules"])
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_parser.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (CBRAPIError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logging.exception("Unexpected error")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
