#!/usr/bin/env python3
"""Command line interface for quagga-reconciler.

Usage:
    quagga-reconcile show KIND --device ROUTER
    quagga-reconcile plan DESIRED.yaml
    quagga-reconcile apply DESIRED.yaml [--dry-run]
    quagga-reconcile history [--device ROUTER]

Environment variables:
    VTYSH_PASSWORD                 SSH password (unless set per router)
    QUAGGA_RECONCILER_LOG_LEVEL    Console log level (default: INFO)
    QUAGGA_RECONCILER_LOG_FILE     Log file path
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import RouterInventory
from .config_engine import RESOURCE_KINDS, DesiredStateParser, ReconcileEngine, ReconcileError
from .console import ConsoleError
from .utils.audit_log import audit_log_path, get_recent_changes, setup_audit_logging
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def cmd_show(inventory: RouterInventory, args: argparse.Namespace) -> int:
    """Print the materialized records of one kind."""
    with inventory.get_console(args.device) as console:
        engine = ReconcileEngine(console, device_id=args.device)
        records = engine.read_state(args.kind)
    print(json.dumps([record.to_dict() for record in records], indent=2))
    return 0


def cmd_plan(inventory: RouterInventory, args: argparse.Namespace) -> int:
    """Print the diff summary and the commands that would be sent."""
    desired = DesiredStateParser().parse_file(args.desired)
    with inventory.get_console(desired.device_id) as console:
        engine = ReconcileEngine(console, desired.device_id, save_config=not args.no_save)
        summary, plan = engine.preview(desired)

    print(summary)
    if plan.commands:
        print("\nCommands:")
        for command in plan.commands:
            print(f"  {command}")
    return 0


def cmd_apply(inventory: RouterInventory, args: argparse.Namespace) -> int:
    """Reconcile every resource of a desired state document."""
    desired = DesiredStateParser().parse_file(args.desired)
    with inventory.get_console(desired.device_id) as console:
        engine = ReconcileEngine(console, desired.device_id, save_config=not args.no_save)
        result = engine.apply(
            desired,
            dry_run=args.dry_run,
            audit_context=args.context or f"cli apply {args.desired}",
        )

    print(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        logger.error(result.error)
        return 1
    return 0


def cmd_history(inventory: Optional[RouterInventory], args: argparse.Namespace) -> int:
    """List recent audit entries."""
    records = get_recent_changes(
        str(audit_log_path(args.audit_dir)),
        device_id=args.device,
        operation=args.operation,
        limit=args.limit,
    )
    for record in records:
        print(record.describe())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quagga-reconcile",
        description="Reconcile Quagga/FRR routing configuration through vtysh",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show the OSPF process of a router
    quagga-reconcile show ospf --device edge-1

    # Preview the commands for a desired state file
    quagga-reconcile plan configs/edge-1.yaml

    # Apply it
    quagga-reconcile apply configs/edge-1.yaml
""",
    )
    parser.add_argument(
        "--inventory",
        type=str,
        help="Router inventory file (default: search ./configs/routers.yaml etc.)",
    )
    parser.add_argument(
        "--audit-dir",
        type=str,
        help="Directory for the audit log (default: ~/.quagga-reconciler)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Show current records of a kind")
    show.add_argument("kind", choices=sorted(RESOURCE_KINDS))
    show.add_argument("--device", required=True, help="Router ID from the inventory")
    show.set_defaults(handler=cmd_show)

    history = subparsers.add_parser("history", help="List recent changes from the audit log")
    history.add_argument("--device", help="Only changes for this router")
    history.add_argument("--operation", choices=["create", "modify", "delete", "reconcile"])
    history.add_argument("--limit", type=int, default=20)
    history.set_defaults(handler=cmd_history)

    for name, handler, help_text in (
        ("plan", cmd_plan, "Preview changes for a desired state file"),
        ("apply", cmd_apply, "Apply a desired state file"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("desired", type=Path, help="Desired state YAML file")
        sub.add_argument(
            "--no-save",
            action="store_true",
            help="Do not persist with 'write memory'",
        )
        sub.set_defaults(handler=handler)
        if name == "apply":
            sub.add_argument("--dry-run", action="store_true", help="Preview without applying")
            sub.add_argument("--context", type=str, help="Description for the audit log")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else None)
    setup_audit_logging(args.audit_dir)

    if args.command == "history":
        return cmd_history(None, args)

    try:
        inventory = RouterInventory(args.inventory)
    except (FileNotFoundError, OSError) as e:
        logger.error(f"Cannot load inventory: {e}")
        return 1

    try:
        return args.handler(inventory, args)
    except KeyError as e:
        logger.error(f"Unknown router: {e}")
        return 1
    except (ReconcileError, ConsoleError, OSError) as e:
        logger.error(str(e))
        return 1
    finally:
        inventory.close_all()


if __name__ == "__main__":
    sys.exit(main())
