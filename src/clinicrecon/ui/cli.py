from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from clinicrecon.app import (
    correct_appointment_times,
    reconcile_services,
    reconcile_snapshot,
    remove_duplicate_appointments,
)
from clinicrecon.config import ConfigurationError, configure_logging, get_reconcile_config
from clinicrecon.domain.reconciliation import LinkStatus, policy_by_name
from clinicrecon.domain.reconciliation.policy import POLICIES
from clinicrecon.domain.time_shift import ShiftDirection, TimestampShift

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from clinicrecon.app import ServiceReconciliationSummary
    from clinicrecon.config import ReconcileConfig

log = logging.getLogger(__name__)

_SAMPLE_LIMIT = 20


def _add_scope_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--scope",
        type=int,
        default=None,
        help="Tenant id to operate on (defaults to CLINICRECON_SCOPE_ID)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write changes; without it the command only reports",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Repair clinic catalog and appointment data")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    services = subparsers.add_parser(
        "services",
        help="Collapse duplicate service types and link appointments to them",
    )
    _add_scope_arguments(services)
    services.add_argument(
        "--policy",
        choices=sorted(POLICIES),
        default=None,
        help="Which duplicate survives (defaults to CLINICRECON_CANONICAL_POLICY)",
    )
    services.add_argument(
        "--delete-superseded",
        action="store_true",
        help="Also delete superseded service types (requires --apply)",
    )

    shift = subparsers.add_parser(
        "shift-times",
        help="Move appointment start/end times by a fixed offset",
    )
    _add_scope_arguments(shift)
    shift.add_argument(
        "--hours",
        type=float,
        default=None,
        help="Offset in hours (defaults to CLINICRECON_SHIFT_HOURS)",
    )
    shift.add_argument(
        "--direction",
        choices=[direction.value for direction in ShiftDirection],
        required=True,
        help="forward adds the offset, backward subtracts it",
    )

    duplicates = subparsers.add_parser(
        "appointment-duplicates",
        help="Find appointments booked twice for the same client and slot",
    )
    _add_scope_arguments(duplicates)

    snapshot = subparsers.add_parser(
        "snapshot",
        help="Dry-run service reconciliation over an exported JSON snapshot",
    )
    snapshot.add_argument("path", type=Path, help="Path to the snapshot JSON document")
    snapshot.add_argument("--scope", type=int, default=None, help="Tenant id to keep")
    snapshot.add_argument(
        "--policy",
        choices=sorted(POLICIES),
        default=None,
        help="Which duplicate survives (defaults to CLINICRECON_CANONICAL_POLICY)",
    )

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace, config: ReconcileConfig) -> None:
    if getattr(args, "delete_superseded", False) and not args.apply:
        raise ValueError("--delete-superseded requires --apply")
    if args.command == "shift-times":
        hours = args.hours if args.hours is not None else config.shift_hours
        if hours < 0:
            raise ValueError("--hours must be non-negative; use --direction instead")
    if getattr(args, "apply", False) and _scope(args, config) is None:
        raise ValueError("--apply requires --scope (or CLINICRECON_SCOPE_ID)")


def _scope(args: argparse.Namespace, config: ReconcileConfig) -> int | None:
    return args.scope if args.scope is not None else config.scope_id


def _report_services(summary: ServiceReconciliationSummary) -> None:
    for group in summary.result.duplicates.groups:
        log.info(
            "Duplicate %r in scope %s: keep id=%s, supersede %s",
            group.key,
            group.scope_id,
            group.canonical_id,
            list(group.superseded_ids),
        )
    linked = summary.result.links.by_status(LinkStatus.LINKED)
    for outcome in linked[:_SAMPLE_LIMIT]:
        log.info(
            "Link record %s: %s -> %s (%s)",
            outcome.record_id,
            outcome.previous_entry_id,
            outcome.entry_id,
            outcome.reason,
        )
    if len(linked) > _SAMPLE_LIMIT:
        log.info("... and %s more", len(linked) - _SAMPLE_LIMIT)
    for rejection in summary.rejected:
        log.warning("Rejected %s row %s: %s", rejection.kind, rejection.index, rejection.reason)
    counts = summary.result.links.counts
    log.info(
        "Summary: superseded=%s, %s%s",
        len(summary.superseded),
        ", ".join(f"{status}={count}" for status, count in counts.items()),
        "" if summary.applied else " (dry run, nothing written)",
    )


def _run(args: argparse.Namespace, config: ReconcileConfig) -> None:
    if args.command == "services":
        summary = reconcile_services(
            _scope(args, config),
            policy=policy_by_name(args.policy or config.canonical_policy),
            apply=args.apply,
            delete_superseded=args.delete_superseded,
        )
        _report_services(summary)
    elif args.command == "snapshot":
        summary = reconcile_snapshot(
            args.path,
            scope_id=_scope(args, config),
            policy=policy_by_name(args.policy or config.canonical_policy),
        )
        _report_services(summary)
    elif args.command == "shift-times":
        hours = args.hours if args.hours is not None else config.shift_hours
        correction = correct_appointment_times(
            _scope(args, config),
            shift=TimestampShift.hours(hours, ShiftDirection(args.direction)),
            apply=args.apply,
        )
        log.info(
            "Selected %s appointments, updated %s%s",
            correction.selected,
            correction.updated,
            "" if correction.applied else " (dry run, nothing written)",
        )
    elif args.command == "appointment-duplicates":
        found = remove_duplicate_appointments(_scope(args, config), apply=args.apply)
        for record_id in found.superseded[:_SAMPLE_LIMIT]:
            log.info(
                "Duplicate appointment %s of %s",
                record_id,
                found.duplicates.survivor_by_record[record_id],
            )
        log.info(
            "Found %s duplicates, deleted %s%s",
            len(found.superseded),
            found.deleted,
            "" if found.applied else " (dry run, nothing written)",
        )
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        config = get_reconcile_config()
        _validate(parsed_args, config)
    except (ValueError, ConfigurationError):
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, config)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
