from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mapsync.adapters.mapping_file import load_mappings
from mapsync.app import list_history, reconcile_mappings
from mapsync.config import configure_logging
from mapsync.domain.model import MapProject, MapRelation, MapSet

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile SNOMED CT map refsets")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser(
        "reconcile", help="Write submitted mappings to the Terminology Store"
    )
    reconcile.add_argument("--map-set", required=True, help="Refset id of the map set")
    reconcile.add_argument(
        "--module-id", required=True, help="Local edition module owning new members"
    )
    reconcile.add_argument("--branch", required=True, help="Branch path to write to")
    reconcile.add_argument(
        "--map-set-module-id", help="Module owning the map set (defaults to --module-id)"
    )
    reconcile.add_argument("--from-terminology", default="SNOMEDCT")
    reconcile.add_argument("--from-version", default="")
    reconcile.add_argument("--to-terminology", default="")
    reconcile.add_argument("--to-version", default="")
    reconcile.add_argument(
        "--relation",
        action="append",
        default=[],
        metavar="CODE=NAME",
        help="Map relation known to the project (repeatable)",
    )
    reconcile.add_argument("mappings", help="JSON file with the submitted mappings")

    history = subparsers.add_parser("history", help="Show recent reconciliations")
    history.add_argument("--limit", type=int, default=20, help="Number of entries to show")
    history.add_argument("--map-set", help="Only show entries for this refset id")

    return parser.parse_args(list(argv))


def _parse_relation(value: str) -> MapRelation:
    code, separator, name = value.partition("=")
    if not separator or not code.strip() or not name.strip():
        raise ValueError(f"Invalid relation (expected CODE=NAME): {value}")
    return MapRelation(code=code.strip(), name=name.strip())


def _build_project(args: argparse.Namespace) -> MapProject:
    map_set = MapSet(
        code=args.map_set,
        module_id=args.map_set_module_id or args.module_id,
        branch_path=args.branch,
        from_terminology=args.from_terminology,
        from_version=args.from_version,
        to_terminology=args.to_terminology,
        to_version=args.to_version,
    )
    return MapProject(
        module_id=args.module_id,
        map_set=map_set,
        branch=args.branch,
        relations=tuple(_parse_relation(value) for value in args.relation),
    )


def _run_reconcile(args: argparse.Namespace) -> bool:
    project = _build_project(args)
    mappings = load_mappings(args.mappings, map_set_code=project.map_set.code)
    report = reconcile_mappings(project, mappings)
    for outcome in report:
        if outcome.succeeded:
            log.info("%s: %s", outcome.code, outcome.status)
        else:
            log.error("%s: %s (%s)", outcome.code, outcome.status, outcome.message)
    return report.ok


def _run_history(args: argparse.Namespace) -> None:
    if args.limit < 1:
        raise ValueError("--limit must be positive")
    for audit in list_history(limit=args.limit, map_set_code=args.map_set):
        print(  # noqa: T201
            f"{audit.recorded_at.isoformat()} {audit.map_set_code} {audit.source_code} "
            f"{audit.status} created={audit.created} deleted={audit.deleted} "
            f"inactivated={audit.inactivated} reactivated={audit.reactivated} "
            f"updated={audit.updated}" + (f" message={audit.message}" if audit.message else "")
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "reconcile":
            if not _run_reconcile(parsed_args):
                sys.exit(1)
        elif parsed_args.command == "history":
            _run_history(parsed_args)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
