from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mepfix.app import build_exporter, run_batch_remediation
from mepfix.config import ConfigurationError, configure_logging, get_batch_config
from mepfix.domain.batch import CancellationToken
from mepfix.domain.exporting import ExportIntent, IfcVersion, SiteBasis, SpaceBoundaryLevel
from mepfix.domain.model import EquipmentCategory
from mepfix.domain.remediation import (
    RemediationPlan,
    RemediationTarget,
    RetentionPolicy,
    RetentionScope,
)
from mepfix.ui.keypress import stdin_poller

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Remediate overloaded equipment in engineering model files"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Process every model file in a folder")
    run.add_argument("--input-dir", type=str, help="Folder holding the model files")
    run.add_argument("--export-dir", type=str, help="Folder receiving exported files")
    run.add_argument("--log-file", type=str, help="Append-only run log")
    run.add_argument(
        "--extension",
        type=str,
        help="Model file extension (defaults to config)",
    )
    run.add_argument(
        "--category",
        type=str,
        default=str(EquipmentCategory.ELECTRICAL_EQUIPMENT),
        choices=[str(item) for item in EquipmentCategory],
        help="Equipment category checked for overloads (default: %(default)s)",
    )
    run.add_argument(
        "--ifc-version",
        type=str,
        default=str(IfcVersion.IFC2X3_CV2),
        choices=[str(item) for item in IfcVersion],
        help="Interchange schema version (default: %(default)s)",
    )
    run.add_argument(
        "--space-boundaries",
        type=int,
        default=int(SpaceBoundaryLevel.NONE),
        choices=[int(item) for item in SpaceBoundaryLevel],
        help="Space boundary level (default: %(default)s)",
    )
    run.add_argument("--phase", type=str, help="Phase to export (defaults to the last phase)")
    run.add_argument(
        "--site-basis",
        type=str,
        default=str(SiteBasis.SHARED_COORDINATES),
        choices=[str(item) for item in SiteBasis],
        help="Site placement basis (default: %(default)s)",
    )
    run.add_argument(
        "--no-base-quantities",
        action="store_true",
        help="Do not export base quantities",
    )
    run.add_argument(
        "--target",
        type=str,
        default=str(RemediationTarget.IMPLICATED),
        choices=[str(item) for item in RemediationTarget],
        help="Remediate only overloaded equipment or the whole category (default: %(default)s)",
    )
    run.add_argument(
        "--retention",
        type=str,
        default=str(RetentionScope.ANY_CONNECTOR),
        choices=[str(item) for item in RetentionScope],
        help="Which live connectors keep a subsystem alive (default: %(default)s)",
    )
    run.add_argument(
        "--sweep",
        type=str,
        help="Comma separated equipment categories to disconnect entirely (e.g. pipe,duct)",
    )
    run.add_argument(
        "--remote-export",
        action="store_true",
        help="Convert through the remote export service instead of writing locally",
    )
    run.add_argument(
        "--watch-stdin",
        action="store_true",
        help="Type q and Enter to stop after the current file",
    )

    return parser.parse_args(list(argv))


def _parse_sweep(value: str | None) -> frozenset[EquipmentCategory]:
    if not value:
        return frozenset()
    categories: set[EquipmentCategory] = set()
    for raw in value.split(","):
        item = raw.strip()
        if not item:
            continue
        try:
            categories.add(EquipmentCategory(item))
        except ValueError as exc:
            raise ValueError(f"Unknown equipment category in --sweep: {item}") from exc
    return frozenset(categories)


def _build_intent(args: argparse.Namespace) -> ExportIntent:
    return ExportIntent(
        ifc_version=IfcVersion(args.ifc_version),
        space_boundaries=SpaceBoundaryLevel(args.space_boundaries),
        export_base_quantities=not args.no_base_quantities,
        phase=args.phase,
        site_basis=SiteBasis(args.site_basis),
    )


def _build_plan(args: argparse.Namespace) -> RemediationPlan:
    return RemediationPlan(
        target=RemediationTarget(args.target),
        category=EquipmentCategory(args.category),
        sweep_categories=_parse_sweep(args.sweep),
        retention=RetentionPolicy(scope=RetentionScope(args.retention)),
    )


def make_sigint_handler(
    token: CancellationToken,
) -> Callable[[int, FrameType | None], None]:
    """First Ctrl+C finishes the current file; the second one exits at once."""

    def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
        if token.cancelled:
            log.info("Closed by user (Ctrl+C)")
            sys.exit(0)
        log.info("Stopping after the current file (Ctrl+C again to quit)")
        token.cancel("interrupted by user")

    return sigint_handler


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        intent = _build_intent(parsed_args)
        plan = _build_plan(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        config = get_batch_config(
            {
                "input_dir": parsed_args.input_dir,
                "log_file": parsed_args.log_file,
                "export_dir": parsed_args.export_dir,
                "model_extension": parsed_args.extension,
            }
        )
        exporter = build_exporter(remote=parsed_args.remote_export)
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(1)

    token = CancellationToken()
    signal(SIGINT, make_sigint_handler(token))

    try:
        result = run_batch_remediation(
            config,
            export_intent=intent,
            plan=plan,
            category=plan.category,
            exporter=exporter,
            token=token,
            cancellation_poll=stdin_poller() if parsed_args.watch_stdin else None,
        )
    except Exception:
        log.exception("Fatal error during batch")
        sys.exit(1)

    if not result.succeeded:
        log.error("Batch could not start; see %s", config.log_file)
        sys.exit(1)
    log.info(
        "Batch %s: %d file(s) processed, %d with errors",
        result.status,
        result.processed,
        len(result.failed),
    )


if __name__ == "__main__":
    main()
