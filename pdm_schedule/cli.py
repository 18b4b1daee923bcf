"""
CLI interface for the schedule calculator.

Calculates the critical path of a project file and prints a report,
optionally exporting the schedule to CSV.
"""

import argparse
import json
import sys
from pathlib import Path

from src.config.settings import settings
from src.utils.logger import configure_logging
from schemas.validator import SchemaValidationError

from .analysis.critical_path import (
    analyze_critical_path,
    check_schedule,
    print_critical_path_report,
)
from .cpm.engine import calculate_critical_path
from .cpm.models import Project
from .cpm.network import TaskNetwork
from .cpm.validator import validate_dependencies
from .data_loader import (
    ProjectLoadError,
    export_schedule,
    load_project,
    load_project_from_csv,
    parse_start_date,
)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_INPUT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdm-schedule",
        description="Calculate early/late dates, float and the critical path of a project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report for a project document
  python -m pdm_schedule project.json

  # Only check dependencies for missing tasks and cycles
  python -m pdm_schedule project.json --validate-only

  # Build the project from CSV files and export the schedule
  python -m pdm_schedule --tasks-csv tasks.csv --dependencies-csv deps.csv \\
      --start-date 2025-01-06 --output schedule.csv

  # Run the consistency checks on the calculated schedule
  python -m pdm_schedule project.json --check
""",
    )

    parser.add_argument(
        "project_json",
        type=Path,
        nargs="?",
        help="Project JSON document",
    )
    parser.add_argument(
        "--tasks-csv",
        type=Path,
        help="Task CSV (alternative to project_json)",
    )
    parser.add_argument(
        "--dependencies-csv",
        type=Path,
        help="Explicit dependency CSV (used with --tasks-csv)",
    )
    parser.add_argument(
        "--start-date",
        type=str,
        help="Project start date YYYY-MM-DD (required with --tasks-csv)",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate dependencies without scheduling",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Run consistency checks on the calculated schedule",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the calculated schedule to this CSV",
    )
    parser.add_argument(
        "--near-critical-days",
        type=int,
        default=settings.NEAR_CRITICAL_THRESHOLD_DAYS,
        help=f"Float threshold for near-critical tasks (default: {settings.NEAR_CRITICAL_THRESHOLD_DAYS})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the schedule as JSON instead of the text report",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def _load(args, parser: argparse.ArgumentParser) -> Project:
    if args.project_json and args.tasks_csv:
        parser.error("use either project_json or --tasks-csv, not both")

    if args.project_json:
        return load_project(args.project_json)

    if args.tasks_csv:
        if not args.start_date:
            parser.error("--start-date is required with --tasks-csv")
        return load_project_from_csv(
            args.tasks_csv,
            start_date=parse_start_date(args.start_date),
            dependencies_csv=args.dependencies_csv,
            project_id=args.tasks_csv.stem,
        )

    parser.error("project_json or --tasks-csv is required")


def _print_errors(title: str, messages: list[str]) -> None:
    print(f"\n{title}:")
    for message in messages:
        print(f"  - {message}")


def run(args, parser: argparse.ArgumentParser) -> int:
    """Execute the command described by parsed arguments."""
    logger = configure_logging("pdm_schedule")
    if args.verbose:
        logger.setLevel("DEBUG")

    try:
        project = _load(args, parser)
    except ProjectLoadError as e:
        logger.error(str(e))
        return EXIT_INPUT_ERROR

    if args.validate_only:
        validation = validate_dependencies(project)
        if validation.is_valid:
            stats = TaskNetwork.from_project(project).get_statistics()
            print(f"Dependencies valid: {stats['total_tasks']} tasks, {stats['total_links']} links")
            return EXIT_OK
        _print_errors("Dependency errors", validation.errors)
        return EXIT_INVALID

    result = calculate_critical_path(project)
    if not result.is_valid:
        _print_errors("Cannot schedule project", result.errors)
        return EXIT_INVALID

    if args.json:
        print(json.dumps({
            'project_id': project.project_id,
            'project_duration': result.project_duration,
            'critical_path': result.critical_path,
            'schedule': {tid: vars(record) for tid, record in result.schedule_data.items()},
        }, indent=2))
    else:
        print_critical_path_report(analyze_critical_path(project, args.near_critical_days, result))

    exit_code = EXIT_OK

    if args.check:
        check = check_schedule(project, result)
        if check.errors:
            _print_errors("Consistency errors", check.errors)
            exit_code = EXIT_INVALID
        if check.warnings:
            _print_errors("Consistency warnings", check.warnings)
        if check.is_valid and not check.warnings:
            print("\nConsistency checks passed")

    if args.output:
        try:
            export_schedule(project, result, args.output)
        except SchemaValidationError as e:
            logger.error(str(e))
            return EXIT_INPUT_ERROR
        print(f"\nSchedule written to {args.output}")

    return exit_code


def main(argv: list[str] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return run(args, parser)


if __name__ == "__main__":
    sys.exit(main())
