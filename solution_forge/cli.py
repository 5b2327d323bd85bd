"""solution-forge command line.

Usage::

    solution-forge new -n Acme -p ./output
    solution-forge add-service -n Orders -s ./output/Acme
    solution-forge list -s ./output/Acme

Prerequisite checks and ``dotnet``/``npm`` invocations are deliberately not
part of this tool; it only writes and edits files.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from solution_forge.config import ForgeConfig
from solution_forge.scaffolder import ScaffoldError, SolutionGenerator
from solution_forge.scaffolder.models import ScaffoldResult
from solution_forge.utils import (
    configure_logging,
    console,
    print_error,
    print_header,
    print_rows,
    print_success,
    print_summary_table,
    print_warning,
    relative_to,
)

logger = logging.getLogger(__name__)


def port_number(value: str) -> int:
    """argparse ``type`` for TCP port flags."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from None
    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be between 1 and 65535, got {port}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solution-forge",
        description="Scaffold .NET Aspire + React solutions and add services to them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  solution-forge new -n Acme -p ./output\n"
            "  solution-forge add-service -n Orders -s ./output/Acme --http 5150\n"
            "  solution-forge list -s ./output/Acme\n"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: environment variables)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log every file written",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a new solution")
    new.add_argument("--name", "-n", required=True, help="Solution name, e.g. 'Acme'")
    new.add_argument(
        "--path", "-p",
        default=".",
        help="Parent directory for the solution (default: current directory)",
    )
    new.add_argument(
        "--api-http", type=port_number, default=None, help="API HTTP port (default: 5080)"
    )
    new.add_argument(
        "--api-https", type=port_number, default=None, help="API HTTPS port (default: 7080)"
    )
    new.add_argument(
        "--web", type=port_number, default=None, help="Web dev server port (default: 5173)"
    )
    new.add_argument(
        "--service",
        default=None,
        help="Domain service hosted by the initial API project (default: Weather)",
    )
    new.add_argument("--dry-run", action="store_true", help="Show the plan, write nothing")

    add = sub.add_parser("add-service", help="Add a backend service to an existing solution")
    add.add_argument("--name", "-n", required=True, help="Service name, e.g. 'Orders'")
    add.add_argument(
        "--solution", "-s",
        default=".",
        help="Path to the solution root (default: current directory)",
    )
    add.add_argument(
        "--http", type=port_number, default=None, help="HTTP port (default: auto-assigned)"
    )
    add.add_argument(
        "--https", type=port_number, default=None, help="HTTPS port (default: HTTP + 1000)"
    )
    add.add_argument("--dry-run", action="store_true", help="Show the plan, write nothing")

    show = sub.add_parser("list", help="List the units of an existing solution")
    show.add_argument(
        "--solution", "-s",
        default=".",
        help="Path to the solution root (default: current directory)",
    )
    return parser


def load_config(path: Optional[str]) -> ForgeConfig:
    if path:
        return ForgeConfig.load(Path(path))
    return ForgeConfig.from_env()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point for ``solution-forge`` and ``python -m solution_forge``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        print_error(f"Cannot load configuration: {exc}")
        sys.exit(1)
    configure_logging("DEBUG" if args.verbose else config.log_level)

    generator = SolutionGenerator(config)
    try:
        if args.command == "new":
            _cmd_new(generator, args)
        elif args.command == "add-service":
            _cmd_add_service(generator, args)
        else:
            _cmd_list(generator, args)
    except ScaffoldError as exc:
        logger.debug("%s failed at %s stage", args.command, exc.stage, exc_info=True)
        print_error(str(exc))
        sys.exit(exc.exit_code)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_new(generator: SolutionGenerator, args: argparse.Namespace) -> None:
    descriptor = generator.describe_solution(
        args.name,
        Path(args.path),
        api_http_port=args.api_http,
        api_https_port=args.api_https,
        web_port=args.web,
        service_name=args.service,
    )
    print_header(f"Creating solution {descriptor.name}")
    result = generator.create_solution(descriptor, dry_run=args.dry_run)
    _report(result)
    if result.dry_run:
        return

    print_success("Solution created successfully!")
    print_summary_table(
        {
            "Location": str(result.solution_root),
            "API (https)": f"https://localhost:{descriptor.api_https_port}/scalar/v1",
            "OpenAPI": f"https://localhost:{descriptor.api_https_port}/openapi/v1.json",
            "Frontend": f"http://localhost:{descriptor.web_port}",
            "Run": f"cd {result.solution_root} && aspire run",
        },
        title="Next steps",
    )


def _cmd_add_service(generator: SolutionGenerator, args: argparse.Namespace) -> None:
    print_header(f"Adding service {args.name}")
    result = generator.add_service(
        Path(args.solution),
        args.name,
        http_port=args.http,
        https_port=args.https,
        dry_run=args.dry_run,
    )
    _report(result)
    if result.dry_run:
        return

    unit = result.units[0]
    print_success(f"Microservice '{unit.name}' added successfully!")
    print_summary_table(
        {
            "Project": relative_to(result.written[0].parent, result.solution_root),
            "HTTP port": str(unit.http_port),
            "HTTPS port": str(unit.secure_port),
        },
        title="Service",
    )


def _cmd_list(generator: SolutionGenerator, args: argparse.Namespace) -> None:
    ledger = generator.scan(Path(args.solution))
    print_rows(
        ("Unit", "Kind", "HTTP", "HTTPS"),
        [(u.name, u.kind.value, u.http_port, u.secure_port) for u in ledger.units],
        title=f"Solution {ledger.solution_name}",
    )


def _report(result: ScaffoldResult) -> None:
    root = result.solution_root
    verb = "Would write" if result.dry_run else "Wrote"
    for path in result.written:
        console.print(f"  [green]{verb}[/green] {relative_to(path, root)}", highlight=False)
    verb = "Would update" if result.dry_run else "Updated"
    for path in result.mutated:
        console.print(f"  [cyan]{verb}[/cyan] {relative_to(path, root)}", highlight=False)
    console.print()
    for warning in result.warnings:
        print_warning(warning)


if __name__ == "__main__":
    main()
