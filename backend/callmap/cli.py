"""CLI for diffing, validating, and resolving call map files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from callmap.delta import diff_with_summary
from callmap.errors import CallMapError
from callmap.loader import (
    delta_to_document,
    load_callmap,
    load_chain,
    read_baseline,
    write_delta_file,
)
from callmap.resolver import Resolver
from callmap.signature import Signature
from callmap.validator import validate
from callmap_api.config import settings

logger = logging.getLogger(__name__)


def _signature_document(signature: Signature) -> dict[str, str]:
    return {str(key): value for key, value in signature.to_mapping().items()}


def diff_command(older: Path, newer: Path, output: Path | None = None) -> int:
    """Diff two baseline-format tables and write or print the delta.

    Args:
        older: Table at the earlier version.
        newer: Table at the later version.
        output: Delta file to write; printed to stdout when omitted.

    Returns:
        0 on success, 1 on failure.
    """
    try:
        delta, summary = diff_with_summary(read_baseline(older), read_baseline(newer))
    except CallMapError as e:
        logger.error(f"Diff failed: {e}")
        return 1

    logger.info(f"Diff {older.name} -> {newer.name}: {summary}")
    if output is not None:
        write_delta_file(delta, output)
    else:
        print(json.dumps(delta_to_document(delta), indent=4))
    return 0


def validate_command(directory: Path, versions: list[str]) -> int:
    """Validate the delta chain stored in ``directory``.

    Returns:
        0 if the chain is consistent, 1 otherwise.
    """
    try:
        chain = load_chain(directory, versions)
    except CallMapError as e:
        logger.error(f"Could not load delta chain: {e}")
        return 1

    result = validate(chain)
    print(
        f"Checked {result.transitions_checked} transitions, "
        f"{result.routines_checked} routine entries"
    )
    if result.is_consistent:
        print("Delta chain is consistent.")
        return 0

    print(f"Found {len(result.issues)} inconsistencies:")
    for issue in result.issues:
        print(f"  {issue.transition}: {issue.routine}")
        print(f"    asserted by {issue.previous_transition}: {issue.expected or 'absent'}")
        print(f"    asserted by {issue.transition}: {issue.actual or 'absent'}")
    return 1


def resolve_command(
    version: str,
    directory: Path,
    versions: list[str],
    routine: str | None = None,
) -> int:
    """Print the signature table (or one routine) at ``version``.

    Returns:
        0 on success, 1 on failure or unknown routine.
    """
    try:
        data = load_callmap(directory, versions, settings.callmap_baseline_file)
        table = Resolver(data.baseline, data.baseline_version, data.chain).resolve(version)
    except (CallMapError, ValueError) as e:
        logger.error(f"Resolution failed: {e}")
        return 1

    if routine is not None:
        signature = table.get(routine)
        if signature is None:
            logger.error(f"Routine {routine!r} does not exist at {version}")
            return 1
        print(json.dumps({routine: _signature_document(signature)}, indent=4))
        return 0

    document = {name: _signature_document(table[name]) for name in sorted(table)}
    print(json.dumps(document, indent=4))
    return 0


def versions_command(directory: Path, versions: list[str]) -> int:
    """Print every version the stored delta chain reaches."""
    try:
        chain = load_chain(directory, versions)
    except CallMapError as e:
        logger.error(f"Could not load delta chain: {e}")
        return 1

    for transition in chain.transitions:
        print(f"  {transition}")
    print(f"Versions: {', '.join(str(v) for v in chain.boundaries) or 'none'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(description="Call map delta tooling")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Diff command
    diff_parser = subparsers.add_parser("diff", help="Diff two signature tables")
    diff_parser.add_argument("older", type=Path, help="Table at the older version")
    diff_parser.add_argument("newer", type=Path, help="Table at the newer version")
    diff_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Delta file to write (default: print to stdout)",
    )

    # Commands that read a call map directory
    for name, help_text in (
        ("validate", "Check that the delta chain is consistent"),
        ("resolve", "Resolve the signature table at a version"),
        ("versions", "List the versions the delta chain reaches"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--dir",
            type=Path,
            default=settings.callmap_dir,
            help=f"Call map directory (default: {settings.callmap_dir})",
        )
        sub.add_argument(
            "--versions",
            nargs="+",
            default=settings.supported_versions,
            help="Supported versions, ascending",
        )
        if name == "resolve":
            sub.add_argument("version", help="Target version (e.g., 8.3)")
            sub.add_argument("--routine", "-r", help="Print only this routine")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(levelname)-5.5s [%(name)s] %(message)s",
    )

    if args.command == "diff":
        return diff_command(args.older, args.newer, args.output)
    elif args.command == "validate":
        return validate_command(args.dir, args.versions)
    elif args.command == "resolve":
        return resolve_command(args.version, args.dir, args.versions, args.routine)
    elif args.command == "versions":
        return versions_command(args.dir, args.versions)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
