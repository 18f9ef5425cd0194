"""Command-line interface for dotenv-merge."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .analysis import DEFAULT_FREEZE_TOKEN
from .config import DEFAULT_PREFERENCE_KEY, MergeOptions
from .errors import DotenvMergeError
from .logger import enable_debug
from .merger import merge_files, merge_trees
from .resolver import classify_by_kind
from .scanner import DEFAULT_PATTERN


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="dotenv-merge",
        description="Merge a template dotenv file into a destination, keeping local customizations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s .env.example .env
  %(prog)s --append-template-only .env.example .env
  %(prog)s --preference template -o merged.env .env.example .env
  %(prog)s --check --pattern '*.env' templates/ deploy/
        """
    )

    parser.add_argument("template", type=Path, help="Template file or directory")
    parser.add_argument("destination", type=Path, help="Destination file or directory")

    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Where to write the merged result (default: update destination in place)"
    )

    parser.add_argument(
        "--preference", "-p",
        choices=["template", "destination"],
        default="destination",
        help="Which side wins when a key exists in both (default: destination)"
    )

    parser.add_argument(
        "--prefer-type",
        action="append",
        default=[],
        metavar="TAG=SIDE",
        help="Per statement type preference, e.g. assignment=template (repeatable)"
    )

    parser.add_argument(
        "--append-template-only", "-a",
        action="store_true",
        help="Append template keys that are missing from the destination"
    )

    parser.add_argument(
        "--freeze-token", "-t",
        default=DEFAULT_FREEZE_TOKEN,
        help="Token used in freeze markers (default: %(default)s)"
    )

    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="File name glob used when merging directories (default: %(default)s)"
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Do not write anything; exit with status 1 if the merge would change files"
    )

    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write the merge decisions as JSON to this path"
    )

    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Overwrite an existing output without asking"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments."""
    if not args.template.exists():
        print(f"Error: Template does not exist: {args.template}")
        sys.exit(1)
    if not args.destination.exists():
        print(f"Error: Destination does not exist: {args.destination}")
        sys.exit(1)
    if args.template.is_dir() != args.destination.is_dir():
        print("Error: Template and destination must both be files or both be directories")
        sys.exit(1)
    for item in args.prefer_type:
        tag, sep, side = item.partition("=")
        if not sep or not tag or side not in ("template", "destination"):
            print(f"Error: Invalid --prefer-type value: {item} (expected TAG=template|destination)")
            sys.exit(1)


def build_options(args: argparse.Namespace) -> MergeOptions:
    """Build merge options from parsed arguments."""
    if args.prefer_type:
        preference = {DEFAULT_PREFERENCE_KEY: args.preference}
        for item in args.prefer_type:
            tag, _, side = item.partition("=")
            preference[tag] = side
        return MergeOptions(
            preference=preference,
            append_template_only=args.append_template_only,
            freeze_token=args.freeze_token,
            classification=classify_by_kind
        )

    return MergeOptions(
        preference=args.preference,
        append_template_only=args.append_template_only,
        freeze_token=args.freeze_token
    )


def confirm_output_overwrite(output: Optional[Path], destination: Path) -> bool:
    """Prompt user to confirm before replacing an output other than the destination."""
    if output is None or not output.exists():
        return True
    if output.resolve() == destination.resolve():
        return True
    if output.is_dir() and not any(output.iterdir()):
        return True
    print(f"Warning: Output already exists: {output}")
    response = input("Continue anyway? (y/N): ").strip().lower()
    return response == 'y'


def write_report(path: Path, decisions: dict) -> None:
    """Write the decision trail of each merged file as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(decisions, f, indent=2)


def print_summary(summary: dict) -> None:
    print(f"Decisions: {summary['total_decisions']}")
    print(f"Lines written: {summary['total_lines']}")
    for decision, count in summary["by_decision"].items():
        print(f"  - {decision}: {count}")


def run_file_merge(args: argparse.Namespace, options: MergeOptions) -> bool:
    """Merge one pair of files. Returns True if the output changed."""
    outcome = merge_files(args.template, args.destination, args.output, options, check=args.check)

    print(f"Output: {outcome.output_path}")
    print_summary(outcome.result.summary())

    if args.report:
        write_report(args.report, {
            "summary": outcome.result.summary(),
            "decisions": [d.to_dict() for d in outcome.result.decisions],
        })

    if args.check:
        print("Changes pending." if outcome.changed else "Up to date.")
    elif outcome.written:
        print("Merged file written.")
    else:
        print("No changes.")
    return outcome.changed


def run_tree_merge(args: argparse.Namespace, options: MergeOptions) -> bool:
    """Merge two directory trees. Returns True if any output changed."""
    report = merge_trees(
        args.template, args.destination, args.output, options,
        pattern=args.pattern, check=args.check
    )

    print("\n--- Merge Summary ---")
    print(f"Merged: {len(report.merged)}")
    print(f"Identical: {len(report.identical)}")
    print(f"Copied from destination: {len(report.copied)}")
    print(f"Seeded from template: {len(report.seeded)}")
    print(f"Skipped (template only): {len(report.skipped)}")
    print(f"{'Would change' if args.check else 'Changed'}: {len(report.changed)}")

    if report.errors:
        print(f"\n--- Errors ({len(report.errors)} files failed) ---")
        for error in report.errors[:10]:
            print(f"  {error.relative_path}")
            print(f"    {error.error}")
        if len(report.errors) > 10:
            print(f"  ... and {len(report.errors) - 10} more errors")
    print("-" * 20)

    if args.report:
        write_report(args.report, {
            path: {
                "summary": outcome.result.summary(),
                "decisions": [d.to_dict() for d in outcome.result.decisions],
            }
            for path, outcome in report.outcomes.items()
        })

    return bool(report.changed)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    validate_args(args)

    if args.verbose:
        enable_debug()

    if not args.check and not args.yes and not confirm_output_overwrite(args.output, args.destination):
        print("Aborted.")
        sys.exit(0)

    try:
        options = build_options(args)
    except DotenvMergeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("=" * 60)
    print("DOTENV MERGE")
    print("=" * 60)
    print(f"Template:    {args.template}")
    print(f"Destination: {args.destination}")

    try:
        if args.template.is_dir():
            changed = run_tree_merge(args, options)
        else:
            changed = run_file_merge(args, options)
    except (DotenvMergeError, OSError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\nInterrupted!")
        sys.exit(1)

    if args.check and changed:
        sys.exit(1)
