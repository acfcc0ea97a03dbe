"""CLI entry point for inbox-reply.

Usage:
    inbox-reply build --input messages.jsonl                 # Build datasets
    inbox-reply build --input messages.jsonl --feature-set with_recipient
    inbox-reply --env-file .env build --input messages.jsonl
    inbox-reply --help                                       # Show all options
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from inbox_reply.core.config import Config
from inbox_reply.core.exceptions import InboxReplyError
from inbox_reply.dataset.inputs import Inputs
from inbox_reply.features.feature_set import FeatureSetType
from inbox_reply.services.ingest import ingest_records, load_records
from inbox_reply.services.splitting import split_user_messages


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Build reply-prediction datasets from an exported mailbox",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to .env file (default: .env in project root)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build = subparsers.add_parser("build", help="Ingest, split and featurize a mailbox")
    build.add_argument(
        "--input",
        type=Path,
        required=True,
        metavar="FILE",
        help="JSON Lines file with one message record per line",
    )
    build.add_argument(
        "--feature-set",
        choices=[t.value for t in FeatureSetType],
        default=None,
        help="Feature set to build (default: FEATURE_SET or 'initial')",
    )
    return parser.parse_args(argv)


def get_env_file(args: argparse.Namespace) -> Path | None:
    """Get the .env file path from args or default location."""
    env_file = args.env_file
    if env_file is None:
        project_root = Path(__file__).resolve().parent.parent.parent
        env_file = project_root / ".env"
    return env_file if env_file.exists() else None


def build(args: argparse.Namespace, config: Config) -> int:
    """Handle the build command. Returns the process exit code."""
    if args.feature_set:
        config.feature_set = args.feature_set

    problems = config.validate()
    if problems:
        print("Configuration errors:", file=sys.stderr)
        for problem in problems:
            print(f"  - {problem}", file=sys.stderr)
        return 1

    try:
        user = ingest_records(load_records(args.input), config.your_email)
    except (OSError, ValueError, ValidationError, InboxReplyError) as e:
        print(f"Could not load {args.input}: {e}", file=sys.stderr)
        return 1

    errors = split_user_messages(user, config)
    for error in errors:
        print(f"  - {error}", file=sys.stderr)

    inputs = Inputs.from_user(user, FeatureSetType(config.feature_set))

    print(f"User: {user.user_name}")
    print("=" * 60)
    print(inputs)
    print(f"Features: {len(inputs.feature_names)} buckets")
    for feature, cells in inputs.train_and_validation.feature_histograms.items():
        print(f"\n{feature}")
        for cell, fraction in cells.items():
            print(f"  {cell:<40} {fraction:.2f}")
    print("=" * 60)
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for building datasets."""
    args = parse_args(argv)

    env_file = get_env_file(args)
    try:
        config = Config.from_env(env_file)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "build":
        sys.exit(build(args, config))

    print("Usage: inbox-reply build --input FILE [--feature-set NAME]")
    sys.exit(1)


if __name__ == "__main__":
    main()
