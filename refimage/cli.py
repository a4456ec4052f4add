"""refimage CLI entrypoints."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from PIL import UnidentifiedImageError

from .alter.planner import TransformPlanner
from .compare.similarity import DEFAULT_DUPLICATE_THRESHOLD, compare
from .config import Settings
from .errors import RefImageError
from .metadata import describe_image
from .utils import load_dotenv


def _parse_attr(raw: str) -> tuple[str, str]:
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Invalid --attr '{raw}'. Expected KEY=VALUE like 'Resize Method=Crop'.")
    key, value = raw.split("=", 1)
    return key.strip(), value.strip()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="refimage", description="Reference image helpers for behavioral tests")
    sub = parser.add_subparsers(dest="command")

    alter = sub.add_parser("alter", help="Resize/crop/reformat an image in place")
    alter.add_argument("path", help="Image to alter")
    alter.add_argument(
        "--attr",
        action="append",
        type=_parse_attr,
        default=[],
        help="Transform attribute KEY=VALUE (repeatable)",
    )
    alter.add_argument("--tool", help="Image tool executable (default: REFIMAGE_TOOL or mogrify)")
    alter.add_argument("--dry-run", action="store_true", help="Print the command without running it")

    describe = sub.add_parser("describe", help="Print normalized format details")
    describe.add_argument("path")

    comp = sub.add_parser("compare", help="Perceptual similarity between two images")
    comp.add_argument("reference")
    comp.add_argument("candidate")
    comp.add_argument("--threshold", type=int, default=DEFAULT_DUPLICATE_THRESHOLD)

    return parser


def _handle_alter(args: argparse.Namespace) -> int:
    settings = Settings.from_env()
    planner = TransformPlanner(args.tool or settings.tool, timeout_s=settings.tool_timeout_s)
    try:
        plan = planner.plan(args.path, dict(args.attr))
        for warning in plan.warnings:
            print(f"Warning: {warning}", file=sys.stderr)
        print(plan)
        if not args.dry_run:
            planner.alter_image(args.path, dict(args.attr))
    except RefImageError as exc:
        print(f"Alter failed: {exc}", file=sys.stderr)
        return 2
    return 0


def _handle_describe(args: argparse.Namespace) -> int:
    try:
        details = describe_image(Path(args.path))
    except (FileNotFoundError, UnidentifiedImageError) as exc:
        print(f"Describe failed: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(details, indent=2, sort_keys=True))
    return 0


def _handle_compare(args: argparse.Namespace) -> int:
    try:
        metrics = compare(Path(args.reference), Path(args.candidate), args.threshold)
    except (FileNotFoundError, UnidentifiedImageError) as exc:
        print(f"Compare failed: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(metrics, indent=2))
    return 0 if metrics["duplicate"] else 1


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command == "alter":
        return _handle_alter(args)
    if args.command == "describe":
        return _handle_describe(args)
    if args.command == "compare":
        return _handle_compare(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
