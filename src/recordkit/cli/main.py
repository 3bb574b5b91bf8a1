# main.py
# SPDX-License-Identifier: MIT

from __future__ import annotations

import argparse
import json
import sys
from contextlib import nullcontext
from pathlib import Path
from typing import IO, Optional, Sequence

from ..core.config import FieldSpec, RecordKitConfig, load_config_from_path
from ..core.iteration import ReshufflePolicy
from ..core.log import configure_logging, get_logger
from ..core.splits import CollectionInputSplit, FileSplit
from ..core.values import record_to_json
from ..readers.factories import build_document_reader
from ..readers.formats import AUTO_FORMAT, FormatRegistry, default_formats

log = get_logger(__name__)

DEFAULT_LOG_LEVEL = "WARNING"


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level recordkit CLI argument parser.

    Returns:
        argparse.ArgumentParser: Parser with ``read`` and ``formats``
        subcommands.
    """
    parser = argparse.ArgumentParser(prog="recordkit", description="recordkit CLI")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g., DEBUG, INFO, WARNING). Overrides the config's [logging] level.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    read_p = subparsers.add_parser("read", help="Extract field records from documents as JSONL.")
    read_p.add_argument("inputs", nargs="*", help="Document files or directories to read.")
    read_p.add_argument("-c", "--config", help="Path to config file (TOML or JSON).")
    read_p.add_argument("--format", help="Document format (json, yaml, xml, or auto to pick by file suffix). Defaults to the config.")
    read_p.add_argument(
        "--field",
        action="append",
        default=[],
        metavar="PATH[=FALLBACK]",
        help="Field to extract, e.g. 'b.c=MISSING'. Repeatable; replaces config fields.",
    )
    read_p.add_argument("--shuffle", action="store_true", help="Visit documents in shuffled order.")
    read_p.add_argument("--seed", type=int, help="Shuffle RNG seed.")
    read_p.add_argument(
        "--reshuffle",
        choices=sorted(ReshufflePolicy.ALL),
        help="Reset behaviour of a shuffled traversal.",
    )
    read_p.add_argument("--label", choices=["none", "parent_dir"], help="Label generator.")
    read_p.add_argument("--label-position", type=int, help="Output index of the label (-1 = last).")
    read_p.add_argument("-o", "--output", help="Output JSONL path (defaults to stdout).")
    read_p.add_argument("--dry-run", action="store_true", help="Validate and print config, then exit.")

    subparsers.add_parser("formats", help="List the built-in document formats.")
    return parser


def _parse_field(raw: str) -> FieldSpec:
    path, sep, fallback = raw.partition("=")
    return FieldSpec(path=path.strip(), fallback=fallback if sep else None)


def _apply_read_overrides(cfg: RecordKitConfig, args: argparse.Namespace) -> None:
    """Apply ``read`` command-line overrides to a config in place."""
    reader = cfg.reader
    if args.format:
        reader.format = args.format
    if args.field:
        reader.fields = tuple(_parse_field(raw) for raw in args.field)
    if args.shuffle:
        reader.shuffle.enabled = True
    if args.seed is not None:
        reader.shuffle.seed = args.seed
    if args.reshuffle:
        reader.shuffle.reshuffle_on_reset = args.reshuffle
    if args.label:
        reader.label.generator = args.label
    if args.label_position is not None:
        reader.label.position = args.label_position


def _collect_locations(inputs: Sequence[str], fmt: str, formats: FormatRegistry) -> list[str]:
    """Expand directories into their documents of the given format (any known one for auto)."""
    suffixes = formats.suffixes() if fmt == AUTO_FORMAT else formats.suffixes_for(fmt)
    locations: list[str] = []
    for raw in inputs:
        path = Path(raw)
        if path.is_dir():
            locations.extend(FileSplit(path, allowed_extensions=suffixes or None).locations())
        else:
            locations.append(path.resolve().as_uri())
    return locations


def _cmd_read(args: argparse.Namespace) -> int:
    if args.config:
        cfg = load_config_from_path(args.config)
        cfg.logging.apply()
        # --log-level wins over the config's [logging] level.
        if args.log_level:
            configure_logging(level=args.log_level, propagate=cfg.logging.propagate)
    else:
        cfg = RecordKitConfig()
    _apply_read_overrides(cfg, args)
    cfg.validate()
    if args.dry_run:
        print(json.dumps(cfg.to_dict(), indent=2))
        return 0
    if not args.inputs:
        print("No inputs given.", file=sys.stderr)
        return 1

    formats = default_formats()
    reader = build_document_reader(cfg, formats=formats)
    split = CollectionInputSplit(_collect_locations(args.inputs, cfg.reader.format, formats))

    count = 0
    sink = open(args.output, "w", encoding="utf-8") if args.output else nullcontext(sys.stdout)
    with sink as out, reader:
        reader.initialize(split)
        for record in reader:
            _write_record(out, record)
            count += 1
    log.info("Wrote %d records from %d locations", count, split.length())
    return 0


def _write_record(out: IO[str], record) -> None:
    out.write(json.dumps(record_to_json(record), ensure_ascii=False) + "\n")


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch a parsed CLI command; returns the process exit code."""
    cmd = args.command
    if not (cmd == "read" and args.config):
        configure_logging(level=args.log_level or DEFAULT_LOG_LEVEL)

    if cmd == "read":
        return _cmd_read(args)

    if cmd == "formats":
        for name in default_formats().names():
            print(name)
        return 0

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the recordkit command-line interface.

    Args:
        argv (Sequence[str] | None): Arguments to parse instead of
            ``sys.argv[1:]``. Primarily useful for tests.

    Returns:
        int: Process exit code; 0 on success.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return _dispatch(args)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
