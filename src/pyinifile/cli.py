from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

import yaml

from . import api
from .codec import ScannerMode, serialize, to_text
from .document import MISSING, IniDocument
from .errors import IniFileError, InvalidParameterError

MODE_ENV = "PYINIFILE_MODE"

logger = logging.getLogger(__name__)


def _scanner_mode(args: argparse.Namespace) -> ScannerMode:
    """Return the mode from ``--mode``, then ``$PYINIFILE_MODE``, then typed."""
    raw = getattr(args, "mode", None) or os.environ.get(MODE_ENV) or ScannerMode.TYPED.value
    return ScannerMode.coerce(raw)


def _parse_pairs(pairs: list[str]) -> dict[str, str]:
    entries: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise InvalidParameterError("entry", f"expected KEY=VALUE, got {pair!r}")
        entries[key] = value
    return entries


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def show_cmd(args: argparse.Namespace) -> int:
    with IniDocument.open(args.path, read_only=True, scanner_mode=_scanner_mode(args)) as doc:
        if args.section is not None:
            entries = doc.fetch_section(args.section)
            if entries is None:
                print(f"section {args.section!r} not found", file=sys.stderr)
                return 1
            data = {args.section.strip(): entries}
        else:
            data = doc.fetch_all()
    if args.format == "json":
        print(json.dumps(data, indent=2))
    elif args.format == "yaml":
        print(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), end="")
    else:
        print(serialize(data), end="")
    return 0


def get_cmd(args: argparse.Namespace) -> int:
    value = api.get_entry(
        args.path, args.section, args.key, default=MISSING, scanner_mode=_scanner_mode(args)
    )
    if value is MISSING:
        return 1
    print(to_text(value))
    return 0


def set_cmd(args: argparse.Namespace) -> int:
    api.set_entry(args.path, args.section, args.key, args.value, create=args.create)
    return 0


def set_section_cmd(args: argparse.Namespace) -> int:
    entries = _parse_pairs(args.entries)
    api.set_section(args.path, args.section, entries, merge=args.merge, create=args.create)
    return 0


def delete_cmd(args: argparse.Namespace) -> int:
    if args.key is None:
        api.delete_section(args.path, args.section)
    else:
        api.delete_entry(args.path, args.section, args.key)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog or "pyinifile",
        description="Read and edit INI configuration files.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    modes = [m.value for m in ScannerMode]

    p_show = subparsers.add_parser("show", help="Print the whole file or one section.")
    p_show.add_argument("path", type=Path)
    p_show.add_argument("--section")
    p_show.add_argument("--as", dest="format", choices=["ini", "json", "yaml"], default="ini")
    p_show.add_argument("--mode", choices=modes, help=f"Scanner mode (default: ${MODE_ENV} or typed)")
    p_show.set_defaults(func=show_cmd)

    p_get = subparsers.add_parser("get", help="Print the value of KEY in SECTION.")
    p_get.add_argument("path", type=Path)
    p_get.add_argument("section")
    p_get.add_argument("key")
    p_get.add_argument("--mode", choices=modes, help=f"Scanner mode (default: ${MODE_ENV} or typed)")
    p_get.set_defaults(func=get_cmd)

    p_set = subparsers.add_parser("set", help="Set KEY in SECTION to VALUE.")
    p_set.add_argument("path", type=Path)
    p_set.add_argument("section")
    p_set.add_argument("key")
    p_set.add_argument("value")
    p_set.add_argument("--create", action="store_true", help="Create the file if it is missing")
    p_set.set_defaults(func=set_cmd)

    p_section = subparsers.add_parser("set-section", help="Replace or merge a whole section.")
    p_section.add_argument("path", type=Path)
    p_section.add_argument("section")
    p_section.add_argument("entries", nargs="*", metavar="KEY=VALUE")
    p_section.add_argument("--merge", action="store_true", help="Keep entries not named on the command line")
    p_section.add_argument("--create", action="store_true", help="Create the file if it is missing")
    p_section.set_defaults(func=set_section_cmd)

    p_delete = subparsers.add_parser("delete", help="Delete KEY, or all of SECTION when KEY is omitted.")
    p_delete.add_argument("path", type=Path)
    p_delete.add_argument("section")
    p_delete.add_argument("key", nargs="?")
    p_delete.set_defaults(func=delete_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    try:
        return int(func(args))
    except IniFileError as exc:
        logger.debug("%s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
