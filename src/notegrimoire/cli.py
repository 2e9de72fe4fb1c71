"""Command-line utilities for NoteGrimoire.

Runs the selection pipeline over files so renderer output can be checked
without a browser:

    notegrimoire canonicalize fragment.html
    notegrimoire normalize selection.txt
    notegrimoire clip page.html --region "//div[@id='explanation']" \\
        --start "//p[2]" --end "//p[3]"
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from notegrimoire import __version__, setup_logging
from notegrimoire.capture.lxml_selection import (
    SelectionError,
    parse_document,
    region_from_xpath,
    select_between,
)
from notegrimoire.config import get_settings
from notegrimoire.markup.canonicalizer import canonicalize
from notegrimoire.pipeline import capture_and_extract, note_markup
from notegrimoire.text.normalizer import normalize

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for the notegrimoire subcommands."""
    parser = argparse.ArgumentParser(
        prog="notegrimoire",
        description="Turn selections of rendered explanations into notes.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Console log level (default: CLI__LOG_LEVEL or WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    canon_p = sub.add_parser("canonicalize", help="Canonicalize selection markup")
    canon_p.add_argument("file", nargs="?", help="Markup file (stdin if omitted)")
    canon_p.add_argument(
        "--text", dest="text_file", help="Plain-text sibling used for the fallback"
    )

    norm_p = sub.add_parser("normalize", help="Normalize selection text")
    norm_p.add_argument("file", nargs="?", help="Text file (stdin if omitted)")

    clip_p = sub.add_parser("clip", help="Clip a note from a rendered HTML page")
    clip_p.add_argument("file", help="Rendered HTML document")
    clip_p.add_argument("--region", required=True, help="XPath of tracking region")
    clip_p.add_argument("--start", required=True, help="XPath of first element")
    clip_p.add_argument("--end", help="XPath of last element (default: --start)")

    return parser


def _read_input(path: str | None) -> str:
    if path is None:
        return sys.stdin.read()
    file_path = Path(path)
    if not file_path.is_file():
        console.print(f"[red]Error:[/] file not found: {escape(path)}")
        sys.exit(1)
    return file_path.read_text(encoding="utf-8")


def _print_plain(value: str) -> None:
    console.print(value, markup=False, highlight=False, soft_wrap=True)


def _cmd_clip(args: argparse.Namespace) -> None:
    document = _read_input(args.file)
    try:
        tree = parse_document(document)
        region = region_from_xpath(tree, args.region)
        if region is None:
            console.print(f"[red]Error:[/] region not found: {escape(args.region)}")
            sys.exit(1)
        selection = select_between(tree, args.start, args.end)
    except SelectionError as exc:
        console.print(f"[red]Error:[/] {escape(str(exc))}", highlight=False)
        sys.exit(1)

    output = capture_and_extract(selection, region)
    if output is None:
        console.print("[yellow]Selection is out of scope; nothing captured[/]")
        sys.exit(1)

    console.print(
        Panel(
            Group(
                Text("Text", style="bold"),
                Text(output.text),
                Text("Markup", style="bold"),
                Text(output.markup),
                Text("Note", style="bold"),
                Text(note_markup(output)),
            ),
            title="Clipped selection",
        )
    )


def main(argv: list[str] | None = None) -> None:
    """Entry point for the notegrimoire command."""
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    settings = get_settings()
    level_name = (args.log_level or settings.cli.log_level).upper()
    setup_logging(getattr(logging, level_name, logging.WARNING), settings.cli.log_dir)

    match args.command:
        case "canonicalize":
            raw_markup = _read_input(args.file)
            plain_text = (
                _read_input(args.text_file) if args.text_file is not None else None
            )
            _print_plain(canonicalize(raw_markup, plain_text=plain_text))
        case "normalize":
            _print_plain(normalize(_read_input(args.file)))
        case "clip":
            _cmd_clip(args)


if __name__ == "__main__":
    main()
