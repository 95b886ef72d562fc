"""Command line entry point for harmonic pattern reports over .daw albums."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import album_parser, output
from .analysis import HarmonicService
from .config import load_settings
from .errors import ChartFormatError, SettingsError
from .models import ChartObject, MultiChart

DEFAULT_OUTPUT_DIR = Path("outputs")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resonance-report",
        description="Find harmonic resonance patterns in the charts of a .daw album.",
    )
    parser.add_argument("album", help="Path to the .daw album file.")
    parser.add_argument(
        "--chart",
        action="append",
        default=[],
        help="Chart to analyse; repeat to analyse several together (default: the first chart).",
    )
    parser.add_argument("--aspects", action="store_true", help="Print the aspect table as well.")
    parser.add_argument("--detailed", action="store_true", help="Detailed pattern report with connectivity.")
    parser.add_argument("--edge", type=int, help="Highest harmonic to analyse.")
    parser.add_argument("--divisor", type=int, help="Orb divisor (primary orb = 360 / divisor).")
    parser.add_argument("--full-orbs", action="store_true", help="Do not halve orbs for cross-chart pairs.")
    parser.add_argument("--settings", help="Settings file (default: $RESONANCE_SETTINGS).")
    parser.add_argument("--md", help="Write a Markdown copy of the report (relative names go to outputs/).")
    parser.add_argument("--plain", action="store_true", help="Plain text output instead of rich tables.")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    return parser


def _select_chart(album: album_parser.Album, names: list[str]) -> ChartObject:
    if not names:
        if not album.entries:
            raise ChartFormatError(f"album {album.name!r} holds no charts")
        return album.entries[0]
    selected = []
    for name in names:
        entry = album.get(name)
        if entry is None:
            raise ChartFormatError(f"chart {name!r} not found in album {album.name!r}")
        selected.append(entry)
    return selected[0] if len(selected) == 1 else MultiChart(*selected)


def _resolve_output_path(path_str: str | None) -> Path | None:
    if not path_str:
        return None
    p = Path(path_str)
    if not p.is_absolute() and p.parent == Path("."):
        p = DEFAULT_OUTPUT_DIR / p
    return p


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point.

    Usage:
        resonance-report album.daw --chart NAME [--chart OTHER] [--detailed]
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    file_path = Path(args.album)
    if not file_path.exists():
        print(f"Error: file not found -> {file_path}")
        sys.exit(1)

    try:
        settings = load_settings(args.settings).with_overrides(
            edge_harmonic=args.edge,
            orb_divisor=args.divisor,
            half_orbs_for_doubles=False if args.full_orbs else None,
        )
        album = album_parser.load_album(file_path)
        chart = _select_chart(album, args.chart)
    except (ChartFormatError, SettingsError) as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    service = HarmonicService(lambda: settings)
    pattern_table = service.pattern_table(chart)
    aspect_table = service.aspect_table(chart) if args.aspects else None

    if args.plain:
        print("\n".join(output.chart_position_lines(chart)))
        print()
        output.print_text_report(pattern_table, args.detailed)
        if aspect_table is not None:
            output.print_aspect_table(aspect_table)
    else:
        output.print_rich_report(pattern_table, args.detailed)
        if aspect_table is not None:
            output.print_rich_aspects(aspect_table)

    md_path = _resolve_output_path(args.md)
    if md_path:
        if args.plain:
            markdown = output.build_text_markdown(pattern_table, args.detailed)
        else:
            markdown = output.build_markdown_report(pattern_table, args.detailed, aspect_table)
        output.write_markdown(md_path, markdown)
        print(f"Markdown written to {md_path}")


if __name__ == "__main__":
    main()
