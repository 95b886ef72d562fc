"""Parsing utilities for .daw chart albums."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import ChartFormatError
from .models import Astra, Chart, ChartObject, MultiChart

logger = logging.getLogger(__name__)

ALBUM_SUFFIX = ".daw"


@dataclass
class Album:
    """Ordered charts and multi-charts read from one album file."""

    name: str
    entries: List[ChartObject] = field(default_factory=list)

    def get(self, name: str) -> Optional[ChartObject]:
        return next((entry for entry in self.entries if entry.name == name), None)

    @property
    def charts(self) -> List[Chart]:
        return [entry for entry in self.entries if isinstance(entry, Chart)]

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def __iter__(self) -> Iterator[ChartObject]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def load_album(path: str | Path) -> Album:
    """Read a .daw album file; the album takes the file stem as its name."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"album file not found: {file_path}")
    album = parse_album(file_path.read_text(encoding="utf-8"), file_path.stem)
    logger.debug("Read %d entries from %s", len(album), file_path)
    return album


def parse_album(text: str, name: str = "album") -> Album:
    """
    Parse album text.

    ``#Name`` opens a chart, the following lines are its astras
    (``Name deg [min [sec]]`` or ``Name sign deg min sec``). ``<Title: #A #B>``
    declares a multi-chart of charts defined anywhere in the file; it keeps
    its place in the album order. Blank lines and ``//`` comments are skipped.
    """
    entries: List[Union[ChartObject, str]] = []
    current: Optional[Chart] = None

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        if line.startswith("<"):
            if not line.endswith(">"):
                raise ChartFormatError(f"line {number}: unterminated multi-chart definition {line!r}")
            current = None
            entries.append(line[1:-1].strip())
            continue
        if line.startswith("#"):
            chart_name = line[1:].strip()
            if not chart_name:
                raise ChartFormatError(f"line {number}: chart without a name")
            current = Chart(chart_name)
            entries.append(current)
            continue
        if current is None:
            raise ChartFormatError(f"line {number}: astra {line!r} outside of a chart")
        try:
            current.add_astra(Astra.from_line(line))
        except ChartFormatError as exc:
            raise ChartFormatError(f"line {number}: {exc}") from None

    charts = {entry.name: entry for entry in entries if isinstance(entry, Chart)}
    return Album(
        name=name,
        entries=[_multi_chart(entry, charts) if isinstance(entry, str) else entry for entry in entries],
    )


def _multi_chart(definition: str, charts: dict[str, Chart]) -> MultiChart:
    """Build a multi-chart from ``Title: #A #B``."""
    head, _, components = definition.partition("#")
    title = head.rstrip().removesuffix(":")
    names = [part.strip() for part in components.split("#") if part.strip()]
    if not names:
        raise ChartFormatError(f"multi-chart {definition!r} names no charts")
    missing = [n for n in names if n not in charts]
    if missing:
        raise ChartFormatError(f"multi-chart {title.strip()!r} refers to unknown charts: {', '.join(missing)}")
    return MultiChart(*(charts[n] for n in names), name=title.strip() or None)


def chart_to_text(chart: Chart) -> str:
    return "\n".join([f"#{chart.name}"] + [astra.to_line() for astra in chart.astras])


def dump_album(album: Album) -> str:
    """Render an album in the format parse_album reads."""
    blocks: List[str] = []
    for entry in album.entries:
        if isinstance(entry, Chart):
            blocks.append(chart_to_text(entry))
        else:
            components = " ".join(f"#{chart.name}" for chart in entry.charts)
            blocks.append(f"<{entry.name}: {components}>")
    return "\n\n".join(blocks) + "\n"


def save_album(album: Album, path: str | Path) -> Path:
    file_path = Path(path)
    if not file_path.suffix:
        file_path = file_path.with_suffix(ALBUM_SUFFIX)
    file_path.write_text(dump_album(album), encoding="utf-8")
    return file_path
