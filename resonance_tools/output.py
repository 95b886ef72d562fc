"""Output helpers for presenting pattern and aspect tables."""

from __future__ import annotations

from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from typing import List, Sequence

from .analysis.patterns import Cluster, Pattern
from .analysis.tables import AspectTable, PatternAnalysis, PatternTable
from .mechanics import format_arc, format_position
from .models import Chart, ChartObject, MultiChart, chart_names


def _frame(text: str, char: str = "=") -> str:
    """Text surrounded by a line of ``char`` above and below."""
    lines = text.strip("\n").splitlines()
    width = max(len(line) for line in lines) + 4
    rule = char * width
    return "\n".join([rule] + [f"  {line}" for line in lines] + [rule]) + "\n"


def _owner_label(chart: Chart, charts: Sequence[Chart]) -> str:
    """Letter for the owner when several charts are analysed, else empty."""
    if len(charts) < 2:
        return ""
    index = next(i for i, c in enumerate(charts) if c is chart)
    return MultiChart.letter_for(index)


def clustered_columns(pattern: Pattern) -> List[List[Cluster]]:
    """
    Group the clusters of a pattern into columns.

    Clusters of different charts that stand in conjunction share a column, so
    the rows of ``clustered_lines`` line them up under each other.
    """
    clusters = pattern.clusters_in_order()
    placed = [False] * len(clusters)
    columns: List[List[Cluster]] = []
    for i, cluster in enumerate(clusters):
        if placed[i]:
            continue
        column = [cluster]
        placed[i] = True
        for j in range(i + 1, len(clusters)):
            if not placed[j] and any(member.conjuncts_cluster(clusters[j]) for member in column):
                column.append(clusters[j])
                placed[j] = True
        columns.append(column)
    return columns


def clustered_lines(pattern: Pattern) -> List[str]:
    """One row per chart of the pattern, clusters in conjunction aligned in columns."""
    columns = clustered_columns(pattern)
    widths = [max(len(str(cluster)) for cluster in column) for column in columns]
    rows: List[str] = []
    for chart in pattern.charts:
        cells = []
        for column, width in zip(columns, widths):
            cell = "+".join(str(c) for c in column if c.chart is chart)
            cells.append(cell.ljust(width, "-") if cell else "-" * width)
        rows.append("-".join(cells))
    return rows


def connectivity_line(pattern: Pattern) -> str:
    """Members by connectivity: ``Sun 10°♌ :87% / Moon ...``."""
    entries = []
    for astra in pattern.astras_by_connectivity():
        owner = f"<{astra.chart.shortened_name(4)}>" if pattern.dimension > 1 and astra.chart else ""
        entries.append(f"{astra.name} {astra.zodiac_degree}{owner} :{pattern.connectivity_of(astra):.0f}%")
    return " / ".join(entries)


def pattern_report_lines(pattern: Pattern) -> List[str]:
    if pattern.size == 1:
        return [f"{pattern.names()} (-)"]
    lines = clustered_lines(pattern)
    lines[-1] += f": {pattern.average_strength:.0f}% ({pattern.size})"
    return lines + ["\t" + connectivity_line(pattern)]


def short_analysis_lines(analysis: PatternAnalysis, edge_harmonic: int) -> List[str]:
    """``h: pattern | pattern`` for every harmonic, ``h: -`` when nothing was found."""
    lines = []
    for harmonic in range(1, edge_harmonic + 1):
        patterns = analysis.patterns_for(harmonic)
        found = " | ".join(p.names() for p in patterns) if patterns else "-"
        lines.append(f"{harmonic}: {found}")
    return lines


def detailed_analysis_lines(analysis: PatternAnalysis, edge_harmonic: int) -> List[str]:
    lines: List[str] = []
    for harmonic in range(1, edge_harmonic + 1):
        patterns = analysis.patterns_for(harmonic)
        if not patterns:
            lines.append(_frame(f"No patterns at harmonic {harmonic}", "-").rstrip("\n"))
            continue
        header = (
            f"Patterns at harmonic {harmonic}\n"
            f"   <astras {analysis.astras_quantity_for(harmonic)}, "
            f"average strength {analysis.average_strength_for(harmonic):.0f}%>"
        )
        lines.append(_frame(header, "-").rstrip("\n"))
        for n, pattern in enumerate(patterns):
            if n:
                lines.append("_______")
            lines.extend(pattern_report_lines(pattern))
    return lines


def build_pattern_report(table: PatternTable, detailed: bool = False) -> str:
    """Plain-text report of a PatternTable, one section per chart combination."""
    title = "Detailed pattern analysis for: " if detailed else "Pattern analysis for: "
    parts = [_frame(title + chart_names(table.charts))]
    for combination, analysis in table.items():
        if len(table.charts) > 1:
            parts.append(_frame(f"Pattern table for {chart_names(combination)}:", "*"))
        lines = (
            detailed_analysis_lines(analysis, table.edge_harmonic)
            if detailed
            else short_analysis_lines(analysis, table.edge_harmonic)
        )
        parts.append("\n".join(lines) + "\n")
    return "".join(parts)


def chart_position_lines(chart: ChartObject) -> List[str]:
    lines: List[str] = []
    if isinstance(chart, MultiChart):
        lines.extend(chart.caption_lines())
    for component in chart.charts:
        lines.append(f"#{component.name}")
        for astra in component.astras:
            lines.append(f"  {astra.name:<10} {format_position(astra.position)}")
    return lines


def print_text_report(table: PatternTable, detailed: bool = False) -> None:
    print(build_pattern_report(table, detailed), end="")


def print_aspect_table(table: AspectTable) -> None:
    """Plain aspect listing per chart combination."""
    for combination, batches in table.items():
        print(f"Aspects for {chart_names(combination)}:")
        if not batches:
            print("  none")
        for batch in batches:
            a, b = batch.astras
            for aspect in batch.aspects:
                print(
                    f"  {a.label_with_owner():<20} {b.label_with_owner():<20} "
                    f"{aspect.fraction:>7} {format_arc(batch.arc):>12} "
                    f"{aspect.clearance:6.2f}° {aspect.strength:5.0f}% {aspect.strength_rating}"
                )
        print()


def print_rich_report(table: PatternTable, detailed: bool = False, console=None) -> None:
    """Render a PatternTable with rich tables, one per chart combination."""
    from rich.console import Console

    console = console or Console()
    _render_rich_patterns(console, table, detailed)


def print_rich_aspects(table: AspectTable, console=None) -> None:
    from rich.console import Console

    console = console or Console()
    _render_rich_aspects(console, table)


def _render_rich_patterns(console, table: PatternTable, detailed: bool) -> None:
    """Shared rich rendering so the report can also be exported."""
    from rich import box
    from rich.table import Table
    from rich.text import Text

    heading = "Detailed pattern analysis" if detailed else "Pattern analysis"
    console.print(f"[bold cyan]{heading} for: {chart_names(table.charts)}[/]")
    if len(table.charts) > 1:
        for i, chart in enumerate(table.charts):
            console.print(f"[dim]{MultiChart.letter_for(i)}: {chart.name}[/]")
    console.print()

    for combination, analysis in table.items():
        title = f"Patterns for {chart_names(combination)}"
        pattern_table = Table(title=title, box=box.SIMPLE, expand=False, min_width=60, padding=(0, 1))
        pattern_table.add_column("H", justify="right", style="cyan", no_wrap=True)
        pattern_table.add_column("Pattern", style="magenta", overflow="fold")
        pattern_table.add_column("Strength", justify="right", style="green", no_wrap=True)
        pattern_table.add_column("Astras", justify="center", no_wrap=True)
        if detailed:
            pattern_table.add_column("Connectivity", style="yellow", overflow="fold", max_width=60)

        for harmonic in analysis.harmonics:
            for pattern in analysis.patterns_for(harmonic):
                strength = Text(f"{pattern.average_strength:.0f}%")
                if pattern.average_strength >= 90:
                    strength.stylize("bold white on red")
                label = "\n".join(clustered_lines(pattern)) if detailed else pattern.names()
                if len(table.charts) > 1 and not detailed:
                    label = " ".join(
                        f"{a.name}{_owner_label(a.chart, table.charts)}" for a in pattern.astras_by_connectivity()
                    )
                row = [str(harmonic), label, strength, str(pattern.size)]
                if detailed:
                    row.append(connectivity_line(pattern))
                pattern_table.add_row(*row)
        if not analysis.harmonics:
            pattern_table.add_row("—", "None", "—", "—", *(["—"] if detailed else []))

        console.print(pattern_table)
        console.print()


def _render_rich_aspects(console, table: AspectTable) -> None:
    from rich import box
    from rich.table import Table
    from rich.text import Text

    for combination, batches in table.items():
        aspect_table = Table(
            title=f"Aspects for {chart_names(combination)}",
            box=box.SIMPLE,
            expand=False,
            min_width=60,
            padding=(0, 1),
        )
        aspect_table.add_column("Pair", style="cyan", overflow="fold", max_width=36)
        aspect_table.add_column("Arc", justify="right", no_wrap=True)
        aspect_table.add_column("Aspect", justify="center", no_wrap=True)
        aspect_table.add_column("Clearance", justify="right", style="green", no_wrap=True)
        aspect_table.add_column("Strength", justify="right", no_wrap=True)
        aspect_table.add_column("Precision", style="yellow", no_wrap=True)

        for batch in batches:
            a, b = batch.astras
            for aspect in batch.aspects:
                strength = Text(f"{aspect.strength:.0f}%")
                if aspect.strength >= 90:
                    strength.stylize("bold white on red")
                aspect_table.add_row(
                    f"{a.label} - {b.label}",
                    format_arc(batch.arc),
                    aspect.fraction,
                    f"{aspect.clearance:.2f}°",
                    strength,
                    f"{aspect.strength_rating} {aspect.strength_level}",
                )
        if not batches:
            aspect_table.add_row("—", "—", "None", "—", "—", "—")

        console.print(aspect_table)
        console.print()


def build_markdown_report(table: PatternTable, detailed: bool = False, aspects: AspectTable | None = None) -> str:
    """Return a markdown string mirroring the rich console output."""
    from rich.console import Console
    from rich.theme import Theme

    console = Console(record=True, theme=Theme({}), width=110)
    _render_rich_patterns(console, table, detailed)
    if aspects is not None:
        _render_rich_aspects(console, aspects)
    text = console.export_text()
    return "```\n" + text.rstrip() + "\n```"


def build_text_markdown(table: PatternTable, detailed: bool = False) -> str:
    """Markdown of the plain console output."""
    buf = StringIO()
    with redirect_stdout(buf):
        print_text_report(table, detailed)
    return "```\n" + buf.getvalue().rstrip() + "\n```"


def write_markdown(path: str | Path, markdown: str) -> Path:
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(markdown + "\n", encoding="utf-8")
    return file_path
