"""BOQRecon CLI.

Commands:
- extract-boq: Extract line items from a BOQ workbook (CSV/XLSX)
- analyze-drawing: Measure spaces in a drawing entity list (JSON)
- detect-conflicts: Compare BOQ areas against drawing areas
- analyze-gaps: List missing or invalid fields on BOQ line items
- reconcile: Run the full pass and optionally export reports
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from boqrecon.config import get_config
from boqrecon.core.logging import configure_logging
from boqrecon.drawings.extractor import DrawingMeasurementExtractor
from boqrecon.extraction.boq import BOQExtractor
from boqrecon.ingestion.drawings import load_drawing_document
from boqrecon.ingestion.workbooks import read_boq_workbook
from boqrecon.models import (
    BOQExtractionResult,
    Conflict,
    ConflictSeverity,
    DrawingSpace,
    Gap,
    GapSeverity,
)
from boqrecon.reconciliation.conflicts import ConflictDetector
from boqrecon.reconciliation.gaps import GapAnalyzer, prioritize, summarize
from boqrecon.reconciliation.orchestrator import ReconciliationOrchestrator
from boqrecon.reporting.builder import export_csv, export_excel
from boqrecon.reporting.summary import boq_summary, drawing_summary
from boqrecon.storage.repository import (
    InMemoryBOQRepository,
    InMemoryConflictRepository,
    InMemoryDrawingRepository,
)

app = typer.Typer(
    name="boqrecon",
    help="BOQRecon - Reconcile bills of quantities against drawing measurements",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Configure logging before any command runs."""
    config = get_config()
    configure_logging(
        level=log_level or config.log_level,
        json_logs=True if config.log_format == "json" else None,
    )


def _load_boq(path: Path) -> BOQExtractionResult:
    try:
        sheets = read_boq_workbook(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    return BOQExtractor().extract_workbook(sheets)


def _load_spaces(paths: list[Path]) -> list[DrawingSpace]:
    extractor = DrawingMeasurementExtractor()
    spaces: list[DrawingSpace] = []
    for path in paths:
        try:
            document = load_drawing_document(path)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]✗[/red] {e}")
            raise typer.Exit(code=1)
        spaces.extend(extractor.extract(document, analysis_id=path.stem).spaces)
    return spaces


def _print_row_errors(result: BOQExtractionResult) -> None:
    if not result.errors:
        return
    console.print(f"\n[yellow]{len(result.errors)} rows rejected:[/yellow]")
    for error in result.errors[:10]:
        console.print(f"  {error.sheet} row {error.row_number}: {error.message}")
    if len(result.errors) > 10:
        console.print(f"  ... and {len(result.errors) - 10} more")


def _conflict_table(conflicts: list[Conflict]) -> Table:
    table = Table(title="Conflicts")
    table.add_column("Line", style="cyan")
    table.add_column("Drawing")
    table.add_column("Space")
    table.add_column("BOQ m²", justify="right")
    table.add_column("Drawing m²", justify="right")
    table.add_column("Diff %", justify="right")
    table.add_column("Severity")
    table.add_column("Status")

    for c in conflicts:
        style = "red" if c.severity == ConflictSeverity.HIGH else "yellow"
        table.add_row(
            c.line_id,
            c.drawing_reference,
            c.space_name,
            f"{c.boq_area:,.2f}",
            f"{c.drawing_area:,.2f}",
            f"{c.percent_difference}",
            f"[{style}]{c.severity.value}[/{style}]",
            c.status.value,
        )
    return table


def _gap_table(gaps: list[Gap]) -> Table:
    table = Table(title="Gaps")
    table.add_column("Line", style="cyan")
    table.add_column("Field")
    table.add_column("Severity")
    table.add_column("Message")
    table.add_column("Suggested action", style="dim")

    styles = {GapSeverity.HIGH: "red", GapSeverity.MEDIUM: "yellow", GapSeverity.LOW: "blue"}
    for g in gaps:
        style = styles[g.severity]
        table.add_row(
            g.line_id,
            g.field,
            f"[{style}]{g.severity.value}[/{style}]",
            g.message,
            g.suggested_action,
        )
    return table


@app.command(name="extract-boq")
def extract_boq_cmd(
    file: Path = typer.Argument(..., help="BOQ workbook (CSV/XLSX)"),
):
    """Extract and validate BOQ line items."""
    result = _load_boq(file)
    summary = boq_summary(result.items)

    table = Table(title=f"BOQ line items: {file.name}")
    table.add_column("Line", style="cyan")
    table.add_column("Description")
    table.add_column("Qty", justify="right")
    table.add_column("Unit")
    table.add_column("Rate", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Drawings")
    table.add_column("Status")

    for item in result.items:
        table.add_row(
            item.line_id,
            item.description[:60],
            f"{item.quantity}",
            item.unit,
            f"{item.unit_rate:,.2f}",
            f"{item.total_cost:,.2f}",
            ", ".join(item.drawing_references),
            item.validation_status.value,
        )
    console.print(table)

    console.print(f"\n[bold]Items:[/bold] {summary['total_items']}")
    console.print(f"[bold]Total cost:[/bold] {summary['total_cost']:,.2f}")
    console.print(f"[bold]With gaps:[/bold] {summary['items_with_gaps']}")
    console.print(f"[bold]With errors:[/bold] {summary['items_with_errors']}")
    _print_row_errors(result)
    for warning in result.warnings:
        console.print(f"[dim]warning: {warning}[/dim]")


@app.command(name="analyze-drawing")
def analyze_drawing_cmd(
    file: Path = typer.Argument(..., help="Drawing entity list (JSON)"),
):
    """Measure named spaces in a drawing."""
    try:
        document = load_drawing_document(file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    analysis = DrawingMeasurementExtractor().extract(document)
    summary = drawing_summary(analysis)

    table = Table(title=f"Spaces: {analysis.drawing_reference}")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Area m²", justify="right", style="green")
    table.add_column("Length m", justify="right")
    table.add_column("Width m", justify="right")
    table.add_column("Source")

    for space in analysis.spaces:
        table.add_row(
            str(space.index),
            space.name,
            f"{space.area:,.2f}",
            f"{space.length:,.2f}" if space.length is not None else "-",
            f"{space.width:,.2f}" if space.width is not None else "-",
            space.source,
        )
    console.print(table)

    console.print(f"\n[bold]Spaces:[/bold] {summary['total_spaces']}")
    console.print(f"[bold]Total area:[/bold] {summary['total_area']:,.2f} m²")
    console.print(f"[bold]Average area:[/bold] {summary['average_space_area']:,.2f} m²")
    for reason in analysis.skipped:
        console.print(f"[yellow]skipped:[/yellow] {reason}")


@app.command(name="detect-conflicts")
def detect_conflicts_cmd(
    boq: Path = typer.Argument(..., help="BOQ workbook (CSV/XLSX)"),
    drawings: list[Path] = typer.Argument(..., help="Drawing entity lists (JSON)"),
    tolerance: float | None = typer.Option(
        None, "--tolerance", help="Fractional tolerance band (default from config)"
    ),
):
    """Compare BOQ areas with measured drawing areas."""
    result = _load_boq(boq)
    spaces = _load_spaces(drawings)

    try:
        detector = ConflictDetector(
            tolerance=Decimal(str(tolerance)) if tolerance is not None else None
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--tolerance")

    conflicts = detector.detect(result.items, spaces)
    if not conflicts:
        console.print("[green]✓[/green] No area conflicts found")
        return

    console.print(_conflict_table(conflicts))
    high = sum(1 for c in conflicts if c.severity == ConflictSeverity.HIGH)
    console.print(f"\n[bold]Conflicts:[/bold] {len(conflicts)} ({high} HIGH)")


@app.command(name="analyze-gaps")
def analyze_gaps_cmd(
    file: Path = typer.Argument(..., help="BOQ workbook (CSV/XLSX)"),
):
    """List missing or invalid fields, highest severity first."""
    result = _load_boq(file)
    gaps = GapAnalyzer().analyze(result.items)
    summary = summarize(result.items, gaps)

    if not gaps:
        console.print("[green]✓[/green] No gaps found")
        return

    console.print(_gap_table(prioritize(gaps)))
    console.print(
        f"\n[bold]Items with gaps:[/bold] {summary.items_with_gaps}/{summary.total_items} "
        f"(HIGH {summary.high}, MEDIUM {summary.medium}, LOW {summary.low})"
    )


@app.command()
def reconcile(
    boq: Path = typer.Argument(..., help="BOQ workbook (CSV/XLSX)"),
    drawings: list[Path] = typer.Argument(..., help="Drawing entity lists (JSON)"),
    output: Path | None = typer.Option(None, "--out", "-o", help="Directory for CSV/XLSX reports"),
):
    """Run extraction, conflict detection and gap analysis in one pass."""
    orchestrator = ReconciliationOrchestrator(
        InMemoryBOQRepository(),
        InMemoryDrawingRepository(),
        InMemoryConflictRepository(),
    )
    template_id = boq.stem

    try:
        orchestrator.import_boq(template_id, read_boq_workbook(boq))
        for path in drawings:
            orchestrator.import_drawing(path.stem, load_drawing_document(path))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)

    report = orchestrator.reconcile(template_id)

    if report.conflicts:
        console.print(_conflict_table(report.conflicts))
    else:
        console.print("[green]✓[/green] No area conflicts found")
    if report.gaps:
        console.print(_gap_table(report.completion_prompts))

    table = Table(title="Reconciliation summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_row("Line items", str(report.boq_summary["total_items"]))
    table.add_row("Rejected rows", str(len(report.errors)))
    table.add_row("Conflicts", str(len(report.conflicts)))
    table.add_row("Items with gaps", str(report.gap_summary.items_with_gaps))
    table.add_row("Critical gaps", str(report.gap_summary.critical))
    console.print(table)

    if output:
        items = orchestrator.boq_repo.list_items(template_id)
        export_csv(output, items, report.conflicts, report.gaps)
        workbook = output / "reconciliation.xlsx"
        workbook.write_bytes(
            export_excel(items, report.conflicts, report.gaps, report.errors).getvalue()
        )
        console.print(f"\n[green]✓[/green] Reports saved to: {output}")


if __name__ == "__main__":
    app()
