# main_cli.py

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from pydantic import ValidationError

from .config import settings, setup_logging
from .core import geometry
from .core.common_types import LayerPreset, PricingSettings, ProcessSettings, QuoteResult, RoundingMode
from .core.exceptions import PrintQuoteError
from .core.utils import format_pounds_from_pence
from .inventory import MaterialInventory
from .processes.print_3d.processor import Print3DProcessor

logger = logging.getLogger(__name__)

# --- Typer App Initialization ---
app = typer.Typer(help="Instant quoting for 3D printed parts")
console = Console()


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL (DEBUG, INFO, ...).")):
    setup_logging(log_level.upper() if log_level else None)


def _fail(message: str):
    console.print(f"[bold red]{message}[/]")
    raise typer.Exit(code=1)


@app.command()
def analyze(
    file_path: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True, help="Path to an STL file (ASCII or binary)"),
):
    """Parses a model and prints its geometry."""
    try:
        geom = geometry.analyze_file(str(file_path))
    except PrintQuoteError as e:
        _fail(f"Could not analyze {file_path.name}: {e}")

    bbox = geom.bounding_box
    table = Table(title=f"Geometry: {file_path.name}", show_header=False)
    table.add_column()
    table.add_column(justify="right")
    table.add_row("Encoding", geom.source_format.value)
    table.add_row("Triangles", str(geom.triangle_count))
    table.add_row("Volume", f"{geom.volume_mm3 / 1000.0:.3f} cm³")
    table.add_row("Surface Area", f"{geom.area_mm2 / 100.0:.2f} cm²")
    table.add_row("Size (X×Y×Z)", f"{bbox.size.x:.2f} × {bbox.size.y:.2f} × {bbox.size.z:.2f} mm")
    console.print(table)


@app.command()
def list_materials(
    materials: Optional[Path] = typer.Option(None, "--materials", help="Inventory JSON file (defaults to the configured catalog)."),
    show_inactive: bool = typer.Option(False, "--all", help="Include inactive items."),
):
    """Lists the material inventory."""
    try:
        inventory = MaterialInventory.from_json(str(materials) if materials else settings.materials_path)
    except PrintQuoteError as e:
        _fail(f"Error loading materials: {e}")

    items = inventory.list_items(active_only=not show_inactive)
    if not items:
        console.print("[yellow]No materials found.[/]")
        return

    table = Table(title="Available Materials", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=16)
    table.add_column("Material")
    table.add_column("Colour")
    table.add_column("Density (g/cm³)", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("Available (g)", justify="right")
    table.add_column("Reserved (g)", justify="right")
    for item in items:
        table.add_row(
            item.id,
            item.material,
            item.colour,
            f"{item.density_g_per_cm3:.3f}",
            f"{format_pounds_from_pence(item.cost_per_kg_pence)}/kg",
            f"{item.grams_available:.0f}",
            f"{item.grams_reserved:.0f}",
        )
    console.print(table)


@app.command()
def quote(
    file_path: Path = typer.Argument(..., exists=True, file_okay=True, dir_okay=False, readable=True, help="Path to an STL file"),
    material_id: str = typer.Argument(..., help="Inventory item ID (see 'list-materials')"),
    preset: Optional[LayerPreset] = typer.Option(None, "--preset", "-p", help="Quality preset."),
    layer_height: Optional[float] = typer.Option(None, "--layer-height", help="Explicit layer height in mm."),
    infill: float = typer.Option(20.0, "--infill", "-i", min=0, max=100, help="Infill percentage."),
    supports: bool = typer.Option(False, "--supports/--no-supports", help="Print with supports."),
    perimeters: int = typer.Option(3, "--perimeters", min=1),
    rounding: Optional[RoundingMode] = typer.Option(None, "--rounding", help="Override the configured rounding mode."),
    materials: Optional[Path] = typer.Option(None, "--materials", help="Inventory JSON file."),
    output_json: Optional[Path] = typer.Option(None, "--output", "-o", help="Save the full quote result as a JSON file."),
):
    """Estimates mass, print time and price for a model."""
    try:
        inventory = MaterialInventory.from_json(str(materials) if materials else settings.materials_path)
        pricing: PricingSettings = settings.pricing()
        if rounding is not None:
            pricing = pricing.model_copy(update={"rounding_mode": rounding})
        processor = Print3DProcessor(inventory=inventory, pricing_settings=pricing)
        process_settings = ProcessSettings(
            layer_preset=preset,
            layer_height_mm=layer_height,
            infill_percent=infill,
            supports_enabled=supports,
            perimeters=perimeters,
        )
        result: QuoteResult = processor.generate_quote(str(file_path), material_id, process_settings)
    except ValidationError as e:
        _fail(f"Invalid print settings: {e}")
    except PrintQuoteError as e:
        _fail(f"Quote Generation Failed ({e.stage}): {e}")

    est = result.estimate
    bd = est.breakdown
    console.print(f"\n--- Quote Result (ID: {result.quote_id}) ---")

    cost_table = Table(show_header=False, box=None, padding=(0, 1))
    cost_table.add_column()
    cost_table.add_column(justify="right")
    cost_table.add_row("Material:", material_id)
    cost_table.add_row("Part Volume:", f"{est.geometry.volume_mm3 / 1000.0:.3f} cm³")
    cost_table.add_row("Printed Volume:", f"{est.printed_volume_mm3 / 1000.0:.3f} cm³")
    cost_table.add_row("Weight:", f"{est.grams:.2f} g")
    cost_table.add_row("Print Time:", result.estimated_process_time_str)
    cost_table.add_row("Material Charge:", f"{bd.material_charge:.2f}")
    cost_table.add_row(f"Machine ({bd.machine_hours:.2f} h):", f"{bd.machine_charge:.2f}")
    cost_table.add_row(f"Electricity ({bd.electricity_kwh:.2f} kWh):", f"{bd.electricity_charge:.2f}")
    cost_table.add_row("Labour:", f"{bd.labour_charge:.2f}")
    cost_table.add_row("Min Order Fee:", f"{bd.extras.min_order_fee:.2f}")
    cost_table.add_row("Supports Fee:", f"{bd.extras.supports_fee:.2f}")
    cost_table.add_row("Small Part Fee:", f"{bd.extras.small_part_fee:.2f}")
    cost_table.add_row("[bold]Subtotal:[/]", f"[bold]{bd.subtotal:.2f}[/]")
    console.print(cost_table)
    console.print(Panel(f"[bold green]{bd.final:.2f}[/]", title="Final Price", expand=False))

    if output_json:
        output_json.parent.mkdir(parents=True, exist_ok=True)
        output_json.write_text(result.model_dump_json(indent=2))
        console.print(f"\n[green]Full quote result saved to: {output_json}[/]")


# --- Main Execution ---
if __name__ == "__main__":
    app()
