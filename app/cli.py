from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.filesystem.idl_discovery import discover_idl_path
from adapters.filesystem.idl_repository import FileSystemProgramRepository
from adapters.filesystem.plan_repository import FileSystemPlanRepository
from adapters.layout.grid import GridLayoutEngine
from adapters.raster.png_renderer import PillowDiagramRenderer
from app.config import OUTPUT_SUFFIXES, AppSettings, OutputFormat, load_settings
from domain.errors import LayoutError
from domain.models import DiagramPlan, ProgramDescription
from domain.services.convert_diagram_to_excalidraw import DiagramToExcalidrawConverter
from domain.services.flatten_resources import flatten_all

app = typer.Typer(no_args_is_help=True)
console = Console()
logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log layout details."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("render")
def render(
    idl_path: Optional[Path] = typer.Argument(
        None,
        help="IDL JSON file or directory of IDL files. Looked up in target/idl when omitted.",
    ),
    program_name: Optional[str] = typer.Option(
        None, "--program-name", "-p", help="Program to visualize inside an Anchor workspace.",
    ),
    width: Optional[int] = typer.Option(
        None, "--width", "-w", help="Number of accounts and arguments per row in a column.",
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Directory for generated files (default: current dir).",
    ),
    formats: Optional[List[OutputFormat]] = typer.Option(
        None, "--format", "-f", help="Output format, repeatable.",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    try:
        settings = load_settings(config)
        grid = settings.layout.to_grid_spec(width)
    except (FileNotFoundError, ValidationError, LayoutError, yaml.YAMLError) as exc:
        console.print(f"[red]Invalid configuration:[/] {exc}")
        raise typer.Exit(code=1) from exc

    try:
        pairs = _load_programs(idl_path, program_name)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Could not load IDL:[/] {exc}")
        raise typer.Exit(code=1) from exc
    if not pairs:
        console.print(f"[yellow]No IDL files found in {idl_path}[/]")
        raise typer.Exit(code=0)

    target_dir = output_dir or settings.output.directory or Path.cwd()
    selected = formats or settings.output.formats
    engine = GridLayoutEngine(grid)
    for path, program in pairs:
        try:
            plan = engine.build_plan(program)
        except LayoutError as exc:
            console.print(f"[red]Layout failed for {path}:[/] {exc}")
            raise typer.Exit(code=1) from exc
        if not plan.canvas.columns:
            console.print(f"[yellow]{program.name} declares no instructions.[/]")
        for output_format in selected:
            if output_format == OutputFormat.PNG and not plan.canvas.columns:
                console.print(f"[yellow]Skipped PNG for {program.name}: empty canvas[/]")
                continue
            # named after the IDL file so programs sharing a name do not collide
            target_path = target_dir / f"{path.stem}{OUTPUT_SUFFIXES[output_format]}"
            _write(output_format, plan, target_path, settings)
            console.print(f"[green]Wrote[/] {target_path}")


@app.command("validate")
def validate(idl_path: Path = typer.Argument(..., help="IDL JSON file to validate.")) -> None:
    if not idl_path.is_file():
        console.print(f"[red]File not found:[/] {idl_path}")
        raise typer.Exit(code=1)

    try:
        program = FileSystemProgramRepository().load_by_path(idl_path)
        operations = program.operations()
        accounts = sum(len(flatten_all(operation.accounts)) for operation in operations)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(
        f"[green]Valid IDL:[/] {idl_path} "
        f"({program.name} {program.version}, {len(operations)} operations, {accounts} accounts)"
    )


def _load_programs(
    idl_path: Path | None, program_name: str | None
) -> list[tuple[Path, ProgramDescription]]:
    repository = FileSystemProgramRepository()
    if idl_path is None:
        idl_path = discover_idl_path(Path.cwd(), program_name)
        logger.info("Using IDL %s", idl_path)
    elif program_name:
        console.print(
            f"[yellow]--program-name is ignored when an IDL path is given ({idl_path})[/]"
        )
    if not idl_path.is_dir():
        return [(idl_path, repository.load_by_path(idl_path))]

    pairs: list[tuple[Path, ProgramDescription]] = []
    for path in repository.list_paths(idl_path):
        try:
            pairs.append((path, repository.load_by_path(path)))
        except ValueError as exc:
            console.print(f"[yellow]Skipped {path}: not a valid IDL[/]")
            logger.debug("Skipped %s: %s", path, exc)
    return pairs


def _write(
    output_format: OutputFormat, plan: DiagramPlan, target_path: Path, settings: AppSettings
) -> None:
    if output_format == OutputFormat.PNG:
        renderer = PillowDiagramRenderer(
            font_path=settings.output.font_path,
            bold_font_path=settings.output.bold_font_path,
        )
        renderer.render(plan, target_path)
    elif output_format == OutputFormat.EXCALIDRAW:
        document = DiagramToExcalidrawConverter().convert(plan)
        FileSystemExcalidrawRepository().save(document, target_path)
    else:
        FileSystemPlanRepository().save(plan, target_path)


if __name__ == "__main__":
    app()
