"""
Command-line interface for hemesh.

Provides commands for mesh inspection, hole repair, overlap detection and
offsetting.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from hemesh import __version__
from hemesh.core.config import ConfigManager, EngineConfig
from hemesh.core.exceptions import ConfigurationError
from hemesh.core.geometry import GeometryLoader
from hemesh.core.logging import configure_logging, mesh_context
from hemesh.geometry.mesh_operations import analyze_mesh, offset_mesh
from hemesh.geometry.octree import build_octree_for_mesh, find_intersecting_faces
from hemesh.geometry.repair import fill_holes

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Engine configuration YAML file",
)
@click.option(
    "--config-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Configuration profile directory (default: ./config)",
)
@click.option("--profile", default=None, help="Named profile from the configuration directory")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.option("--json-logs", is_flag=True, default=False, help="Emit JSON log lines")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[Path],
    config_dir: Optional[Path],
    profile: Optional[str],
    log_level: Optional[str],
    json_logs: bool,
) -> None:
    """hemesh - Half-edge triangle mesh engine."""
    ctx.ensure_object(dict)
    try:
        config = _load_config(config_path, config_dir, profile)
    except Exception as e:
        console.print(f"[red]✗[/red] Failed to load configuration: {e}")
        raise SystemExit(1)

    configure_logging(
        level=log_level or config.logging.level,
        json_output=json_logs or config.logging.json_output,
        log_file=config.logging.log_file,
    )
    ctx.obj["config"] = config


def _load_config(
    config_path: Optional[Path], config_dir: Optional[Path], profile: Optional[str]
) -> EngineConfig:
    if profile:
        if config_path:
            raise ConfigurationError("Use either --config or --profile, not both")
        return ConfigManager(config_dir or Path("config")).get_profile(profile)
    if config_path:
        return EngineConfig.from_yaml(config_path)
    return EngineConfig()


# =============================================================================
# Inspection
# =============================================================================


@main.command("info")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(path: Path) -> None:
    """Show topology and bounds of a mesh file."""
    try:
        with mesh_context(path=path.name):
            report = analyze_mesh(GeometryLoader.load(path))

        table = Table(title=f"Mesh: {path.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value")

        table.add_row("Vertices", str(report["vertex_count"]))
        table.add_row("Faces", str(report["face_count"]))
        table.add_row("Half-edges", str(report["half_edge_count"]))
        table.add_row("Boundary edges", str(report["boundary_edge_count"]))
        table.add_row("Boundary loops", str(report["boundary_loop_count"]))
        table.add_row("Watertight", "✓" if report["is_watertight"] else "✗")
        table.add_row("Bounds min", _format_point(report["bounds_min"]))
        table.add_row("Bounds max", _format_point(report["bounds_max"]))

        console.print(table)

    except Exception as e:
        console.print(f"[red]✗[/red] Failed to analyze mesh: {e}")
        raise SystemExit(1)


# =============================================================================
# Repair
# =============================================================================


@main.command("repair")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--ascii", "ascii_stl", is_flag=True, default=False, help="Write ASCII STL")
@click.pass_context
def repair(ctx: click.Context, input_path: Path, output_path: Path, ascii_stl: bool) -> None:
    """Fill boundary holes and write the repaired mesh."""
    config: EngineConfig = ctx.obj["config"]
    try:
        with mesh_context(path=input_path.name):
            mesh = GeometryLoader.load(input_path)
            report = fill_holes(mesh, config.repair)
        mesh.recalculate_normals()
        GeometryLoader.save(mesh, output_path, ascii=ascii_stl)

        console.print(
            f"[green]✓[/green] Filled {report.loops_filled}/{report.loops_found} holes "
            f"({report.faces_added} faces added) -> {output_path}"
        )
        if report.loops_skipped:
            console.print(
                f"[yellow]⚠[/yellow] Skipped {report.loops_skipped} degenerate loops"
            )
        for item in report.missing_twins:
            console.print(
                f"[yellow]⚠[/yellow] Missing twin in loop {item.loop_index}: "
                f"{item.start} -> {item.end}"
            )
        if not report.is_watertight:
            console.print("[yellow]⚠[/yellow] Mesh is still not watertight")

    except Exception as e:
        console.print(f"[red]✗[/red] Repair failed: {e}")
        raise SystemExit(1)


# =============================================================================
# Overlap detection
# =============================================================================


@main.command("intersect")
@click.argument("path_a", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument(
    "path_b",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--max-depth", type=int, default=None, help="Override octree depth")
@click.option("--limit", type=int, default=20, show_default=True, help="Pairs to list")
@click.option(
    "--skip-coplanar",
    is_flag=True,
    default=False,
    help="Skip coplanar face pairs instead of failing",
)
@click.pass_context
def intersect(
    ctx: click.Context,
    path_a: Path,
    path_b: Optional[Path],
    max_depth: Optional[int],
    limit: int,
    skip_coplanar: bool,
) -> None:
    """Report intersecting face pairs between two meshes, or within one."""
    config: EngineConfig = ctx.obj["config"]
    depth = max_depth if max_depth is not None else config.octree.max_depth
    settings = config.intersection
    if skip_coplanar:
        settings = settings.model_copy(update={"on_degenerate": "skip"})
    try:
        mesh_a = GeometryLoader.load(path_a)
        octree_a = build_octree_for_mesh(mesh_a, depth)
        if path_b is None:
            octree_b = octree_a
        else:
            octree_b = build_octree_for_mesh(GeometryLoader.load(path_b), depth)

        pairs = find_intersecting_faces(octree_a, octree_b, settings)

        if not pairs:
            console.print("[green]✓[/green] No intersecting faces")
            return

        console.print(f"[yellow]⚠[/yellow] Found {len(pairs)} intersecting face pairs")
        table = Table(title="Face pairs")
        table.add_column("Face A", style="cyan")
        table.add_column("Face B", style="cyan")
        for face_a, face_b in pairs[:limit]:
            table.add_row(str(face_a.index), str(face_b.index))
        console.print(table)

    except Exception as e:
        console.print(f"[red]✗[/red] Intersection test failed: {e}")
        raise SystemExit(1)


# =============================================================================
# Offset
# =============================================================================


@main.command("offset")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--distance", "-d", type=float, required=True, help="Offset distance")
@click.option("--ascii", "ascii_stl", is_flag=True, default=False, help="Write ASCII STL")
def offset(input_path: Path, output_path: Path, distance: float, ascii_stl: bool) -> None:
    """Offset every vertex along its averaged normal."""
    try:
        with mesh_context(path=input_path.name):
            mesh = offset_mesh(GeometryLoader.load(input_path), distance)
        GeometryLoader.save(mesh, output_path, ascii=ascii_stl)
        console.print(f"[green]✓[/green] Offset by {distance} -> {output_path}")
    except Exception as e:
        console.print(f"[red]✗[/red] Offset failed: {e}")
        raise SystemExit(1)


def _format_point(values: Optional[list[float]]) -> str:
    if values is None:
        return "(empty)"
    return ", ".join(f"{v:.4g}" for v in values)


if __name__ == "__main__":
    main()
