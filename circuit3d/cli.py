"""Command-line interface for circuit3d.

Usage:
    circuit3d camera circuit.json [options]
    circuit3d assemble circuit.json [options]
    circuit3d transforms scene.glb [options]
    circuit3d bounds scene.glb [options]
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Sequence

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .camera import best_camera_position
from .core.circuit import load_circuit_json
from .core.config import Circuit3DConfig
from .scene.assembly import build_circuit_scene
from .scene.bounds import mesh_world_bounds, scene_world_bounds
from .scene.graph import Scene, SceneGraphError, build_mesh_transforms
from .scene.loader import load_gltf
from .scene.transform import NodeTransform, apply_transform_chain

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False)],
    )


def _load_config(path: str | None) -> Circuit3DConfig:
    if path:
        return Circuit3DConfig.from_file(path)
    return Circuit3DConfig.default()


def _read_circuit(path: str) -> list[dict]:
    try:
        return load_circuit_json(path)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error loading circuit: {e}[/red]")
        raise click.Abort()


def _read_gltf(path: str) -> dict:
    try:
        return load_gltf(path)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error loading scene: {e}[/red]")
        raise click.Abort()


def _fmt(values: Sequence[float]) -> str:
    return "(" + ", ".join(f"{v:.3f}" for v in values) + ")"


def _describe_chain(chain: Sequence[NodeTransform]) -> str:
    if not chain:
        return "[dim]identity[/dim]"
    steps = []
    for t in chain:
        parts = []
        if t.scale is not None:
            parts.append(f"S{_fmt(t.scale)}")
        if t.rotation is not None:
            parts.append(f"R{_fmt(t.rotation)}")
        if t.translation is not None:
            parts.append(f"T{_fmt(t.translation)}")
        steps.append(" ".join(parts))
    return "\n".join(steps)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to configuration file",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """circuit3d - Scene transforms and camera framing for circuit boards."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = _load_config(config)
    setup_logging(verbose)


@main.command()
@click.argument("circuit_path", type=click.Path(exists=True))
@click.option("--no-round", is_flag=True, help="Report unrounded coordinates")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def camera(ctx: click.Context, circuit_path: str, no_round: bool, as_json: bool) -> None:
    """Compute the default camera framing for a circuit.

    CIRCUIT_PATH: Circuit JSON file (list of entities)
    """
    cfg: Circuit3DConfig = ctx.obj["config"]
    params = cfg.camera
    if no_round:
        params = params.model_copy(update={"round_digits": None})

    entities = _read_circuit(circuit_path)
    framing = best_camera_position(entities, params)

    if as_json:
        click.echo(json.dumps(framing.to_dict()))
        return

    table = Table(title="Camera Framing")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Camera position", _fmt(framing.cam_pos))
    table.add_row("Look at", _fmt(framing.look_at))
    console.print(table)


@main.command()
@click.argument("circuit_path", type=click.Path(exists=True))
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Save the assembled scene graph to a JSON file",
)
@click.pass_context
def assemble(ctx: click.Context, circuit_path: str, output: str | None) -> None:
    """Build a scene graph for a circuit and list world positions.

    CIRCUIT_PATH: Circuit JSON file (list of entities)
    """
    cfg: Circuit3DConfig = ctx.obj["config"]

    entities = _read_circuit(circuit_path)
    scene = build_circuit_scene(entities, cfg.assembly)
    chains = build_mesh_transforms(
        scene,
        strict=cfg.traversal.strict,
        max_depth=cfg.traversal.max_depth,
    )

    table = Table(title=f"Scene: {scene.name}")
    table.add_column("Mesh", style="cyan")
    table.add_column("Levels", style="magenta")
    table.add_column("World origin", style="green")
    for mesh_id, chain in chains.items():
        origin = apply_transform_chain((0.0, 0.0, 0.0), chain)
        table.add_row(str(mesh_id), str(len(chain)), _fmt(origin))
    console.print(table)

    if output:
        scene.save(output)
        console.print(f"[green]Scene saved to {output}[/green]")


@main.command()
@click.argument("gltf_path", type=click.Path(exists=True))
@click.option("--strict", is_flag=True, help="Fail on unresolved node references")
@click.option("--scene", "scene_index", type=int, default=None, help="glTF scene index")
@click.pass_context
def transforms(
    ctx: click.Context,
    gltf_path: str,
    strict: bool,
    scene_index: int | None,
) -> None:
    """List the transform chain of every mesh in a glTF file.

    GLTF_PATH: .gltf or .glb file
    """
    cfg: Circuit3DConfig = ctx.obj["config"]
    strict = strict or cfg.traversal.strict
    if scene_index is None:
        scene_index = cfg.traversal.scene_index

    gltf = _read_gltf(gltf_path)
    scene = Scene.from_gltf(gltf, scene_index=scene_index)

    if strict:
        ok, issues = scene.validate_structure(max_depth=cfg.traversal.max_depth)
        if not ok:
            for issue in issues:
                console.print(f"[red]{issue}[/red]")
            sys.exit(1)

    try:
        chains = build_mesh_transforms(
            scene, strict=strict, max_depth=cfg.traversal.max_depth
        )
    except SceneGraphError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Mesh Transforms: {scene.name}")
    table.add_column("Mesh", style="cyan")
    table.add_column("Chain (root first)", style="green")
    for mesh_id, chain in chains.items():
        table.add_row(str(mesh_id), _describe_chain(chain))
    console.print(table)
    console.print(f"[dim]{len(chains)} mesh(es), {len(scene.nodes)} node(s)[/dim]")


@main.command()
@click.argument("gltf_path", type=click.Path(exists=True))
@click.option("--per-mesh", is_flag=True, help="Also list bounds of each mesh")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def bounds(ctx: click.Context, gltf_path: str, per_mesh: bool, as_json: bool) -> None:
    """Compute world-space bounds of a glTF scene.

    GLTF_PATH: .gltf or .glb file
    """
    cfg: Circuit3DConfig = ctx.obj["config"]
    kwargs = dict(
        strict=cfg.traversal.strict,
        max_depth=cfg.traversal.max_depth,
        scene_index=cfg.traversal.scene_index,
    )

    gltf = _read_gltf(gltf_path)
    try:
        total = scene_world_bounds(gltf, **kwargs)
        meshes = mesh_world_bounds(gltf, **kwargs) if per_mesh else {}
    except SceneGraphError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if total is None:
        console.print("[yellow]No placed meshes with POSITION bounds[/yellow]")
        sys.exit(1)

    if as_json:
        data = {"min": list(total.min), "max": list(total.max)}
        if per_mesh:
            data["meshes"] = {
                str(k): {"min": list(v.min), "max": list(v.max)} for k, v in meshes.items()
            }
        click.echo(json.dumps(data))
        return

    table = Table(title="World Bounds")
    table.add_column("Mesh", style="cyan")
    table.add_column("Min", style="green")
    table.add_column("Max", style="green")
    table.add_column("Size", style="magenta")
    for mesh_id, box in meshes.items():
        table.add_row(str(mesh_id), _fmt(box.min), _fmt(box.max), _fmt(box.size))
    table.add_row("[bold]scene[/bold]", _fmt(total.min), _fmt(total.max), _fmt(total.size))
    console.print(table)


if __name__ == "__main__":
    main()
