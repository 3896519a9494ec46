from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Optional

import pandas as pd
import typer
from tqdm import tqdm

from molgraph.config import load_settings
from molgraph.core.logging_utils import get_logger, set_log_level
from molgraph.exceptions import MolgraphError
from molgraph.graph.tgf import TGFCodec
from molgraph.layout.spring import center_coordinates, layout_graph
from molgraph.structure.model import MolecularModel
from molgraph.structure.parser import PDBParser

logger = get_logger(__name__)
app = typer.Typer(no_args_is_help=True)

graph_app = typer.Typer(no_args_is_help=True)
pdb_app = typer.Typer(no_args_is_help=True)

app.add_typer(graph_app, name="graph")
app.add_typer(pdb_app, name="pdb")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level for molgraph loggers (default: MOLGRAPH_LOG_LEVEL)."),
):
    set_log_level(log_level or load_settings().log_level)


def _fail(e: MolgraphError) -> NoReturn:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(code=1)


def _parse_pdb(path: Path, center: Optional[bool], bonds: Optional[bool]) -> MolecularModel:
    settings = load_settings()
    parser = PDBParser(
        center=settings.center_structures if center is None else center,
        backbone_bonds=settings.backbone_bonds if bonds is None else bonds,
    )
    try:
        return parser.parse(path)
    except MolgraphError as e:
        _fail(e)


@graph_app.command("info")
def graph_info(
    path: Path = typer.Argument(..., help="TGF file."),
):
    codec = TGFCodec()
    try:
        g = codec.read(path)
    except MolgraphError as e:
        _fail(e)
    typer.echo(f"nodes={g.node_count()} edges={g.edge_count()} skipped_lines={len(codec.diagnostics)}")
    for d in codec.diagnostics:
        typer.echo(f"  line {d.line_number}: {d.reason}")


@graph_app.command("layout")
def graph_layout(
    path: Path = typer.Argument(..., help="TGF file."),
    out: Path = typer.Option(..., help="Output CSV with one row per node."),
    iterations: Optional[int] = typer.Option(None, help="Spring embedder iterations (default: MOLGRAPH_LAYOUT_ITERATIONS)."),
    width: Optional[int] = typer.Option(None, help="Target width (default: MOLGRAPH_LAYOUT_WIDTH)."),
    height: Optional[int] = typer.Option(None, help="Target height (default: MOLGRAPH_LAYOUT_HEIGHT)."),
    quiet: bool = typer.Option(False, help="Hide the progress bar."),
):
    settings = load_settings()
    iterations = settings.layout_iterations if iterations is None else iterations
    width = settings.layout_width if width is None else width
    height = settings.layout_height if height is None else height

    try:
        g = TGFCodec().read(path)
    except MolgraphError as e:
        _fail(e)

    with tqdm(total=max(iterations - 1, 0), desc="layout", unit="it", disable=quiet) as pbar:
        coords = layout_graph(g, iterations, callback=lambda i, c: pbar.update(1))
    center_coordinates(coords, 0, width, 0, height)

    labels = [n.label for n in g.nodes]
    df = pd.DataFrame({"node": range(len(coords)), "label": labels, "x": coords[:, 0], "y": coords[:, 1]})
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, index=False)
    logger.info("Wrote layout for %d nodes to %s", len(df), out)


@pdb_app.command("info")
def pdb_info(
    path: Path = typer.Argument(..., help="PDB file (.pdb, .ent, .ent.gz)."),
    center: Optional[bool] = typer.Option(None, "--center/--no-center", help="Move the centroid to the origin."),
    bonds: Optional[bool] = typer.Option(None, "--bonds/--no-bonds", help="Build backbone bonds."),
):
    model = _parse_pdb(path, center, bonds)
    summary = model.to_dict()
    for key in ("code", "title", "residue_count", "atom_count", "bond_count", "helix_count", "sheet_count"):
        typer.echo(f"{key}: {summary[key]}")
    typer.echo(f"sequence:  {model.sequence}")
    typer.echo(f"structure: {model.secondary_structure_sequence}")


@pdb_app.command("residues")
def pdb_residues(
    path: Path = typer.Argument(..., help="PDB file."),
    out: Path = typer.Option(..., help="Output table (.csv or .parquet)."),
):
    model = _parse_pdb(path, center=None, bonds=False)
    df = model.residue_table()
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.suffix == ".parquet":
        df.to_parquet(out, index=False)
    else:
        df.to_csv(out, index=False)
    logger.info("Wrote %d residues to %s", len(df), out)


@pdb_app.command("to-tgf")
def pdb_to_tgf(
    path: Path = typer.Argument(..., help="PDB file."),
    out: Path = typer.Argument(..., help="Output TGF file."),
    bonds: Optional[bool] = typer.Option(None, "--bonds/--no-bonds", help="Build backbone bonds."),
):
    model = _parse_pdb(path, center=None, bonds=bonds)
    out.parent.mkdir(parents=True, exist_ok=True)
    TGFCodec().write(model, out)
    logger.info("Wrote %d atoms and %d bonds to %s", model.node_count(), model.edge_count(), out)
