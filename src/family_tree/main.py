"""
Command line for the family tree engine.

1) Build a placeholder family around ego from relative counts.
2) Lay the family out in generations.
3) Print the positions and, optionally, plot them.

`layout` does steps 2-3 for a family stored as JSON:
    {"nodes": {"id": {"label": ..., "sex": ..., "isEgo": ...}},
     "edges": {"id": {"source": ..., "target": ..., "relationship": ...}}}
"""

import json
import logging
from pathlib import Path

import typer

from family_tree.graph import FamilyGraph
from family_tree.layout import compute_layout
from family_tree.models import Position, Spacing
from family_tree.scaffold import generate_placeholder_network

app = typer.Typer(
    name="family-tree",
    help="Build and lay out genealogical family trees",
    add_completion=False,
)


def print_positions(labels: dict[str, str], positions: dict[str, Position]):
    for node_id, position in sorted(positions.items(), key=lambda item: (item[1].y, item[1].x)):
        print(f"  {labels.get(node_id, node_id):<30} x={position.x:>7.1f}  y={position.y:>7.1f}")


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def scaffold(
    brothers: int = typer.Option(0, min=0),
    sisters: int = typer.Option(0, min=0),
    sons: int = typer.Option(0, min=0),
    daughters: int = typer.Option(0, min=0),
    maternal_uncles: int = typer.Option(0, min=0),
    maternal_aunts: int = typer.Option(0, min=0),
    paternal_uncles: int = typer.Option(0, min=0),
    paternal_aunts: int = typer.Option(0, min=0),
    fathers_additional_partners: int = typer.Option(0, min=0),
    mothers_additional_partners: int = typer.Option(0, min=0),
    ego_sex: str = typer.Option("female", help="Sex of ego: male or female"),
    siblings: float = typer.Option(100, help="Horizontal gap between siblings"),
    partners: float = typer.Option(80, help="Horizontal gap between partners"),
    generations: float = typer.Option(100, help="Vertical gap between generations"),
    output: Path = typer.Option(None, "--output", "-o", help="Save a plot (PNG, SVG or PDF)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Build a placeholder family around ego and lay it out."""
    _configure_logging(verbose)
    try:
        spacing = Spacing(siblings=siblings, partners=partners, generations=generations)
    except ValueError as e:
        print(f"Error: {e}")
        raise typer.Exit(1)

    counts = {
        "brothers": brothers,
        "sisters": sisters,
        "sons": sons,
        "daughters": daughters,
        "maternal-uncles": maternal_uncles,
        "maternal-aunts": maternal_aunts,
        "paternal-uncles": paternal_uncles,
        "paternal-aunts": paternal_aunts,
        "fathers-additional-partners": fathers_additional_partners,
        "mothers-additional-partners": mothers_additional_partners,
    }

    print("Building placeholder family...")
    graph = FamilyGraph(spacing)
    generate_placeholder_network(graph, counts, ego_sex)
    print(f"  Graph has {len(graph.nodes)} people and {len(graph.edges)} relationships")

    print("Laying out family tree...")
    positions = graph.run_layout()
    print_positions({n: p.label for n, p in graph.nodes.items()}, positions)

    if output:
        from family_tree.plotting import plot_layout

        print(f"Plotting family tree to: {output}")
        plot_layout(graph, positions, output)
    print("Done!")


@app.command()
def layout(
    family_file: Path = typer.Argument(..., help="JSON file with nodes and edges"),
    siblings: float = typer.Option(100, help="Horizontal gap between siblings"),
    partners: float = typer.Option(80, help="Horizontal gap between partners"),
    generations: float = typer.Option(100, help="Vertical gap between generations"),
    output: Path = typer.Option(None, "--output", "-o", help="Write positions as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Lay out a family stored as JSON."""
    _configure_logging(verbose)
    if not family_file.exists():
        print(f"Error: File not found: {family_file}")
        raise typer.Exit(1)

    try:
        data = json.loads(family_file.read_text())
        spacing = Spacing(siblings=siblings, partners=partners, generations=generations)
        positions = compute_layout(data.get("nodes", {}), data.get("edges", {}), spacing)
    except (ValueError, KeyError) as e:
        print(f"Error: {e}")
        raise typer.Exit(1)

    if not positions:
        print("No ego node found, nothing to lay out")
        raise typer.Exit(1)

    labels = {node_id: attrs.get("label", node_id) for node_id, attrs in data.get("nodes", {}).items()}
    print_positions(labels, positions)

    if output:
        payload = {node_id: {"x": p.x, "y": p.y} for node_id, p in positions.items()}
        output.write_text(json.dumps(payload, indent=2))
        print(f"Positions saved to {output}")


if __name__ == "__main__":
    app()
