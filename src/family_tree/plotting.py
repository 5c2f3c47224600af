"""Static preview of a computed family tree layout."""

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import networkx as nx

from family_tree.graph import FamilyGraph
from family_tree.models import Position, RelationshipType, Sex

logger = logging.getLogger(__name__)

EDGE_STYLES = {
    RelationshipType.PARENT: "solid",
    RelationshipType.PARTNER: "dashed",
    RelationshipType.EX_PARTNER: "dotted",
}


def node_color(sex: Sex | None) -> str:
    if sex is Sex.MALE:
        return "lightblue"
    if sex is Sex.FEMALE:
        return "lightpink"
    return "lightgray"


def plot_layout(
    graph: FamilyGraph,
    positions: dict[str, Position],
    output_path: Path | None = None,
):
    """
    Draw the people at their computed positions.

    Oldest generation at the top, parent edges solid, partner edges dashed
    and ex-partner edges dotted. Ego gets a thick outline.

    Args:
        graph: The family graph
        positions: Node id -> Position, as returned by run_layout
        output_path: Where to save the image (PNG, SVG or PDF). If None, displays interactively.

    Returns:
        The matplotlib figure
    """
    placed = [node_id for node_id in graph.person_ids() if node_id in positions]
    # matplotlib's y axis grows upwards, layout y grows downwards
    pos = {node_id: (positions[node_id].x, -positions[node_id].y) for node_id in placed}

    H = nx.DiGraph()
    H.add_nodes_from(placed)
    H.add_edges_from(
        (edge.source, edge.target)
        for edge in graph.edges.values()
        if edge.source in pos and edge.target in pos
    )

    width = max((p.x for p in positions.values()), default=0)
    height = max((p.y for p in positions.values()), default=0)
    fig = plt.figure(figsize=(max(6, width / 60 + 2), max(4, height / 60 + 2)))
    ax = fig.gca()

    for relationship, style in EDGE_STYLES.items():
        edgelist = [
            (edge.source, edge.target)
            for edge in graph.edges.values()
            if edge.relationship is relationship and edge.source in pos and edge.target in pos
        ]
        if not edgelist:
            continue
        nx.draw_networkx_edges(
            H,
            pos,
            edgelist=edgelist,
            style=style,
            edge_color="gray",
            arrows=relationship is RelationshipType.PARENT,
            node_size=900,
            ax=ax,
        )

    ego_id = graph.ego_id
    nx.draw_networkx_nodes(
        H,
        pos,
        nodelist=placed,
        node_color=[node_color(graph.sex(node_id)) for node_id in placed],
        edgecolors=["black" if node_id == ego_id else "gray" for node_id in placed],
        linewidths=[2.5 if node_id == ego_id else 0.5 for node_id in placed],
        node_size=900,
        ax=ax,
    )
    nx.draw_networkx_labels(
        H,
        pos,
        labels={node_id: graph.get_node(node_id).label for node_id in placed},
        font_size=6,
        ax=ax,
    )

    ax.set_title(f"Family Tree ({len(placed)} people, {len(graph.edges)} relationships)")
    ax.axis("off")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info("Graph saved to %s", output_path)
    else:
        plt.show()
    return fig
