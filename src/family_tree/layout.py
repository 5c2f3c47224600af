"""Layout entry points: layers -> ordering -> coordinates -> normalisation."""

from collections.abc import Mapping
import logging

from family_tree.coordinates import assign_coordinates, normalize_positions
from family_tree.graph import FamilyGraph
from family_tree.layering import assign_layers, ego_kin
from family_tree.models import Person, Position, Relationship, Spacing
from family_tree.ordering import order_layers

logger = logging.getLogger(__name__)


def layout_graph(graph: FamilyGraph, spacing: Spacing | Mapping | None = None) -> dict[str, Position]:
    """Positions for everyone in ego's connected component."""
    spacing = Spacing.from_mapping(spacing if spacing is not None else graph.spacing)
    ego_id = graph.ego_id
    if ego_id is None:
        logger.warning("No ego node found, nothing to lay out")
        return {}

    component = graph.connected_component(ego_id)
    unreachable = len(graph.person_ids()) - len(component)
    if unreachable:
        logger.debug("%d people are not connected to ego and get no position", unreachable)

    kin = ego_kin(graph, component)
    layers = assign_layers(graph, component)
    ordered = order_layers(graph, layers, kin)
    positions = assign_coordinates(graph, ordered, spacing)
    return normalize_positions(positions)


def compute_layout(
    nodes: Mapping[str, Person | Mapping],
    edges: Mapping[str, Relationship | Mapping],
    spacing: Spacing | Mapping | None = None,
) -> dict[str, Position]:
    """
    Lay out a family given as plain node and edge mappings.

    Args:
        nodes: Node id -> Person, or dict with label/sex/isEgo fields
        edges: Edge id -> Relationship, or dict with source/target/relationship
        spacing: Spacing, or a dict with any of siblings/partners/generations

    Returns:
        Node id -> Position; empty when no node is marked as ego
    """
    graph = FamilyGraph.from_mappings(nodes, edges, spacing)
    return layout_graph(graph)
