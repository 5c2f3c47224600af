"""Genealogy graph engine: build a family around ego and lay it out in generations."""

from family_tree.graph import FamilyGraph
from family_tree.layout import compute_layout, layout_graph
from family_tree.models import (
    DEFAULT_SPACING,
    Person,
    Position,
    Relation,
    Relationship,
    RelationshipType,
    Sex,
    Spacing,
)
from family_tree.relations import add_placeholder_node
from family_tree.scaffold import generate_placeholder_network, initialize_minimal_network

__all__ = [
    "DEFAULT_SPACING",
    "FamilyGraph",
    "Person",
    "Position",
    "Relation",
    "Relationship",
    "RelationshipType",
    "Sex",
    "Spacing",
    "add_placeholder_node",
    "compute_layout",
    "generate_placeholder_network",
    "initialize_minimal_network",
    "layout_graph",
]
