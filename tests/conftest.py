"""Shared fixtures for family tree tests."""

import matplotlib

matplotlib.use("Agg")

import pytest

from family_tree import FamilyGraph, Sex, initialize_minimal_network


@pytest.fixture
def graph():
    return FamilyGraph()


@pytest.fixture
def ego_graph(graph):
    """A graph holding only a female ego with id 'ego'."""
    graph.add_node("You", sex=Sex.FEMALE, is_ego=True, node_id="ego")
    return graph


@pytest.fixture
def family(ego_graph):
    """Ego with mother, father and both pairs of grandparents."""
    initialize_minimal_network(ego_graph)
    return ego_graph


@pytest.fixture
def default_tree():
    """Ego and partner, parents and grandparents as plain mappings."""
    nodes = {
        "self": {"label": "You", "sex": "male", "isEgo": True},
        "partner": {"label": "Partner", "sex": "female"},
        "mom": {"label": "Mom", "sex": "female"},
        "dad": {"label": "Dad", "sex": "male"},
        "maternal-grandma": {"label": "Maternal grandma", "sex": "female"},
        "maternal-grandpa": {"label": "Maternal grandpa", "sex": "male"},
        "paternal-grandma": {"label": "Paternal grandma", "sex": "female"},
        "paternal-grandpa": {"label": "Paternal grandpa", "sex": "male"},
    }
    relationships = [
        ("self", "partner", "partner"),
        ("dad", "mom", "partner"),
        ("mom", "self", "parent"),
        ("dad", "self", "parent"),
        ("maternal-grandpa", "maternal-grandma", "partner"),
        ("paternal-grandpa", "paternal-grandma", "partner"),
        ("maternal-grandma", "mom", "parent"),
        ("maternal-grandpa", "mom", "parent"),
        ("paternal-grandma", "dad", "parent"),
        ("paternal-grandpa", "dad", "parent"),
    ]
    edges = {
        f"e{i}": {"source": source, "target": target, "relationship": relationship}
        for i, (source, target, relationship) in enumerate(relationships)
    }
    return nodes, edges
