"""
Relation constructor: add a relative to the graph from a symbolic keyword.

Every relation kind in `Relation` has exactly one handler in `_HANDLERS`.
A handler checks its preconditions before touching the graph, so a call
that cannot be satisfied logs a warning and leaves the graph unchanged.
"""

import logging

from family_tree.graph import FamilyGraph
from family_tree.models import Relation, RelationshipType, Sex

logger = logging.getLogger(__name__)

# Relations that are meaningless without an anchor node
ANCHORED = frozenset(
    {
        Relation.NIECE,
        Relation.NEPHEW,
        Relation.FIRST_COUSIN_MALE,
        Relation.FIRST_COUSIN_FEMALE,
        Relation.GRANDSON,
        Relation.GRANDDAUGHTER,
        Relation.ADDITIONAL_PARTNER,
        Relation.EX_PARTNER,
        Relation.HALF_SISTER,
        Relation.HALF_BROTHER,
        Relation.AUNT,
        Relation.UNCLE,
        Relation.HALF_AUNT,
        Relation.HALF_UNCLE,
    }
)

# Relations whose label says which side of the family they are on
SIDED = frozenset(
    {
        Relation.AUNT,
        Relation.UNCLE,
        Relation.HALF_AUNT,
        Relation.HALF_UNCLE,
        Relation.FIRST_COUSIN_MALE,
        Relation.FIRST_COUSIN_FEMALE,
    }
)

# Label words that place an anchor on one side of the family, checked in order
SIDE_WORDS = (
    ("maternal", "maternal"),
    ("paternal", "paternal"),
    ("mother", "maternal"),
    ("father", "paternal"),
)

EGO_PARTNER_LABEL = "Your partner"


def add_placeholder_node(
    graph: FamilyGraph,
    relation: Relation | str,
    anchor_id: str | None = None,
    second_parent_id: str | None = None,
    relayout: bool = True,
) -> str | None:
    """
    Add a relative of the given kind and return the new node's id.

    Args:
        graph: The family graph to extend
        relation: A Relation or its keyword ("brother", "halfSister", ...)
        anchor_id: The existing node the relative hangs off (a sibling for a
            niece, a parent for a half-sibling, ...)
        second_parent_id: Explicit other parent; always wins over any partner
            found automatically
        relayout: Recompute positions after the change

    Returns:
        The new node id, or None when the relation could not be added.
    """
    kind = Relation.parse(relation)
    if kind is None:
        logger.warning("Unknown relation: %r", relation)
        return None

    if kind in ANCHORED:
        if anchor_id is None:
            logger.warning("%s relation requires anchor_id", kind.value)
            return None
        if not graph.has_node(anchor_id):
            logger.warning("%s anchor node not found: %s", kind.value, anchor_id)
            return None
    if second_parent_id is not None and not graph.has_node(second_parent_id):
        logger.warning("%s second parent not found: %s", kind.value, second_parent_id)
        return None

    node_id = _HANDLERS[kind](graph, kind, anchor_id, second_parent_id)
    if node_id is not None and relayout:
        graph.run_layout()
    return node_id


def add_partnership(
    graph: FamilyGraph,
    a: str,
    b: str,
    relationship: RelationshipType = RelationshipType.PARTNER,
) -> str | None:
    """Add a partner (or ex-partner) edge between a and b, with the male partner as source."""
    if graph.sex(b) is Sex.MALE and graph.sex(a) is not Sex.MALE:
        a, b = b, a
    return graph.add_edge(a, b, relationship)


def ensure_partner(graph: FamilyGraph, node_id: str) -> str:
    """Return the node's partner, creating an opposite-sex one if it has none."""
    partner_id = graph.partner(node_id)
    if partner_id is not None:
        return partner_id

    node = graph.get_node(node_id)
    partner_id = graph.add_node(
        EGO_PARTNER_LABEL if node.is_ego else f"{node.label}'s partner",
        sex=_opposite_sex(node.sex),
        read_only=True,
    )
    add_partnership(graph, node_id, partner_id)
    return partner_id


def relation_label(graph: FamilyGraph, relation: Relation, anchor_id: str | None = None) -> str:
    """Label for a new relative, prefixed "maternal"/"paternal" for aunts, uncles and cousins."""
    label = relation.label
    if relation not in SIDED or anchor_id is None:
        return label
    side = _side_of(graph, anchor_id)
    return f"{side} {label}" if side else label


# ----------------------------------------------------------------------
# Handlers
# ----------------------------------------------------------------------


def _add_sibling(graph, relation, anchor_id, second_parent_id):
    ego_id = graph.ego_id
    parent_ids = graph.parents(ego_id) if ego_id is not None else []
    if not parent_ids:
        logger.warning("%s relation requires ego's parents", relation.value)
        return None
    node_id = _new_relative(graph, relation)
    for parent_id in parent_ids:
        _connect_child(graph, parent_id, node_id)
    return node_id


def _add_child_of_ego(graph, relation, anchor_id, second_parent_id):
    ego_id = graph.ego_id
    if ego_id is None:
        logger.warning("%s relation requires an ego node", relation.value)
        return None
    return _add_child_of_couple(graph, relation, ego_id, second_parent_id)


def _add_child_of_anchor(graph, relation, anchor_id, second_parent_id):
    # niece/nephew (anchor: sibling), cousin (aunt/uncle), grandchild (child)
    return _add_child_of_couple(graph, relation, anchor_id, second_parent_id)


def _add_additional_partner(graph, relation, anchor_id, second_parent_id):
    anchor = graph.get_node(anchor_id)
    node_id = graph.add_node(f"{anchor.label}'s partner", sex=_opposite_sex(anchor.sex))
    add_partnership(graph, anchor_id, node_id)
    return node_id


def _add_ex_partner(graph, relation, anchor_id, second_parent_id):
    anchor = graph.get_node(anchor_id)
    node_id = graph.add_node(f"{anchor.label}'s ex partner", sex=_opposite_sex(anchor.sex))
    add_partnership(graph, anchor_id, node_id, RelationshipType.EX_PARTNER)
    return node_id


def _add_half_sibling(graph, relation, anchor_id, second_parent_id):
    if second_parent_id is not None:
        co_parent = second_parent_id
        _link_co_parent(graph, anchor_id, co_parent)
    else:
        co_parent = _other_partner(graph, anchor_id)

    node_id = _new_relative(graph, relation)
    _connect_child(graph, anchor_id, node_id)
    if co_parent is not None:
        _connect_child(graph, co_parent, node_id)
    else:
        logger.debug("Half sibling %s has a single known parent %s", node_id, anchor_id)
    return node_id


def _add_aunt_uncle(graph, relation, anchor_id, second_parent_id):
    grandparent_ids = graph.parents(anchor_id)
    if not grandparent_ids:
        logger.warning("%s relation requires the anchor's parents: %s", relation.value, anchor_id)
        return None
    node_id = _new_relative(graph, relation, anchor_id)
    for grandparent_id in grandparent_ids:
        _connect_child(graph, grandparent_id, node_id)
    return node_id


def _add_half_aunt_uncle(graph, relation, anchor_id, second_parent_id):
    # anchor is the shared grandparent, second parent their other partner
    if second_parent_id is not None:
        _link_co_parent(graph, anchor_id, second_parent_id)
    node_id = _new_relative(graph, relation, anchor_id)
    _connect_child(graph, anchor_id, node_id)
    if second_parent_id is not None:
        _connect_child(graph, second_parent_id, node_id)
    return node_id


_HANDLERS = {
    Relation.BROTHER: _add_sibling,
    Relation.SISTER: _add_sibling,
    Relation.SON: _add_child_of_ego,
    Relation.DAUGHTER: _add_child_of_ego,
    Relation.NIECE: _add_child_of_anchor,
    Relation.NEPHEW: _add_child_of_anchor,
    Relation.FIRST_COUSIN_MALE: _add_child_of_anchor,
    Relation.FIRST_COUSIN_FEMALE: _add_child_of_anchor,
    Relation.GRANDSON: _add_child_of_anchor,
    Relation.GRANDDAUGHTER: _add_child_of_anchor,
    Relation.ADDITIONAL_PARTNER: _add_additional_partner,
    Relation.EX_PARTNER: _add_ex_partner,
    Relation.HALF_SISTER: _add_half_sibling,
    Relation.HALF_BROTHER: _add_half_sibling,
    Relation.AUNT: _add_aunt_uncle,
    Relation.UNCLE: _add_aunt_uncle,
    Relation.HALF_AUNT: _add_half_aunt_uncle,
    Relation.HALF_UNCLE: _add_half_aunt_uncle,
}


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _add_child_of_couple(graph, relation, parent_id, second_parent_id):
    if second_parent_id is not None:
        co_parent = second_parent_id
        _link_co_parent(graph, parent_id, co_parent)
    else:
        co_parent = ensure_partner(graph, parent_id)

    node_id = _new_relative(graph, relation, parent_id)
    _connect_child(graph, parent_id, node_id)
    _connect_child(graph, co_parent, node_id)
    return node_id


def _new_relative(graph, relation, anchor_id=None):
    return graph.add_node(relation_label(graph, relation, anchor_id), sex=relation.sex)


def _connect_child(graph, parent_id, child_id):
    graph.add_edge(parent_id, child_id, RelationshipType.PARENT)


def _link_co_parent(graph, anchor_id, other_id):
    """Partner two co-parents unless a partner or ex-partner edge already joins them."""
    if other_id == anchor_id:
        return
    if other_id in graph.partners(anchor_id) or other_id in graph.ex_partners(anchor_id):
        return
    add_partnership(graph, anchor_id, other_id)


def _other_partner(graph, parent_id):
    """First partner (or ex) of parent_id that is not ego's other parent."""
    ego_id = graph.ego_id
    ego_parents = graph.parents(ego_id) if ego_id is not None else []
    primary = next((p for p in ego_parents if p != parent_id), None)
    for partner_id in graph.partners(parent_id) + graph.ex_partners(parent_id):
        if partner_id != primary:
            return partner_id
    return None


def _opposite_sex(sex):
    # Unknown sex is treated as female, so the new partner is male
    return sex.opposite if sex is not None else Sex.MALE


def _side_of(graph, anchor_id):
    relationship = graph.relationship_to_ego(anchor_id) or ""
    if relationship == "mother" or relationship.startswith("maternal"):
        return "maternal"
    if relationship == "father" or relationship.startswith("paternal"):
        return "paternal"

    label = graph.get_node(anchor_id).label.lower()
    for word, side in SIDE_WORDS:
        if word in label:
            return side
    return None
