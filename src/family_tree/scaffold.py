"""Scaffold generator: the minimal family around ego plus counted relatives."""

from collections.abc import Mapping
import logging

from family_tree.graph import FamilyGraph
from family_tree.models import Relation, RelationshipType, Sex, parse_sex
from family_tree.relations import add_partnership, add_placeholder_node

logger = logging.getLogger(__name__)

EGO_LABEL = "You"

# count key -> (relation to add, ego parent it is anchored at)
COUNT_RELATIONS: dict[str, tuple[Relation, str | None]] = {
    "brothers": (Relation.BROTHER, None),
    "sisters": (Relation.SISTER, None),
    "sons": (Relation.SON, None),
    "daughters": (Relation.DAUGHTER, None),
    "maternal-uncles": (Relation.UNCLE, "mother"),
    "maternal-aunts": (Relation.AUNT, "mother"),
    "paternal-uncles": (Relation.UNCLE, "father"),
    "paternal-aunts": (Relation.AUNT, "father"),
    "fathers-additional-partners": (Relation.ADDITIONAL_PARTNER, "father"),
    "mothers-additional-partners": (Relation.ADDITIONAL_PARTNER, "mother"),
}


def initialize_minimal_network(graph: FamilyGraph, relayout: bool = True) -> None:
    """
    Give a lone ego a mother, a father and both pairs of grandparents.

    Does nothing when there is no ego or the graph already holds anyone
    besides ego. Ego without a recorded sex becomes female. Every scaffold
    ancestor is read-only.
    """
    ego_id = graph.ego_id
    if ego_id is None:
        logger.warning("Cannot initialize the minimal network without an ego node")
        return
    if len(graph.person_ids()) > 1:
        logger.debug("Graph already has structure, minimal network not added")
        return

    if graph.sex(ego_id) is None:
        graph.update_node(ego_id, sex=Sex.FEMALE)

    maternal_grandmother = graph.add_node("maternal grandmother", sex=Sex.FEMALE, read_only=True)
    maternal_grandfather = graph.add_node("maternal grandfather", sex=Sex.MALE, read_only=True)
    add_partnership(graph, maternal_grandfather, maternal_grandmother)

    paternal_grandmother = graph.add_node("paternal grandmother", sex=Sex.FEMALE, read_only=True)
    paternal_grandfather = graph.add_node("paternal grandfather", sex=Sex.MALE, read_only=True)
    add_partnership(graph, paternal_grandfather, paternal_grandmother)

    mother = graph.add_node("mother", sex=Sex.FEMALE, read_only=True)
    father = graph.add_node("father", sex=Sex.MALE, read_only=True)
    for grandparent in (maternal_grandmother, maternal_grandfather):
        graph.add_edge(grandparent, mother, RelationshipType.PARENT)
    for grandparent in (paternal_grandmother, paternal_grandfather):
        graph.add_edge(grandparent, father, RelationshipType.PARENT)
    add_partnership(graph, father, mother)

    graph.add_edge(mother, ego_id, RelationshipType.PARENT)
    graph.add_edge(father, ego_id, RelationshipType.PARENT)

    if relayout:
        graph.run_layout()


def generate_placeholder_network(
    graph: FamilyGraph,
    counts: Mapping[str, int],
    ego_sex: Sex | str | None = None,
) -> None:
    """
    Build a placeholder family from relative counts.

    Args:
        graph: Graph to extend; ego is created if it has none
        counts: Number of relatives per key in COUNT_RELATIONS, e.g.
            {"brothers": 2, "maternal-aunts": 1}
        ego_sex: Sex recorded on ego before the scaffold is built
    """
    sex = parse_sex(ego_sex)
    if ego_sex is not None and sex is None:
        logger.warning("Unknown ego sex %r ignored", ego_sex)

    ego_id = graph.ego_id
    if ego_id is None:
        ego_id = graph.add_node(EGO_LABEL, sex=sex, is_ego=True)
    elif sex is not None:
        graph.update_node(ego_id, sex=sex)

    initialize_minimal_network(graph, relayout=False)

    anchors = {"mother": graph.node_id_for("mother"), "father": graph.node_id_for("father")}
    for key, count in _valid_counts(counts).items():
        relation, anchor_key = COUNT_RELATIONS[key]
        anchor_id = anchors[anchor_key] if anchor_key else None
        if anchor_key and anchor_id is None:
            logger.warning("Skipping %s: ego has no %s", key, anchor_key)
            continue
        for _ in range(count):
            add_placeholder_node(graph, relation, anchor_id, relayout=False)

    graph.run_layout()


def _valid_counts(counts: Mapping[str, int]) -> dict[str, int]:
    """Counts to apply, in COUNT_RELATIONS order, with bad entries dropped."""
    for key in counts:
        if key not in COUNT_RELATIONS:
            logger.warning("Unknown relative count %r skipped", key)

    valid = {}
    for key in COUNT_RELATIONS:
        count = counts.get(key)
        if count is None or count == 0:
            continue
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            logger.warning("Invalid count for %s: %r", key, count)
            continue
        valid[key] = count
    return valid
