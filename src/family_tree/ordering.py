"""
Left-to-right ordering of each generation.

Layers are ordered from the youngest generation upwards so that every
couple can be placed in the order its children were placed one layer
below. Nodes that do not belong to a sibling group of their own (exes,
additional partners, ego's half-siblings and cousins) are spliced in
afterwards next to the people they relate to.
"""

from dataclasses import dataclass
import logging

from family_tree.graph import FamilyGraph, parents_key
from family_tree.layering import EgoKin, ego_kin
from family_tree.models import Sex

logger = logging.getLogger(__name__)


@dataclass
class Couple:
    id: str
    left: str
    right: str
    left_key: str
    right_key: str


def couple_partner(graph: FamilyGraph, layers: dict[str, int], node_id: str) -> str | None:
    """The node's mutual primary partner when both share a layer."""
    partner_id = graph.partner(node_id)
    if partner_id is None or partner_id not in layers:
        return None
    if layers[partner_id] != layers[node_id] or not graph.is_couple(node_id, partner_id):
        return None
    return partner_id


def couple_sides(graph: FamilyGraph, a: str, b: str) -> tuple[str, str]:
    """(left, right) for a couple: ego on the left, otherwise the woman."""
    if graph.get_node(a).is_ego:
        return a, b
    if graph.get_node(b).is_ego:
        return b, a
    if graph.sex(a) is Sex.MALE:
        return b, a
    return a, b


def mate_of(graph: FamilyGraph, layers: dict[str, int], node_id: str) -> str | None:
    """First partner, else first ex-partner, in the node's own layer."""
    layer = layers.get(node_id)
    for other in graph.partners(node_id) + graph.ex_partners(node_id):
        if layers.get(other) == layer:
            return other
    return None


def find_joiners(graph: FamilyGraph, layers: dict[str, int]) -> set[str]:
    """
    Parentless nodes attached to someone else's unit rather than forming one.

    A joiner has no parents, is nobody's mutual primary partner and has a
    partner or ex in its layer (its mate). When two such nodes are each
    other's mate, the one created first anchors and the other joins it.
    """
    ego_id = graph.ego_id
    order = [n for n in graph.person_ids() if n in layers]
    candidates = {
        n
        for n in order
        if n != ego_id
        and not graph.parents(n)
        and couple_partner(graph, layers, n) is None
        and mate_of(graph, layers, n) is not None
    }

    joiners, anchors = set(), set()
    for node_id in order:
        if node_id not in candidates:
            continue
        mate = mate_of(graph, layers, node_id)
        if mate in candidates and mate not in anchors and mate not in joiners:
            anchors.add(node_id)
        else:
            joiners.add(node_id)
    return joiners


def order_layers(
    graph: FamilyGraph, layers: dict[str, int], kin: EgoKin | None = None
) -> dict[int, list[str]]:
    """
    Order the nodes of every layer left to right.

    Args:
        graph: The family graph
        layers: Node id -> layer, from assign_layers
        kin: Ego's half-siblings and cousins; derived from the graph if omitted

    Returns:
        Layer -> node ids, left first
    """
    if not layers:
        return {}
    if kin is None:
        kin = ego_kin(graph, set(layers))

    spliced = {n for n in kin.half_siblings + kin.cousins if n in layers}
    travellers = set()
    for node_id in spliced:
        partner_id = couple_partner(graph, layers, node_id)
        if partner_id is not None and partner_id not in spliced:
            travellers.add(partner_id)
    joiners = find_joiners(graph, layers)

    by_layer: dict[int, list[str]] = {}
    for node_id in graph.person_ids():
        if node_id in layers:
            by_layer.setdefault(layers[node_id], []).append(node_id)

    result: dict[int, list[str]] = {}
    pending_joiners: dict[int, list[str]] = {}
    previous_ids: list[str] = []
    for layer in sorted(by_layer, reverse=True):
        members = [
            n for n in by_layer[layer] if n not in spliced and n not in joiners and n not in travellers
        ]
        ordered, previous_ids = _order_units(graph, layers, members, previous_ids)
        layer_joiners = [n for n in by_layer[layer] if n in joiners]
        pending_joiners[layer] = _splice_joiners(graph, layers, ordered, layer_joiners, joiners)
        result[layer] = ordered

    _splice_half_siblings(graph, layers, kin, result, spliced)
    _splice_cousins(graph, layers, kin, result, spliced)

    for layer, members in by_layer.items():
        row = result[layer]
        left = _splice_joiners(graph, layers, row, pending_joiners[layer], joiners)
        for node_id in members:
            if node_id not in row and node_id not in left:
                row.append(node_id)
        row.extend(left)
    return result


def _order_units(graph, layers, members, previous_ids):
    """Order one layer's solos and couples; returns (order, parent identities seen)."""
    solos: dict[str, list[str]] = {}
    couples: dict[str, list[Couple]] = {}
    identities: list[str] = []
    grouped = set()

    for node_id in members:
        if node_id in grouped:
            continue
        partner_id = couple_partner(graph, layers, node_id)
        if partner_id is not None and partner_id in members:
            left, right = couple_sides(graph, node_id, partner_id)
            left_key = parents_key(graph.parents(left))
            right_key = parents_key(graph.parents(right))
            left_key, right_key = left_key or right_key, right_key or left_key
            couple = Couple(parents_key([left, right]), left, right, left_key, right_key)

            couples.setdefault(left_key, []).append(couple)
            if left_key not in identities:
                if right_key in identities:
                    identities.insert(identities.index(right_key), left_key)
                else:
                    identities.append(left_key)
            if right_key != left_key:
                couples.setdefault(right_key, []).append(couple)
                if right_key not in identities:
                    identities.insert(identities.index(left_key) + 1, right_key)
            grouped.update((node_id, partner_id))
        else:
            key = parents_key(graph.parents(node_id))
            solos.setdefault(key, []).append(node_id)
            if key not in identities:
                identities.append(key)
            grouped.add(node_id)

    ordered: list[str] = []
    seen: list[str] = []
    placed = set()

    def note(key):
        if key not in seen:
            seen.append(key)

    for key in identities:
        ordered.extend(solos.get(key, []))
        note(key)
        waiting = couples.get(key, [])
        # couples whose children were ordered below keep that order
        for child_key in previous_ids:
            for couple in waiting:
                if couple.id == child_key and couple.id not in placed:
                    ordered.extend((couple.left, couple.right))
                    placed.add(couple.id)
                    note(couple.left_key)
                    note(couple.right_key)
        for couple in waiting:
            if couple.id in placed:
                continue
            _insert_childless_couple(graph, ordered, couple)
            placed.add(couple.id)
            note(couple.left_key)
            note(couple.right_key)
    return ordered, seen


def _insert_childless_couple(graph, ordered, couple):
    """Put a couple without children next to the first sibling of either member."""
    for index, node_id in enumerate(ordered):
        key = parents_key(graph.parents(node_id))
        if key and key in (couple.left_key, couple.right_key):
            break
    else:
        ordered.extend((couple.left, couple.right))
        return
    if index > 0 and graph.is_couple(ordered[index - 1], ordered[index]):
        index += 1
    ordered[index:index] = [couple.left, couple.right]


def _unit_span(graph, row, node_id):
    """First and last index of the unit (solo or couple) containing node_id."""
    index = row.index(node_id)
    start = end = index
    if index > 0 and graph.is_couple(row[index - 1], node_id):
        start = index - 1
    if index + 1 < len(row) and graph.is_couple(node_id, row[index + 1]):
        end = index + 1
    return start, end


def _splice_joiners(graph, layers, row, layer_joiners, joiners):
    """Insert joiners beside their mates; returns those whose mate is not in row."""
    remaining = []
    for node_id in layer_joiners:
        mate = mate_of(graph, layers, node_id)
        if mate not in row:
            remaining.append(node_id)
            continue
        start, end = _unit_span(graph, row, mate)
        if mate in graph.partners(node_id):
            # additional partner: the mate's outer side
            on_left = start != end and row[start] == mate
        else:
            on_left = graph.sex(node_id) is Sex.MALE

        if on_left:
            row.insert(start, node_id)
        else:
            position = end + 1
            while position < len(row) and row[position] in joiners and mate_of(graph, layers, row[position]) == mate:
                position += 1
            row.insert(position, node_id)
    return remaining


def _block(graph, layers, node_id, spliced):
    """A spliced node plus the partner that travels with it."""
    partner_id = couple_partner(graph, layers, node_id)
    if partner_id is None or partner_id in spliced:
        return [node_id]
    return list(couple_sides(graph, node_id, partner_id))


def _splice_half_siblings(graph, layers, kin, result, spliced):
    ego_id = kin.ego_id
    if ego_id not in layers or not kin.half_siblings:
        return
    ego_layer = layers[ego_id]
    row = result[ego_layer]
    mother = graph.node_id_for("mother")
    father = graph.node_id_for("father")

    maternal, paternal = [], []
    for node_id in kin.half_siblings:
        if layers.get(node_id) != ego_layer:
            continue
        parent_ids = graph.parents(node_id)
        if mother is not None and mother in parent_ids:
            maternal.extend(_block(graph, layers, node_id, spliced))
        elif father is not None and father in parent_ids:
            paternal.extend(_block(graph, layers, node_id, spliced))

    if maternal:
        indexes = [i for i, n in enumerate(row) if mother in graph.parents(n)]
        index = indexes[0] if indexes else 0
        if index > 0 and graph.is_couple(row[index - 1], row[index]):
            index -= 1
        row[index:index] = maternal
    if paternal:
        indexes = [i for i, n in enumerate(row) if father in graph.parents(n)]
        index = indexes[-1] if indexes else len(row) - 1
        if index + 1 < len(row) and graph.is_couple(row[index], row[index + 1]):
            index += 1
        row[index + 1 : index + 1] = paternal


def _splice_cousins(graph, layers, kin, result, spliced):
    ego_id = kin.ego_id
    if ego_id not in layers or not kin.cousins:
        return
    ego_layer = layers[ego_id]
    row = result[ego_layer]
    parent_layers = [layers[p] for p in graph.parents(ego_id) if p in layers]
    if not parent_layers:
        return
    parent_row = result.get(parent_layers[0], [])

    placed = set()
    for index, aunt_uncle in enumerate(parent_row):
        batch = [
            c
            for c in kin.cousins
            if c not in placed and layers.get(c) == ego_layer and aunt_uncle in graph.parents(c)
        ]
        if not batch:
            continue

        target = 0
        for previous in reversed(parent_row[:index]):
            children = set(graph.children(previous))
            hits = [i for i, n in enumerate(row) if n in children]
            if not hits:
                continue
            target = hits[-1] + 1
            # step over that child's partner or ex
            if target < len(row):
                last = row[target - 1]
                if graph.is_couple(last, row[target]) or row[target] in graph.ex_partners(last):
                    target += 1
            break

        block = []
        for cousin in batch:
            block.extend(n for n in _block(graph, layers, cousin, spliced) if n not in block)
        row[target:target] = block
        placed.update(batch)
