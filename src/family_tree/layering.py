"""
Generation assignment.

Layer 0 is the oldest generation and children always sit at least one
layer below their parents. Half-siblings, cousins and parentless
ex-partners are held back until the main family is layered so they can be
slotted in relative to it instead of pulling it apart.
"""

from collections import deque
from dataclasses import dataclass, field
import logging

from family_tree.graph import FamilyGraph

logger = logging.getLogger(__name__)


@dataclass
class EgoKin:
    """Relatives of ego that the layout places separately."""

    ego_id: str
    half_siblings: list[str] = field(default_factory=list)
    cousins: list[str] = field(default_factory=list)
    # parentless nodes only linked through an ex-partner edge
    exes: list[str] = field(default_factory=list)

    @property
    def deferred(self) -> set[str]:
        return set(self.half_siblings) | set(self.cousins) | set(self.exes)


def ego_kin(graph: FamilyGraph, component: set[str]) -> EgoKin:
    ego_id = graph.ego_id
    kin = EgoKin(ego_id=ego_id)
    if ego_id is None:
        return kin
    kin.half_siblings = [n for n in graph.half_siblings(ego_id) if n in component]
    kin.cousins = [
        n for n in graph.cousins(ego_id) if n in component and n not in kin.half_siblings
    ]
    for node_id in graph.person_ids():
        if node_id == ego_id or node_id not in component:
            continue
        if graph.parents(node_id) or graph.partners(node_id):
            continue
        if graph.ex_partners(node_id):
            kin.exes.append(node_id)
    return kin


def assign_layers(graph: FamilyGraph, component: set[str] | None = None) -> dict[str, int]:
    """
    Map every node in ego's connected component to a generation index.

    Args:
        graph: The family graph
        component: Precomputed connected component of ego

    Returns:
        Node id -> layer, smallest layer 0. Empty when there is no ego.
    """
    ego_id = graph.ego_id
    if ego_id is None:
        return {}
    if component is None:
        component = graph.connected_component(ego_id)

    kin = ego_kin(graph, component)
    deferred = kin.deferred
    order = [n for n in graph.person_ids() if n in component]
    limit = len(order)
    layers: dict[str, int] = {}

    roots = deque(n for n in order if n not in deferred and not graph.parents(n))
    for node_id in roots:
        layers[node_id] = 0
    _push_down(graph, layers, roots, deferred, limit)
    _pull_up(graph, layers, order, deferred, limit)
    _equalize_partners(graph, layers, order)

    for node_id in kin.exes:
        ex_layers = [layers[e] for e in graph.ex_partners(node_id) if e in layers]
        layers[node_id] = max(ex_layers) if ex_layers else 0
    for node_id in kin.half_siblings + kin.cousins:
        parent_layers = [layers[p] for p in graph.parents(node_id) if p in layers]
        layers[node_id] = max(parent_layers) + 1 if parent_layers else 0

    for _ in range(limit + 1):
        changed = _equalize_partners(graph, layers, order)
        changed |= _push_down(graph, layers, deque(layers), set(), limit)
        if not changed:
            break
    else:
        logger.warning("Layers did not settle, parent cycle: %s", graph.parent_cycle())

    for node_id in order:
        if node_id not in layers:
            logger.debug("Node %s could not be layered, placing it at 0", node_id)
            layers[node_id] = 0

    lowest = min(layers.values())
    if lowest:
        layers = {node_id: layer - lowest for node_id, layer in layers.items()}
    logger.debug("Assigned %d nodes to %d layers", len(layers), len(set(layers.values())))
    return layers


def _push_down(graph, layers, queue, skip, limit) -> bool:
    """Breadth-first: every child at least one layer below each parent."""
    changed = False
    while queue:
        node_id = queue.popleft()
        depth = layers[node_id] + 1
        if depth > limit:
            continue
        for child in graph.children(node_id):
            if child in skip:
                continue
            if layers.get(child, -1) < depth:
                layers[child] = depth
                queue.append(child)
                changed = True
    return changed


def _pull_up(graph, layers, order, skip, limit) -> None:
    """Raise parents to sit directly above their highest child."""
    for _ in range(limit + 1):
        changed = False
        for node_id in order:
            if node_id in skip:
                continue
            child_layers = [layers[c] for c in graph.children(node_id) if c in layers]
            if not child_layers:
                continue
            desired = min(child_layers) - 1
            if node_id not in layers or layers[node_id] < desired:
                layers[node_id] = desired
                changed = True
        if not changed:
            return


def _equalize_partners(graph, layers, order) -> bool:
    changed = False
    for node_id in order:
        for partner_id in graph.partners(node_id):
            known = [layers[n] for n in (node_id, partner_id) if n in layers]
            if not known:
                continue
            target = max(known)
            for n in (node_id, partner_id):
                if layers.get(n) != target:
                    layers[n] = target
                    changed = True
    return changed
