"""Pixel coordinates for ordered layers."""

import logging
from statistics import mean

from family_tree.graph import FamilyGraph
from family_tree.models import DEFAULT_SPACING, Position, Spacing
from family_tree.ordering import couple_partner, find_joiners, mate_of

logger = logging.getLogger(__name__)


def assign_coordinates(
    graph: FamilyGraph,
    ordered: dict[int, list[str]],
    spacing: Spacing = DEFAULT_SPACING,
) -> dict[str, Position]:
    """
    Place every ordered node, youngest generation first.

    Parents are centred over children that are already placed, and a
    cursor keeps each layer from overlapping itself: nothing is placed
    left of the previous unit plus `spacing.siblings`. Joiners (exes and
    additional partners) go in a second pass, pushing their neighbours
    right to make room.
    """
    layers = {node_id: layer for layer, row in ordered.items() for node_id in row}
    joiners = find_joiners(graph, layers)
    xs: dict[str, float] = {}

    for layer in sorted(ordered, reverse=True):
        row = ordered[layer]
        cursor = None
        for node_id in row:
            if node_id in xs or node_id in joiners:
                continue
            partner_id = couple_partner(graph, layers, node_id)
            if partner_id is not None and partner_id not in xs and partner_id in row:
                if row.index(node_id) < row.index(partner_id):
                    cursor = _place_couple(graph, xs, node_id, partner_id, cursor, spacing)
                else:
                    cursor = _place_couple(graph, xs, partner_id, node_id, cursor, spacing)
            else:
                cursor = _place_solo(graph, xs, node_id, cursor, spacing)

        for node_id in row:
            if node_id in joiners and not _place_joiner(graph, layers, row, xs, node_id, spacing):
                placed = [xs[n] for n in row if n in xs]
                xs[node_id] = max(placed) + spacing.siblings if placed else 0

    return {
        node_id: Position(xs[node_id], layer * spacing.generations)
        for layer, row in ordered.items()
        for node_id in row
    }


def normalize_positions(positions: dict[str, Position]) -> dict[str, Position]:
    """Shift everything horizontally so the leftmost node sits at x = 0."""
    if not positions:
        return {}
    min_x = min(position.x for position in positions.values())
    return {node_id: Position(p.x - min_x, p.y) for node_id, p in positions.items()}


def _place_couple(graph, xs, left, right, cursor, spacing):
    child_xs = [xs[c] for c in graph.shared_children(left, right) if c in xs]
    if child_xs:
        left_x = mean(child_xs) - spacing.partners / 2
        if cursor is not None:
            left_x = max(left_x, cursor)
    else:
        left_x = cursor if cursor is not None else 0
    xs[left] = left_x
    xs[right] = left_x + spacing.partners
    return xs[right] + spacing.siblings


def _place_solo(graph, xs, node_id, cursor, spacing):
    child_xs = [xs[c] for c in graph.children(node_id) if c in xs]
    if child_xs:
        x = mean(child_xs)
        if cursor is not None:
            x = max(x, cursor)
    else:
        x = cursor if cursor is not None else 0
    xs[node_id] = x
    return x + spacing.siblings


def _place_joiner(graph, layers, row, xs, node_id, spacing) -> bool:
    mate = mate_of(graph, layers, node_id)
    if mate is None or mate not in xs or mate not in row:
        return False

    index, mate_index = row.index(node_id), row.index(mate)
    if mate_index > index:
        # left of the mate: take the nearest placed node's slot, push it right
        anchor = next(n for n in row[index + 1 : mate_index + 1] if n in xs)
        x = xs[anchor]
        shifted = [n for n in row if n in xs and xs[n] >= x]
    else:
        anchor = next(n for n in reversed(row[mate_index:index]) if n in xs)
        x = xs[anchor] + spacing.partners
        shifted = [n for n in row if n in xs and xs[n] > xs[anchor]]

    for n in shifted:
        xs[n] += spacing.partners
    xs[node_id] = x
    logger.debug("Joined %s to %s at x=%s", node_id, mate, x)
    return True
