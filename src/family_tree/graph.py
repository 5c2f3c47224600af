"""NetworkX-backed family graph store and relation queries."""

from collections.abc import Mapping
import itertools
import logging
import re

import networkx as nx

from family_tree.models import (
    Person,
    Position,
    Relationship,
    RelationshipType,
    Sex,
    Spacing,
    parse_sex,
)

logger = logging.getLogger(__name__)

MAX_PARENTS = 2

# Relationship labels that can be resolved relative to ego
KIN_RELATIONSHIPS = (
    "ego",
    "ego-partner",
    "mother",
    "father",
    "maternal-grandmother",
    "maternal-grandfather",
    "paternal-grandmother",
    "paternal-grandfather",
)

_UPDATABLE = {"label", "sex", "read_only", "position"}


def slugify(label: str) -> str:
    """Turn a label into an id fragment: "Father's partner" -> "father-s-partner"."""
    slug = re.sub(r"[^a-z0-9]+", "-", label.lower()).strip("-")
    return slug or "person"


def parents_key(parent_ids) -> str:
    """Canonical identity of a parent couple (sorted, '|'-joined ids)."""
    return "|".join(sorted(parent_ids))


class FamilyGraph:
    """
    The people and relationships of one interview stage.

    Nodes and edges live in a NetworkX MultiDiGraph keyed by their ids. Nothing
    but the edges themselves is stored: parents, partners, siblings, cousins
    and so on are all derived by scanning the edges incident to a node.

    Edge ids are content-derived ("{source}|{target}|{relationship}") and node
    ids are derived from labels, so rebuilding the same family always yields
    the same ids.
    """

    def __init__(self, spacing: Spacing | Mapping | None = None):
        self.G = nx.MultiDiGraph()
        self.spacing = Spacing.from_mapping(spacing)
        # edge id -> (source, target), in insertion order
        self._edges: dict[str, tuple[str, str]] = {}
        self._seq = itertools.count()

    @classmethod
    def from_mappings(
        cls,
        nodes: Mapping[str, Person | Mapping],
        edges: Mapping[str, Relationship | Mapping],
        spacing: Spacing | Mapping | None = None,
    ) -> "FamilyGraph":
        """
        Build a read-only snapshot from id-keyed node and edge mappings.

        Unlike add_node/add_edge this neither enforces the single-ego and
        two-parent rules nor touches read-only flags: the snapshot mirrors
        the input exactly.
        """
        graph = cls(spacing)
        for node_id, attrs in nodes.items():
            person = Person.from_attrs(str(node_id), attrs)
            graph._insert_person(person)
        egos = [p.id for p in graph.nodes.values() if p.is_ego]
        if len(egos) > 1:
            logger.warning("Snapshot has %d ego nodes, using %s", len(egos), egos[0])
        for edge_id, attrs in edges.items():
            edge = Relationship.from_attrs(str(edge_id), attrs)
            graph._insert_edge(edge.id, edge.source, edge.target, edge.relationship)
        return graph

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_node(
        self,
        label: str,
        sex: Sex | str | None = None,
        is_ego: bool = False,
        read_only: bool = False,
        node_id: str | None = None,
    ) -> str:
        """Add a person and return its id."""
        if is_ego and self.ego_id is not None:
            raise ValueError(f"Graph already has an ego node: {self.ego_id}")
        if node_id is None:
            node_id = self._unique_node_id(label)
        elif self.has_node(node_id):
            raise ValueError(f"Person ID {node_id} already exists")

        self._insert_person(
            Person(id=node_id, label=label, sex=parse_sex(sex), is_ego=is_ego, read_only=read_only)
        )
        return node_id

    def update_node(self, node_id: str, **changes) -> None:
        if not self.has_node(node_id):
            raise ValueError(f"Person ID {node_id} not found in graph")
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if "sex" in changes:
            changes["sex"] = parse_sex(changes["sex"])
        self.G.nodes[node_id].update(changes)

    def add_edge(
        self,
        source: str,
        target: str,
        relationship: RelationshipType | str,
        edge_id: str | None = None,
    ) -> str | None:
        """
        Add a relationship and return its id.

        Adding an edge that already exists returns the existing id. A third
        parent edge into the same child is refused (warning, returns None).
        A parent edge locks the parent and its partners as read-only.
        """
        relationship = RelationshipType(relationship)
        edge_id = edge_id or f"{source}|{target}|{relationship.value}"
        if edge_id in self._edges:
            return edge_id

        if relationship is RelationshipType.PARENT:
            existing = self.parents(target)
            if source not in existing and len(existing) >= MAX_PARENTS:
                logger.warning(
                    "%s already has %d parents, not adding %s", target, MAX_PARENTS, source
                )
                return None

        self._insert_edge(edge_id, source, target, relationship)

        if relationship is RelationshipType.PARENT:
            self._lock(source)
            for partner_id in self.partners(source):
                self._lock(partner_id)
        return edge_id

    def remove_node(self, node_id: str) -> None:
        """
        Remove a person and every edge touching it.

        Parents left without children are unlocked again, and partners left
        without any relationship are removed as well. The layout is then
        recomputed.
        """
        if not self.has_node(node_id):
            logger.warning("remove_node: person %s not found", node_id)
            return

        parent_ids = self.parents(node_id)
        partner_ids = self.partners(node_id)
        self._delete(node_id)

        for parent_id in parent_ids:
            self._unlock_if_childless(parent_id)
        for partner_id in partner_ids:
            if self.has_node(partner_id) and not self.get_node(partner_id).is_ego:
                if self.G.degree(partner_id) == 0:
                    logger.debug("Removing orphaned partner %s", partner_id)
                    self._delete(partner_id)

        self.run_layout()

    def remove_edge(self, edge_id: str) -> None:
        """Drop a single relationship; kept alongside the append-only constructor for editing UIs."""
        if edge_id not in self._edges:
            logger.warning("remove_edge: relationship %s not found", edge_id)
            return
        source, target = self._edges.pop(edge_id)
        self.G.remove_edge(source, target, key=edge_id)

    def clear(self) -> None:
        self.G.clear()
        self._edges.clear()

    def run_layout(self, spacing: Spacing | Mapping | None = None) -> dict[str, Position]:
        """Recompute every position and record it on its node."""
        from family_tree.layout import layout_graph

        positions = layout_graph(self, Spacing.from_mapping(spacing or self.spacing))
        for node_id in self.person_ids():
            self.G.nodes[node_id]["position"] = positions.get(node_id)
        return positions

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self.G and "label" in self.G.nodes[node_id]

    def person_ids(self) -> list[str]:
        # Edges to unknown ids leave bare NetworkX nodes behind; skip those
        return [n for n, data in self.G.nodes(data=True) if "label" in data]

    def get_node(self, node_id: str) -> Person | None:
        if not self.has_node(node_id):
            return None
        data = self.G.nodes[node_id]
        return Person(
            id=node_id,
            label=data["label"],
            sex=data.get("sex"),
            is_ego=data.get("is_ego", False),
            read_only=data.get("read_only", False),
            position=data.get("position"),
        )

    def get_edge(self, edge_id: str) -> Relationship | None:
        if edge_id not in self._edges:
            return None
        source, target = self._edges[edge_id]
        relationship = self.G.edges[source, target, edge_id]["relationship"]
        return Relationship(edge_id, source, target, relationship)

    @property
    def nodes(self) -> dict[str, Person]:
        return {node_id: self.get_node(node_id) for node_id in self.person_ids()}

    @property
    def edges(self) -> dict[str, Relationship]:
        return {edge_id: self.get_edge(edge_id) for edge_id in self._edges}

    @property
    def ego_id(self) -> str | None:
        for node_id, data in self.G.nodes(data=True):
            if data.get("is_ego"):
                return node_id
        return None

    def sex(self, node_id: str) -> Sex | None:
        return self.G.nodes[node_id].get("sex") if node_id in self.G else None

    # ------------------------------------------------------------------
    # Derived relations
    # ------------------------------------------------------------------

    def parents(self, node_id: str) -> list[str]:
        return [
            source
            for _, source, target in self._incident(node_id, RelationshipType.PARENT)
            if target == node_id and self.has_node(source)
        ]

    def children(self, node_id: str) -> list[str]:
        return [
            target
            for _, source, target in self._incident(node_id, RelationshipType.PARENT)
            if source == node_id and self.has_node(target)
        ]

    def partners(self, node_id: str) -> list[str]:
        return self._others(node_id, RelationshipType.PARTNER)

    def partner(self, node_id: str) -> str | None:
        """The first (primary) partner of a node."""
        partners = self.partners(node_id)
        return partners[0] if partners else None

    def ex_partners(self, node_id: str) -> list[str]:
        return self._others(node_id, RelationshipType.EX_PARTNER)

    def ex_partner(self, node_id: str) -> str | None:
        exes = self.ex_partners(node_id)
        return exes[0] if exes else None

    def is_couple(self, a: str, b: str) -> bool:
        """True when a and b are each other's primary partner."""
        return self.partner(a) == b and self.partner(b) == a

    def shared_children(self, a: str, b: str) -> list[str]:
        b_children = set(self.children(b))
        return [child for child in self.children(a) if child in b_children]

    def full_siblings(self, node_id: str) -> list[str]:
        """Other children with exactly the same (non-empty) set of parents."""
        parent_ids = set(self.parents(node_id))
        if not parent_ids:
            return []
        siblings = []
        for parent_id in parent_ids:
            for child in self.children(parent_id):
                if child != node_id and child not in siblings and set(self.parents(child)) == parent_ids:
                    siblings.append(child)
        return siblings

    def half_siblings(self, node_id: str) -> list[str]:
        """Other children sharing exactly one parent."""
        parent_ids = set(self.parents(node_id))
        halves = []
        for parent_id in self.parents(node_id):
            for child in self.children(parent_id):
                if child == node_id or child in halves:
                    continue
                child_parents = set(self.parents(child))
                if len(child_parents & parent_ids) == 1 and child_parents != parent_ids:
                    halves.append(child)
        return halves

    def aunts_uncles(self, node_id: str) -> list[str]:
        """Full siblings of the node's parents."""
        found = []
        for parent_id in self.parents(node_id):
            for sibling in self.full_siblings(parent_id):
                if sibling not in found:
                    found.append(sibling)
        return found

    def cousins(self, node_id: str) -> list[str]:
        """Children of the node's aunts and uncles."""
        found = []
        for aunt_uncle in self.aunts_uncles(node_id):
            for child in self.children(aunt_uncle):
                if child != node_id and child not in found:
                    found.append(child)
        return found

    def ancestors(self, node_id: str) -> set[str]:
        if node_id not in self.G:
            return set()
        return {n for n in nx.ancestors(self._parent_view(), node_id) if self.has_node(n)}

    def parent_cycle(self) -> list[str] | None:
        """People on a loop of parent edges (someone their own ancestor), if any."""
        try:
            cycle = nx.find_cycle(self._parent_view(), orientation="original")
        except nx.NetworkXNoCycle:
            return None
        return [edge[0] for edge in cycle]

    def connected_component(self, node_id: str) -> set[str]:
        """Everyone reachable from node_id through any kind of relationship."""
        if not self.has_node(node_id):
            return set()
        undirected = self.G.to_undirected(as_view=True)
        return {n for n in nx.node_connected_component(undirected, node_id) if self.has_node(n)}

    def find_path(self, source_id: str, target_id: str) -> list[str] | None:
        """Shortest chain of people linking two nodes, ignoring edge direction."""
        undirected = self.G.to_undirected(as_view=True)
        try:
            return nx.shortest_path(undirected, source_id, target_id)
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None

    def node_id_for(self, relationship: str) -> str | None:
        """
        Resolve a relationship label (see KIN_RELATIONSHIPS) to a node id.

        Parents and grandparents are told apart by sex, so a parent with no
        recorded sex cannot be resolved as "mother" or "father".
        """
        ego_id = self.ego_id
        if ego_id is None:
            return None
        if relationship == "ego":
            return ego_id
        if relationship == "ego-partner":
            return self.partner(ego_id)
        if relationship == "mother":
            return self._parent_of_sex(ego_id, Sex.FEMALE)
        if relationship == "father":
            return self._parent_of_sex(ego_id, Sex.MALE)

        side, _, role = relationship.partition("-")
        if side not in ("maternal", "paternal") or role not in ("grandmother", "grandfather"):
            return None
        parent_id = self._parent_of_sex(ego_id, Sex.FEMALE if side == "maternal" else Sex.MALE)
        if parent_id is None:
            return None
        return self._parent_of_sex(parent_id, Sex.FEMALE if role == "grandmother" else Sex.MALE)

    def relationship_to_ego(self, node_id: str) -> str | None:
        for relationship in KIN_RELATIONSHIPS:
            if self.node_id_for(relationship) == node_id:
                return relationship
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _insert_person(self, person: Person) -> None:
        self.G.add_node(
            person.id,
            label=person.label,
            sex=person.sex,
            is_ego=person.is_ego,
            read_only=person.read_only,
            position=None,
        )

    def _insert_edge(self, edge_id: str, source: str, target: str, relationship: RelationshipType):
        self.G.add_edge(source, target, key=edge_id, relationship=relationship, seq=next(self._seq))
        self._edges[edge_id] = (source, target)

    def _delete(self, node_id: str) -> None:
        touching = [k for _, _, k in self.G.in_edges(node_id, keys=True)]
        touching += [k for _, _, k in self.G.out_edges(node_id, keys=True)]
        for edge_id in touching:
            self._edges.pop(edge_id, None)
        self.G.remove_node(node_id)

    def _incident(self, node_id: str, relationship: RelationshipType) -> list[tuple[str, str, str]]:
        """(edge id, source, target) of a node's edges of one type, oldest first."""
        if node_id not in self.G:
            return []
        found = {}
        for source, target, key, data in itertools.chain(
            self.G.in_edges(node_id, keys=True, data=True),
            self.G.out_edges(node_id, keys=True, data=True),
        ):
            if data["relationship"] is relationship:
                found[key] = (data["seq"], key, source, target)
        return [(key, source, target) for _, key, source, target in sorted(found.values())]

    def _parent_view(self):
        return nx.subgraph_view(
            self.G,
            filter_edge=lambda u, v, k: self.G.edges[u, v, k]["relationship"]
            is RelationshipType.PARENT,
        )

    def _others(self, node_id: str, relationship: RelationshipType) -> list[str]:
        others = []
        for _, source, target in self._incident(node_id, relationship):
            other = target if source == node_id else source
            if self.has_node(other) and other not in others:
                others.append(other)
        return others

    def _parent_of_sex(self, node_id: str, sex: Sex) -> str | None:
        for parent_id in self.parents(node_id):
            if self.sex(parent_id) is sex:
                return parent_id
        return None

    def _unique_node_id(self, label: str) -> str:
        base = slugify(label)
        candidate, suffix = base, 2
        while candidate in self.G:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def _lock(self, node_id: str) -> None:
        if self.has_node(node_id) and not self.G.nodes[node_id].get("is_ego"):
            self.G.nodes[node_id]["read_only"] = True

    def _unlock_if_childless(self, parent_id: str) -> None:
        if not self.has_node(parent_id) or self.G.nodes[parent_id].get("is_ego"):
            return
        if self.children(parent_id):
            return

        self.G.nodes[parent_id]["read_only"] = False
        ego_id = self.ego_id
        protected = self.ancestors(ego_id) if ego_id else set()
        for partner_id in self.partners(parent_id):
            if partner_id != ego_id and partner_id not in protected:
                self.G.nodes[partner_id]["read_only"] = False
