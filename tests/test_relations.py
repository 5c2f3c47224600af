"""Tests for the relation constructor."""

import pytest

from family_tree import Relation, RelationshipType, Sex
from family_tree.relations import _HANDLERS, add_placeholder_node
from family_tree.scaffold import generate_placeholder_network


def parent_edges(graph, child_id):
    return [
        e for e in graph.edges.values() if e.relationship is RelationshipType.PARENT and e.target == child_id
    ]


def partner_edges(graph, a, b):
    return [
        e
        for e in graph.edges.values()
        if e.relationship is RelationshipType.PARTNER and {e.source, e.target} == {a, b}
    ]


class TestRelationKeywords:
    """Tests for the Relation enum."""

    def test_every_relation_has_a_handler(self):
        assert set(_HANDLERS) == set(Relation)

    @pytest.mark.parametrize(
        "keyword, expected",
        [
            ("halfSister", Relation.HALF_SISTER),
            ("half-sister", Relation.HALF_SISTER),
            ("ADDITIONAL_PARTNER", Relation.ADDITIONAL_PARTNER),
            ("ex-partner", Relation.EX_PARTNER),
            ("firstcousinfemale", Relation.FIRST_COUSIN_FEMALE),
            ("cousinOnceRemoved", None),
        ],
    )
    def test_parse(self, keyword, expected):
        assert Relation.parse(keyword) is expected

    def test_sex_and_label(self):
        assert Relation.FIRST_COUSIN_FEMALE.sex is Sex.FEMALE
        assert Relation.FIRST_COUSIN_FEMALE.label == "first cousin"
        assert Relation.HALF_BROTHER.label == "half brother"
        assert Relation.ADDITIONAL_PARTNER.sex is None


class TestSiblingsAndChildren:
    """Tests for relatives anchored at ego."""

    def test_brother_is_child_of_ego_parents(self, family):
        brother = add_placeholder_node(family, "brother")
        node = family.get_node(brother)

        assert node.sex is Sex.MALE
        assert node.label == "brother"
        assert family.parents(brother) == ["mother", "father"]

    def test_sibling_requires_ego_parents(self, ego_graph, caplog):
        assert add_placeholder_node(ego_graph, "sister") is None
        assert list(ego_graph.nodes) == ["ego"]
        assert "requires ego's parents" in caplog.text

    def test_son_creates_ego_partner(self, ego_graph):
        son = add_placeholder_node(ego_graph, "son")
        partner = ego_graph.partner("ego")

        assert ego_graph.get_node(partner).label == "Your partner"
        assert ego_graph.get_node(partner).sex is Sex.MALE
        assert set(ego_graph.parents(son)) == {"ego", partner}
        # male partner is the source of the partner edge
        assert partner_edges(ego_graph, "ego", partner)[0].source == partner

    def test_daughter_reuses_ego_partner(self, ego_graph):
        add_placeholder_node(ego_graph, "son")
        daughter = add_placeholder_node(ego_graph, "daughter")

        assert len(ego_graph.partners("ego")) == 1
        assert ego_graph.parents(daughter) == ego_graph.parents("son")

    def test_positions_are_recomputed(self, family):
        brother = add_placeholder_node(family, "brother")
        assert family.get_node(brother).position is not None


class TestAnchoredRelatives:
    """Tests for relatives that hang off an anchor node."""

    def test_nephew_gets_sibling_partner_as_second_parent(self, family):
        brother = add_placeholder_node(family, "brother")
        nephew = add_placeholder_node(family, "nephew", brother)
        partner = family.partner(brother)

        assert family.get_node(partner).label == "brother's partner"
        assert family.get_node(partner).sex is Sex.FEMALE
        assert set(family.parents(nephew)) == {brother, partner}

    def test_explicit_second_parent_wins(self, family):
        brother = add_placeholder_node(family, "brother")
        add_placeholder_node(family, "niece", brother)
        other = family.add_node("Zoe", sex="female")

        niece = add_placeholder_node(family, "niece", brother, other)

        assert set(family.parents(niece)) == {brother, other}
        assert len(partner_edges(family, brother, other)) == 1

    def test_explicit_second_parent_is_linked_once(self, family):
        brother = add_placeholder_node(family, "brother")
        other = family.add_node("Zoe", sex="female")

        add_placeholder_node(family, "niece", brother, other)
        add_placeholder_node(family, "nephew", brother, other)

        assert len(partner_edges(family, brother, other)) == 1
        assert partner_edges(family, brother, other)[0].source == brother

    def test_first_cousin(self, family):
        aunt = add_placeholder_node(family, "aunt", "father")
        cousin = add_placeholder_node(family, "firstCousinFemale", aunt)

        assert family.get_node(cousin).label == "paternal first cousin"
        assert family.get_node(cousin).sex is Sex.FEMALE
        assert aunt in family.parents(cousin)

    def test_grandson(self, ego_graph):
        daughter = add_placeholder_node(ego_graph, "daughter")
        grandson = add_placeholder_node(ego_graph, "grandson", daughter)

        assert set(ego_graph.parents(grandson)) == {daughter, ego_graph.partner(daughter)}
        assert ego_graph.get_node(ego_graph.partner(daughter)).sex is Sex.MALE

    def test_aunt_and_uncle(self, family):
        uncle = add_placeholder_node(family, "uncle", "mother")
        aunt = add_placeholder_node(family, "aunt", "father")

        assert family.get_node(uncle).label == "maternal uncle"
        assert family.parents(uncle) == ["maternal-grandmother", "maternal-grandfather"]
        assert family.get_node(aunt).label == "paternal aunt"
        assert family.parents(aunt) == ["paternal-grandmother", "paternal-grandfather"]

    def test_aunt_requires_anchor_parents(self, ego_graph):
        parent = ego_graph.add_node("mother", sex="female")
        assert add_placeholder_node(ego_graph, "aunt", parent) is None

    def test_half_uncle(self, family):
        half_uncle = add_placeholder_node(family, "halfUncle", "paternal-grandfather")

        assert family.get_node(half_uncle).label == "paternal half uncle"
        assert family.parents(half_uncle) == ["paternal-grandfather"]

    def test_half_aunt_with_second_parent(self, family):
        other = add_placeholder_node(family, "additionalPartner", "maternal-grandmother")
        half_aunt = add_placeholder_node(family, "halfAunt", "maternal-grandmother", other)

        assert set(family.parents(half_aunt)) == {"maternal-grandmother", other}
        assert len(partner_edges(family, "maternal-grandmother", other)) == 1


class TestPartners:
    """Tests for additional partners."""

    def test_additional_partner_of_father(self, family):
        partner = add_placeholder_node(family, "additionalPartner", "father")

        assert family.get_node(partner).sex is Sex.FEMALE
        assert family.get_node(partner).label == "father's partner"
        edges = partner_edges(family, "father", partner)
        assert len(edges) == 1
        assert edges[0].source == "father"

    def test_additional_partner_of_mother_is_male_source(self, family):
        partner = add_placeholder_node(family, "additionalPartner", "mother")
        assert family.get_node(partner).sex is Sex.MALE
        assert partner_edges(family, "mother", partner)[0].source == partner

    def test_unknown_sex_anchor_gets_male_partner(self, family):
        loner = family.add_node("someone")
        partner = add_placeholder_node(family, "additionalPartner", loner)
        assert family.get_node(partner).sex is Sex.MALE

    def test_fathers_additional_partners(self, graph):
        generate_placeholder_network(graph, {"fathers-additional-partners": 2}, "male")
        father = graph.node_id_for("father")
        partner_count = sum(
            1
            for e in graph.edges.values()
            if e.relationship is RelationshipType.PARTNER and father in (e.source, e.target)
        )
        assert partner_count == 3


class TestExPartners:
    """Tests for ex-partners anchored at any node."""

    def test_ex_partner_edge(self, graph):
        father = graph.add_node("father", sex="male")
        ex = add_placeholder_node(graph, "exPartner", father)

        edges = [e for e in graph.edges.values() if e.relationship is RelationshipType.EX_PARTNER]
        assert ex is not None
        assert len(edges) == 1
        assert {edges[0].source, edges[0].target} == {father, ex}
        assert graph.partners(father) == []

    @pytest.mark.parametrize("sex, expected", [("male", Sex.FEMALE), ("female", Sex.MALE)])
    def test_opposite_sex(self, graph, sex, expected):
        anchor = graph.add_node("parent", sex=sex)
        ex = add_placeholder_node(graph, "exPartner", anchor)
        assert graph.get_node(ex).sex is expected

    def test_label_names_anchor(self, graph):
        father = graph.add_node("father", sex="male")
        ex = add_placeholder_node(graph, "exPartner", father)
        assert graph.get_node(ex).label == "father's ex partner"

    def test_requires_anchor(self, graph, caplog):
        assert add_placeholder_node(graph, "exPartner") is None
        assert graph.nodes == {}
        assert "requires anchor_id" in caplog.text

    def test_male_is_source(self, graph):
        mother = graph.add_node("mother", sex="female")
        ex = add_placeholder_node(graph, "exPartner", mother)

        edge = next(e for e in graph.edges.values() if e.relationship is RelationshipType.EX_PARTNER)
        assert edge.source == ex
        assert edge.target == mother

    def test_ex_shares_mates_generation(self, family):
        ex = add_placeholder_node(family, "exPartner", "mother")
        assert family.get_node(ex).position.y == family.get_node("mother").position.y


class TestHalfSiblings:
    """Tests for half siblings anchored at a parent."""

    def test_half_sister_without_other_partner(self, family):
        half = add_placeholder_node(family, "halfSister", "mother")

        edges = parent_edges(family, half)
        assert len(edges) == 1
        assert edges[0].source == "mother"

    def test_half_sister_with_explicit_partner(self, family):
        other = add_placeholder_node(family, "additionalPartner", "mother")
        half = add_placeholder_node(family, "halfSister", "mother", other)

        assert {e.source for e in parent_edges(family, half)} == {"mother", other}
        assert len(parent_edges(family, half)) == 2
        assert len(partner_edges(family, "mother", other)) == 1

    def test_half_brother_finds_other_partner(self, family):
        other = add_placeholder_node(family, "additionalPartner", "father")
        half = add_placeholder_node(family, "halfBrother", "father")

        assert set(family.parents(half)) == {"father", other}
        assert "mother" not in family.parents(half)

    def test_half_sibling_via_ex_partner(self, family):
        ex = family.add_node("mother's ex", sex="male")
        family.add_edge(ex, "mother", RelationshipType.EX_PARTNER)

        half = add_placeholder_node(family, "halfBrother", "mother")

        assert set(family.parents(half)) == {"mother", ex}
        assert partner_edges(family, "mother", ex) == []


class TestInvalidRequests:
    """Tests for requests that leave the graph untouched."""

    def test_unknown_relation(self, family, caplog):
        before = (len(family.nodes), len(family.edges))
        assert add_placeholder_node(family, "cousinOnceRemoved") is None
        assert (len(family.nodes), len(family.edges)) == before
        assert "Unknown relation" in caplog.text

    def test_missing_anchor(self, family, caplog):
        assert add_placeholder_node(family, "niece") is None
        assert "requires anchor_id" in caplog.text

    def test_unknown_anchor(self, family):
        before = len(family.nodes)
        assert add_placeholder_node(family, "halfSister", "nobody") is None
        assert len(family.nodes) == before

    def test_unknown_second_parent(self, family):
        before = len(family.nodes)
        assert add_placeholder_node(family, "halfSister", "mother", "nobody") is None
        assert len(family.nodes) == before

    def test_son_without_ego(self, graph):
        assert add_placeholder_node(graph, "son") is None
        assert graph.nodes == {}
