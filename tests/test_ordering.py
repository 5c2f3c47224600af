"""Tests for left-to-right ordering of layers."""

from family_tree import FamilyGraph
from family_tree.layering import assign_layers
from family_tree.ordering import couple_sides, find_joiners, order_layers
from family_tree.relations import add_placeholder_node


def ordered(graph):
    return order_layers(graph, assign_layers(graph))


class TestOrderLayers:
    """Tests for order_layers."""

    def test_scaffold_order(self, family):
        rows = ordered(family)

        assert rows[2] == ["ego"]
        assert rows[1] == ["mother", "father"]
        assert rows[0] == [
            "maternal-grandmother",
            "maternal-grandfather",
            "paternal-grandmother",
            "paternal-grandfather",
        ]

    def test_every_node_is_ordered_once(self, family):
        add_placeholder_node(family, "brother")
        aunt = add_placeholder_node(family, "aunt", "father")
        add_placeholder_node(family, "firstCousinMale", aunt)
        add_placeholder_node(family, "halfSister", "mother")
        add_placeholder_node(family, "additionalPartner", "father")

        rows = ordered(family)
        placed = [node_id for row in rows.values() for node_id in row]
        assert sorted(placed) == sorted(family.nodes)

    def test_empty_layers(self, family):
        assert order_layers(family, {}) == {}

    def test_couples_follow_their_children(self):
        # the couple whose child is left below stays left above
        graph = FamilyGraph()
        graph.add_node("You", is_ego=True, node_id="ego", sex="female")
        graph.add_node("Partner", node_id="partner", sex="male")
        for node_id, sex in (("pm", "female"), ("pf", "male"), ("em", "female"), ("ef", "male")):
            graph.add_node(node_id, node_id=node_id, sex=sex)
        graph.add_edge("partner", "ego", "partner")
        graph.add_edge("pf", "pm", "partner")
        graph.add_edge("ef", "em", "partner")
        for parent in ("pm", "pf"):
            graph.add_edge(parent, "partner", "parent")
        for parent in ("em", "ef"):
            graph.add_edge(parent, "ego", "parent")

        rows = ordered(graph)

        assert rows[1] == ["ego", "partner"]
        assert rows[0] == ["em", "ef", "pm", "pf"]


class TestCoupleSides:
    """Tests for which partner goes left."""

    def test_ego_is_left(self, ego_graph):
        partner = ego_graph.add_node("Partner", sex="female")
        ego_graph.update_node("ego", sex="male")
        assert couple_sides(ego_graph, partner, "ego") == ("ego", partner)

    def test_woman_is_left(self, family):
        assert couple_sides(family, "father", "mother") == ("mother", "father")
        assert couple_sides(family, "mother", "father") == ("mother", "father")


class TestJoiners:
    """Tests for exes and additional partners."""

    def test_father_additional_partner_on_the_right(self, family):
        other = add_placeholder_node(family, "additionalPartner", "father")
        assert ordered(family)[1] == ["mother", "father", other]

    def test_mother_additional_partner_on_the_left(self, family):
        other = add_placeholder_node(family, "additionalPartner", "mother")
        assert ordered(family)[1] == [other, "mother", "father"]

    def test_second_additional_partner_goes_further_out(self, family):
        first = add_placeholder_node(family, "additionalPartner", "father")
        second = add_placeholder_node(family, "additionalPartner", "father")
        assert ordered(family)[1] == ["mother", "father", first, second]

    def test_male_ex_left_female_ex_right(self, family):
        male_ex = family.add_node("mother's ex", sex="male")
        family.add_edge(male_ex, "mother", "ex-partner")
        family.update_node("ego", sex="male")
        partner = family.add_node("Partner", sex="female")
        family.add_edge("ego", partner, "partner")
        female_ex = family.add_node("ego's ex", sex="female")
        family.add_edge("ego", female_ex, "ex-partner")

        rows = ordered(family)

        assert rows[1] == [male_ex, "mother", "father"]
        assert rows[2] == ["ego", partner, female_ex]

    def test_joiners_exclude_couples_and_children(self, family):
        other = add_placeholder_node(family, "additionalPartner", "father")
        joiners = find_joiners(family, assign_layers(family))
        assert joiners == {other}

    def test_mutual_exes_anchor_on_the_first(self):
        graph = FamilyGraph.from_mappings(
            {
                "ego": {"label": "You", "isEgo": True},
                "a": {"label": "A", "sex": "male"},
                "b": {"label": "B", "sex": "female"},
            },
            {
                "e1": {"source": "a", "target": "ego", "relationship": "parent"},
                "e2": {"source": "a", "target": "b", "relationship": "ex-partner"},
            },
        )
        layers = assign_layers(graph)
        assert find_joiners(graph, layers) == {"b"}
        assert order_layers(graph, layers)[0] == ["a", "b"]


class TestSplicedRelatives:
    """Tests for half siblings and cousins."""

    def test_maternal_half_sibling_left_of_ego(self, family):
        add_placeholder_node(family, "additionalPartner", "mother")
        half = add_placeholder_node(family, "halfSister", "mother")
        assert ordered(family)[2] == [half, "ego"]

    def test_paternal_half_sibling_right_of_full_siblings(self, family):
        brother = add_placeholder_node(family, "brother")
        half = add_placeholder_node(family, "halfBrother", "father")
        assert ordered(family)[2] == ["ego", brother, half]

    def test_maternal_cousin_left(self, family):
        aunt = add_placeholder_node(family, "aunt", "mother")
        cousin = add_placeholder_node(family, "firstCousinFemale", aunt)

        rows = ordered(family)

        assert rows[1] == [aunt, family.partner(aunt), "mother", "father"]
        assert rows[2] == [cousin, "ego"]

    def test_paternal_cousin_right(self, family):
        uncle = add_placeholder_node(family, "uncle", "father")
        cousin = add_placeholder_node(family, "firstCousinMale", uncle)

        rows = ordered(family)

        assert rows[1] == ["mother", "father", family.partner(uncle), uncle]
        assert rows[2] == ["ego", cousin]

    def test_cousin_partner_travels_along(self, family):
        uncle = add_placeholder_node(family, "uncle", "father")
        cousin = add_placeholder_node(family, "firstCousinMale", uncle)
        partner = family.add_node("cousin's partner", sex="female")
        family.add_edge(cousin, partner, "partner")

        assert ordered(family)[2] == ["ego", partner, cousin]
