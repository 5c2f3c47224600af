"""Data classes for family tree entities and layout configuration."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
import re


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def opposite(self) -> "Sex":
        return Sex.FEMALE if self is Sex.MALE else Sex.MALE


class RelationshipType(str, Enum):
    PARENT = "parent"  # source is the parent, target the child
    PARTNER = "partner"
    EX_PARTNER = "ex-partner"


class Relation(str, Enum):
    """Symbolic relatives that can be added relative to ego or an anchor node."""

    BROTHER = "brother"
    SISTER = "sister"
    SON = "son"
    DAUGHTER = "daughter"
    NIECE = "niece"
    NEPHEW = "nephew"
    FIRST_COUSIN_MALE = "firstCousinMale"
    FIRST_COUSIN_FEMALE = "firstCousinFemale"
    GRANDSON = "grandson"
    GRANDDAUGHTER = "granddaughter"
    ADDITIONAL_PARTNER = "additionalPartner"
    EX_PARTNER = "exPartner"
    HALF_SISTER = "halfSister"
    HALF_BROTHER = "halfBrother"
    AUNT = "aunt"
    UNCLE = "uncle"
    HALF_AUNT = "halfAunt"
    HALF_UNCLE = "halfUncle"

    @classmethod
    def parse(cls, value: "Relation | str") -> "Relation | None":
        """
        Resolve a relation keyword.

        Matching ignores case and separators, so "halfSister", "half-sister"
        and "HALF_SISTER" all resolve to Relation.HALF_SISTER.
        Returns None for unknown keywords.
        """
        if isinstance(value, Relation):
            return value
        key = re.sub(r"[\s_-]", "", str(value)).lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None

    @property
    def sex(self) -> Sex | None:
        """Sex implied by the relation; None when it depends on the anchor."""
        return _RELATION_SEX.get(self)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. 'half sister' or 'first cousin'."""
        words = re.sub(r"([a-z])([A-Z])", r"\1 \2", self.value).lower()
        return re.sub(r"\s+(male|female)$", "", words)


_RELATION_SEX: dict[Relation, Sex] = {
    Relation.BROTHER: Sex.MALE,
    Relation.SON: Sex.MALE,
    Relation.NEPHEW: Sex.MALE,
    Relation.FIRST_COUSIN_MALE: Sex.MALE,
    Relation.GRANDSON: Sex.MALE,
    Relation.HALF_BROTHER: Sex.MALE,
    Relation.UNCLE: Sex.MALE,
    Relation.HALF_UNCLE: Sex.MALE,
    Relation.SISTER: Sex.FEMALE,
    Relation.DAUGHTER: Sex.FEMALE,
    Relation.NIECE: Sex.FEMALE,
    Relation.FIRST_COUSIN_FEMALE: Sex.FEMALE,
    Relation.GRANDDAUGHTER: Sex.FEMALE,
    Relation.HALF_SISTER: Sex.FEMALE,
    Relation.AUNT: Sex.FEMALE,
    Relation.HALF_AUNT: Sex.FEMALE,
}


def parse_sex(value: "Sex | str | None") -> Sex | None:
    if value is None or value == "":
        return None
    if isinstance(value, Sex):
        return value
    try:
        return Sex(str(value).lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass
class Person:
    id: str
    label: str
    sex: Sex | None = None
    is_ego: bool = False
    read_only: bool = False
    position: Position | None = None  # set by layout, never part of the graph state

    @classmethod
    def from_attrs(cls, node_id: str, attrs: "Person | Mapping") -> "Person":
        """Build a Person from a Person or a dict using snake_case or camelCase keys."""
        if isinstance(attrs, Person):
            return cls(
                id=node_id,
                label=attrs.label,
                sex=attrs.sex,
                is_ego=attrs.is_ego,
                read_only=attrs.read_only,
            )
        return cls(
            id=node_id,
            label=str(attrs.get("label", node_id)),
            sex=parse_sex(attrs.get("sex")),
            is_ego=bool(attrs.get("is_ego", attrs.get("isEgo", False))),
            read_only=bool(attrs.get("read_only", attrs.get("readOnly", False))),
        )


@dataclass(frozen=True)
class Relationship:
    id: str
    source: str
    target: str
    relationship: RelationshipType

    @classmethod
    def from_attrs(cls, edge_id: str, attrs: "Relationship | Mapping") -> "Relationship":
        if isinstance(attrs, Relationship):
            return cls(edge_id, attrs.source, attrs.target, attrs.relationship)
        return cls(
            id=edge_id,
            source=str(attrs["source"]),
            target=str(attrs["target"]),
            relationship=RelationshipType(attrs["relationship"]),
        )


@dataclass(frozen=True)
class Spacing:
    """Pixel distances used by the layout."""

    siblings: float = 100
    partners: float = 80
    generations: float = 100

    def __post_init__(self):
        for name in ("siblings", "partners", "generations"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Spacing.{name} must be positive")

    @classmethod
    def from_mapping(cls, spacing: "Spacing | Mapping | None") -> "Spacing":
        if spacing is None:
            return DEFAULT_SPACING
        if isinstance(spacing, Spacing):
            return spacing
        unknown = set(spacing) - {"siblings", "partners", "generations"}
        if unknown:
            raise ValueError(f"Unknown spacing keys: {sorted(unknown)}")
        return cls(**spacing)


DEFAULT_SPACING = Spacing()
