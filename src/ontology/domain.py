"""
Domain models for the ontology module.

These models are the typed identifiers and typed edges shared by the
knowledge base, the graph view and the query layer.
"""

from dataclasses import dataclass, field
from enum import Enum


class EntityKind(str, Enum):
    """Kinds of ontology entities that can appear in the graph."""
    CLASS = "class"
    OBJECT_PROPERTY = "object_property"
    INDIVIDUAL = "individual"


class RelationKind(str, Enum):
    """Kinds of edges materialized between entities."""
    SUB_CLASS_OF = "subClassOf"
    INSTANCE_OF = "instanceOf"
    TYPE = "type"
    OBJECT_PROPERTY = "objectProperty"


def short_form(iri: str) -> str:
    """Human-readable short name of an IRI (fragment, else last path segment)."""
    if "#" in iri:
        return iri[iri.index("#") + 1:]
    return iri.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class EntityRef:
    """Reference to one ontology entity.

    Identity is the IRI (``id``); ``kind`` and ``short_name`` are carried
    along for display and matching but do not take part in equality.
    """

    id: str
    kind: EntityKind = field(compare=False)
    short_name: str = field(compare=False)

    @classmethod
    def from_iri(cls, iri: str, kind: EntityKind) -> "EntityRef":
        return cls(id=str(iri), kind=kind, short_name=short_form(str(iri)))

    @property
    def is_class(self) -> bool:
        return self.kind == EntityKind.CLASS

    @property
    def is_individual(self) -> bool:
        return self.kind == EntityKind.INDIVIDUAL

    @property
    def is_property(self) -> bool:
        return self.kind == EntityKind.OBJECT_PROPERTY

    def matches(self, name: str) -> bool:
        """Case-insensitive exact match on the short name."""
        return self.short_name.lower() == name.strip().lower()

    def contains(self, pattern: str) -> bool:
        """Case-insensitive substring match on the short name."""
        return pattern.strip().lower() in self.short_name.lower()

    def __str__(self) -> str:
        return self.short_name


@dataclass(frozen=True)
class Relationship:
    """Directed, typed edge between two entities.

    For ``RelationKind.OBJECT_PROPERTY`` edges ``property_name`` holds the
    property's short name; it is empty for the structural kinds.
    """

    source: EntityRef
    target: EntityRef
    kind: RelationKind
    property_name: str = ""

    @classmethod
    def sub_class_of(cls, subclass: EntityRef, superclass: EntityRef) -> "Relationship":
        return cls(subclass, superclass, RelationKind.SUB_CLASS_OF)

    @classmethod
    def instance_of(cls, individual: EntityRef, class_ref: EntityRef) -> "Relationship":
        return cls(individual, class_ref, RelationKind.INSTANCE_OF)

    @classmethod
    def type_of(cls, individual: EntityRef, class_ref: EntityRef) -> "Relationship":
        return cls(individual, class_ref, RelationKind.TYPE)

    @classmethod
    def object_property(cls, source: EntityRef, target: EntityRef, name: str) -> "Relationship":
        return cls(source, target, RelationKind.OBJECT_PROPERTY, name)

    @property
    def label(self) -> str:
        """Edge label shown by renderers; structural edges stay unlabeled."""
        if self.kind == RelationKind.OBJECT_PROPERTY:
            return self.property_name
        if self.kind == RelationKind.TYPE:
            return "type"
        return ""

    def __str__(self) -> str:
        name = self.property_name if self.kind == RelationKind.OBJECT_PROPERTY else self.kind.value
        return f"{self.source.short_name} --{name}-> {self.target.short_name}"


@dataclass
class OntologyStats:
    """Statistics about the loaded ontology."""

    total_classes: int
    total_object_properties: int
    total_individuals: int
    total_triples: int
    root_classes: int
