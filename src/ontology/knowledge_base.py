"""
Read-only knowledge base interface consumed by the graph view and the query layer.

Implementations must return a consistent snapshot for the duration of a
single graph recompute; none of the methods mutate the underlying ontology.
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

from .domain import EntityRef


class KnowledgeBase(ABC):
    """Abstract accessor over classes, object properties and individuals."""

    @abstractmethod
    def title(self) -> str:
        """Short, human-readable name of the ontology."""
        pass

    @abstractmethod
    def list_root_classes(self) -> List[EntityRef]:
        """Classes whose only named superclass is the universal class (or none)."""
        pass

    @abstractmethod
    def direct_subclasses(self, class_ref: EntityRef) -> List[EntityRef]:
        """Named direct subclasses, never the universal or empty class."""
        pass

    @abstractmethod
    def direct_instances(self, class_ref: EntityRef) -> List[EntityRef]:
        """Individuals asserted to be members of the class (not via subclasses)."""
        pass

    @abstractmethod
    def types_of(self, individual: EntityRef) -> List[EntityRef]:
        """Named classes the individual is asserted to be a member of."""
        pass

    @abstractmethod
    def object_property_assertions(self, individual: EntityRef) -> List[Tuple[EntityRef, EntityRef]]:
        """(property, target individual) pairs asserted for the individual."""
        pass

    @abstractmethod
    def data_property_assertions(self, individual: EntityRef) -> List[Tuple[str, str]]:
        """(property short name, literal lexical form) pairs asserted for the individual."""
        pass

    @abstractmethod
    def all_classes(self) -> List[EntityRef]:
        pass

    @abstractmethod
    def all_object_properties(self) -> List[EntityRef]:
        pass

    @abstractmethod
    def all_individuals(self) -> List[EntityRef]:
        pass

    @abstractmethod
    def serialize(self, fmt: str = "turtle") -> str:
        """Textual serialization of the whole ontology."""
        pass

    def contains(self, entity: EntityRef) -> bool:
        """True if the knowledge base knows the entity under its kind."""
        if entity.is_class:
            candidates = self.all_classes()
        elif entity.is_individual:
            candidates = self.all_individuals()
        else:
            candidates = self.all_object_properties()
        return entity in candidates

    def has_children(self, entity: EntityRef) -> bool:
        """Whether expanding the entity would materialize anything."""
        if entity.is_class:
            return bool(self.direct_subclasses(entity)) or bool(self.direct_instances(entity))
        if entity.is_individual:
            return bool(self.object_property_assertions(entity))
        return False
