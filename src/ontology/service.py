"""
High-level ontology service providing name resolution and pattern search.

This is the only public interface into the ontology module for the query
layer. Lookups by name follow two rules:

    exact lookups    case-insensitive exact match on the short name
    pattern lookups  case-insensitive substring match; an empty pattern matches all

A name that resolves to nothing is never an error here: lookups return
``None`` and searches return an empty list.
"""

import logging
from typing import Any, Dict, List, Optional

from .domain import EntityRef
from .knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)


class OntologyService:
    """Name-based access to a knowledge base."""

    def __init__(self, knowledge_base: KnowledgeBase):
        """Initialize the ontology service.

        Args:
            knowledge_base: Read-only knowledge base to resolve names against.
        """
        self.knowledge_base = knowledge_base

    @staticmethod
    def _first_match(candidates: List[EntityRef], name: str) -> Optional[EntityRef]:
        if not name or not name.strip():
            return None
        for candidate in candidates:
            if candidate.matches(name):
                return candidate
        return None

    def find_class(self, name: str) -> Optional[EntityRef]:
        return self._first_match(self.knowledge_base.all_classes(), name)

    def find_individual(self, name: str) -> Optional[EntityRef]:
        return self._first_match(self.knowledge_base.all_individuals(), name)

    def find_object_property(self, name: str) -> Optional[EntityRef]:
        return self._first_match(self.knowledge_base.all_object_properties(), name)

    def resolve_entity(self, name: str) -> Optional[EntityRef]:
        """Resolve a name in the fixed order individuals, classes, object properties.

        Args:
            name: Short name to look up (case-insensitive, exact).

        Returns:
            The first matching entity, or None if nothing matches.
        """
        if not name or not name.strip():
            logger.warning("resolve_entity called with an empty name")
            return None

        lookups = (
            ("INDIVIDUAL", self.find_individual),
            ("CLASS", self.find_class),
            ("PROPERTY", self.find_object_property),
        )
        for label, lookup in lookups:
            entity = lookup(name)
            if entity is not None:
                logger.info(f"Found '{name}' as {label}: {entity.short_name}")
                return entity

        logger.warning(f"Entity '{name}' not found in ontology")
        return None

    def search_classes(self, pattern: str) -> List[EntityRef]:
        return [c for c in self.knowledge_base.all_classes() if c.contains(pattern or "")]

    def search_properties(self, pattern: str) -> List[EntityRef]:
        return [p for p in self.knowledge_base.all_object_properties() if p.contains(pattern or "")]

    def get_ontology_context(self, max_classes: int = 30, max_properties: int = 20,
                             max_individuals: int = 20) -> Dict[str, Any]:
        """Bounded overview of the ontology for prompt construction.

        Returns:
            Dict containing:
            - title: Ontology short name
            - classes / object_properties / individuals: Capped lists of short names
            - truncated: True if any list was cut
        """
        classes = self.knowledge_base.all_classes()
        properties = self.knowledge_base.all_object_properties()
        individuals = self.knowledge_base.all_individuals()

        return {
            "title": self.knowledge_base.title(),
            "classes": [c.short_name for c in classes[:max_classes]],
            "object_properties": [p.short_name for p in properties[:max_properties]],
            "individuals": [i.short_name for i in individuals[:max_individuals]],
            "truncated": (len(classes) > max_classes
                          or len(properties) > max_properties
                          or len(individuals) > max_individuals),
        }
