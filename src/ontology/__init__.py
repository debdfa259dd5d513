"""
Ontology access module.

This module exposes an ontology as a read-only knowledge base of classes,
object properties and individuals, plus name-based lookups over it.

Public Interface:
- OntologyService: Name resolution and pattern search
- OntologyStore: rdflib-backed knowledge base
- KnowledgeBase: Abstract accessor consumed by the graph and query layers
- Domain models: EntityRef, Relationship, EntityKind, RelationKind
"""

from .domain import EntityKind, EntityRef, OntologyStats, RelationKind, Relationship
from .knowledge_base import KnowledgeBase
from .service import OntologyService
from .store import OntologyStore

__all__ = [
    "EntityKind",
    "EntityRef",
    "KnowledgeBase",
    "OntologyService",
    "OntologyStats",
    "OntologyStore",
    "RelationKind",
    "Relationship",
]
