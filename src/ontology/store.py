"""
In-memory RDF store exposing an ontology as a read-only knowledge base.

The store wraps an rdflib ``Graph`` and answers the structural questions the
graph view and the query executor ask: class hierarchy, class membership,
object and data property assertions. Results are sorted by short name so
views and reports come out in a stable order.
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from rdflib import BNode, Graph, Literal, Namespace, RDF, RDFS, OWL, URIRef
from rdflib.term import Node

from .domain import EntityKind, EntityRef, OntologyStats, short_form
from .knowledge_base import KnowledgeBase

logger = logging.getLogger(__name__)

SKOS = Namespace("http://www.w3.org/2004/02/skos/core#")
XSD = Namespace("http://www.w3.org/2001/XMLSchema#")

# Predicates whose literal values are annotations, not data property assertions
_ANNOTATION_NAMESPACES = (str(RDF), str(RDFS), str(OWL), str(SKOS))


def _sorted(refs) -> List[EntityRef]:
    return sorted(set(refs), key=lambda ref: (ref.short_name.lower(), ref.id))


class OntologyStore(KnowledgeBase):
    """Knowledge base over an in-memory rdflib graph."""

    def __init__(self, graph: Optional[Graph] = None):
        self.graph = graph if graph is not None else Graph()
        self._init_namespaces()

    @classmethod
    def from_file(cls, path: Union[str, Path], fmt: Optional[str] = None) -> "OntologyStore":
        """Load an ontology document; rdflib guesses the format when ``fmt`` is None."""
        graph = Graph()
        graph.parse(str(path), format=fmt)
        logger.info(f"Loaded {len(graph)} triples from {path}")
        return cls(graph)

    @classmethod
    def from_data(cls, data: str, fmt: str = "turtle") -> "OntologyStore":
        graph = Graph()
        graph.parse(data=data, format=fmt)
        return cls(graph)

    def _init_namespaces(self):
        self.graph.bind("owl", OWL)
        self.graph.bind("rdfs", RDFS)
        self.graph.bind("skos", SKOS)
        self.graph.bind("xsd", XSD)

    # ------------------------------------------------------------------
    # Term classification
    # ------------------------------------------------------------------

    def _is_class(self, term: Node) -> bool:
        if not isinstance(term, URIRef) or term in (OWL.Thing, OWL.Nothing):
            return False
        g = self.graph
        return ((term, RDF.type, OWL.Class) in g
                or (term, RDF.type, RDFS.Class) in g
                or (term, RDFS.subClassOf, None) in g
                or (None, RDFS.subClassOf, term) in g)

    def _is_object_property(self, term: Node) -> bool:
        return isinstance(term, URIRef) and (term, RDF.type, OWL.ObjectProperty) in self.graph

    def _is_datatype_property(self, term: Node) -> bool:
        return isinstance(term, URIRef) and (term, RDF.type, OWL.DatatypeProperty) in self.graph

    def _is_individual(self, term: Node) -> bool:
        if not isinstance(term, URIRef) or self._is_class(term) or self._is_object_property(term):
            return False
        if (term, RDF.type, OWL.NamedIndividual) in self.graph:
            return True
        if any(self._is_class(t) for t in self.graph.objects(term, RDF.type)):
            return True
        # Targets of object property assertions are individuals even when undeclared
        return any(self._is_object_property(p) for _, p in self.graph.subject_predicates(term))

    def _class_terms(self) -> Set[URIRef]:
        g = self.graph
        candidates = set(g.subjects(RDF.type, OWL.Class)) | set(g.subjects(RDF.type, RDFS.Class))
        for sub, sup in g.subject_objects(RDFS.subClassOf):
            candidates.add(sub)
            candidates.add(sup)
        return {t for t in candidates if isinstance(t, URIRef) and t not in (OWL.Thing, OWL.Nothing)}

    def _class_ref(self, term: URIRef) -> EntityRef:
        return EntityRef.from_iri(str(term), EntityKind.CLASS)

    def _individual_ref(self, term: URIRef) -> EntityRef:
        return EntityRef.from_iri(str(term), EntityKind.INDIVIDUAL)

    def _property_ref(self, term: URIRef) -> EntityRef:
        return EntityRef.from_iri(str(term), EntityKind.OBJECT_PROPERTY)

    # ------------------------------------------------------------------
    # KnowledgeBase
    # ------------------------------------------------------------------

    def title(self) -> str:
        for ontology_iri in self.graph.subjects(RDF.type, OWL.Ontology):
            if isinstance(ontology_iri, URIRef):
                return short_form(str(ontology_iri)) or str(ontology_iri)
        return "Anonymous Ontology"

    def list_root_classes(self) -> List[EntityRef]:
        roots = []
        for term in self._class_terms():
            parents = [p for p in self.graph.objects(term, RDFS.subClassOf)
                       if isinstance(p, URIRef) and p != OWL.Thing]
            if not parents:
                roots.append(self._class_ref(term))
        return _sorted(roots)

    def direct_subclasses(self, class_ref: EntityRef) -> List[EntityRef]:
        subclasses = [self._class_ref(s) for s in self.graph.subjects(RDFS.subClassOf, URIRef(class_ref.id))
                      if self._is_class(s)]
        return _sorted(subclasses)

    def direct_instances(self, class_ref: EntityRef) -> List[EntityRef]:
        instances = [self._individual_ref(s) for s in self.graph.subjects(RDF.type, URIRef(class_ref.id))
                     if self._is_individual(s)]
        return _sorted(instances)

    def types_of(self, individual: EntityRef) -> List[EntityRef]:
        types = [self._class_ref(t) for t in self.graph.objects(URIRef(individual.id), RDF.type)
                 if self._is_class(t)]
        return _sorted(types)

    def object_property_assertions(self, individual: EntityRef) -> List[Tuple[EntityRef, EntityRef]]:
        assertions = set()
        for predicate, obj in self.graph.predicate_objects(URIRef(individual.id)):
            if self._is_object_property(predicate) and isinstance(obj, URIRef):
                assertions.add((self._property_ref(predicate), self._individual_ref(obj)))
        return sorted(assertions, key=lambda pair: (pair[0].short_name.lower(), pair[1].short_name.lower()))

    def data_property_assertions(self, individual: EntityRef) -> List[Tuple[str, str]]:
        assertions = set()
        for predicate, obj in self.graph.predicate_objects(URIRef(individual.id)):
            if not isinstance(obj, Literal):
                continue
            if self._is_datatype_property(predicate) or not str(predicate).startswith(_ANNOTATION_NAMESPACES):
                assertions.add((short_form(str(predicate)), str(obj)))
        return sorted(assertions)

    def all_classes(self) -> List[EntityRef]:
        return _sorted(self._class_ref(t) for t in self._class_terms())

    def all_object_properties(self) -> List[EntityRef]:
        return _sorted(self._property_ref(t) for t in self.graph.subjects(RDF.type, OWL.ObjectProperty)
                       if isinstance(t, URIRef))

    def all_individuals(self) -> List[EntityRef]:
        candidates = set(self.graph.subjects(RDF.type, None))
        for _, predicate, obj in self.graph.triples((None, None, None)):
            if isinstance(obj, URIRef) and self._is_object_property(predicate):
                candidates.add(obj)
        return _sorted(self._individual_ref(t) for t in candidates
                       if not isinstance(t, BNode) and self._is_individual(t))

    def contains(self, entity: EntityRef) -> bool:
        term = URIRef(entity.id)
        if entity.is_class:
            return self._is_class(term)
        if entity.is_individual:
            return self._is_individual(term)
        return self._is_object_property(term)

    def serialize(self, fmt: str = "turtle") -> str:
        data = self.graph.serialize(format=fmt)
        return data.decode("utf-8") if isinstance(data, bytes) else data

    def get_stats(self) -> OntologyStats:
        """Basic statistics about the ontology."""
        return OntologyStats(
            total_classes=len(self._class_terms()),
            total_object_properties=len(self.all_object_properties()),
            total_individuals=len(self.all_individuals()),
            total_triples=len(self.graph),
            root_classes=len(self.list_root_classes()),
        )
