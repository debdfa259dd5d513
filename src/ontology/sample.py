"""
Small bundled ontology used by the CLI when no file is given and by the tests.

It deliberately contains a diamond (``WarriorKing`` is a subclass of both
``Warrior`` and ``King``) and an individual asserted to be a member of two
classes (``Karna``), the two shapes that make collapse non-trivial.
"""

from .store import OntologyStore

SAMPLE_NAMESPACE = "http://example.org/mahabharata#"

SAMPLE_ONTOLOGY_TTL = """
@prefix : <http://example.org/mahabharata#> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

<http://example.org/mahabharata> a owl:Ontology .

:Person a owl:Class .
:Warrior a owl:Class ; rdfs:subClassOf :Person .
:King a owl:Class ; rdfs:subClassOf :Person .
:WarriorKing a owl:Class ; rdfs:subClassOf :Warrior, :King .
:Weapon a owl:Class ; rdfs:subClassOf owl:Thing .
:Bow a owl:Class ; rdfs:subClassOf :Weapon .
:Kingdom a owl:Class .

:fights a owl:ObjectProperty .
:wields a owl:ObjectProperty .
:rules a owl:ObjectProperty .
:brotherOf a owl:ObjectProperty .

:epithet a owl:DatatypeProperty .

:Arjuna a owl:NamedIndividual, :Warrior ;
    rdfs:label "Arjuna" ;
    :fights :Karna, :Duryodhana ;
    :wields :Gandiva ;
    :brotherOf :Bhima ;
    :epithet "Partha" .
:Bhima a owl:NamedIndividual, :Warrior ;
    :fights :Duryodhana ;
    :brotherOf :Arjuna .
:Karna a owl:NamedIndividual, :Warrior, :King ;
    :fights :Arjuna ;
    :epithet "Radheya" .
:Yudhishthira a owl:NamedIndividual, :King ;
    :rules :Hastinapura ;
    :brotherOf :Arjuna, :Bhima .
:Duryodhana a owl:NamedIndividual, :WarriorKing ;
    :rules :Hastinapura ;
    :fights :Bhima .
:Gandiva a owl:NamedIndividual, :Bow .
:Hastinapura a owl:NamedIndividual, :Kingdom .
"""


def load_sample_store() -> OntologyStore:
    """Fresh store holding the bundled sample ontology."""
    return OntologyStore.from_data(SAMPLE_ONTOLOGY_TTL, fmt="turtle")
