"""
Integration test for the ontology service.

HOW TO RUN:
The virtual environment .venv should be activated before running the tests.

From the src directory, run:
    python -m ontology.test_service

Or from the project root:
    cd src; python -m ontology.test_service

The test uses mock implementations to avoid external dependencies.
"""

from .domain import EntityKind, EntityRef
from .knowledge_base import KnowledgeBase
from .sample import load_sample_store
from .service import OntologyService

NS = "http://example.org/test#"


class MockKnowledgeBase(KnowledgeBase):
    """Mock knowledge base with a name shared by a class and an individual."""

    def __init__(self, n_classes=3, n_properties=2, n_individuals=2):
        self.classes = [EntityRef.from_iri(f"{NS}Class{i:02d}", EntityKind.CLASS) for i in range(n_classes)]
        self.properties = [EntityRef.from_iri(f"{NS}prop{i:02d}", EntityKind.OBJECT_PROPERTY)
                           for i in range(n_properties)]
        self.individuals = [EntityRef.from_iri(f"{NS}ind{i:02d}", EntityKind.INDIVIDUAL)
                            for i in range(n_individuals)]
        # "Mercury" is both a class (in another namespace) and an individual
        self.classes.append(EntityRef.from_iri("http://example.org/other#Mercury", EntityKind.CLASS))
        self.individuals.append(EntityRef.from_iri(f"{NS}Mercury", EntityKind.INDIVIDUAL))

    def title(self):
        return "test"

    def list_root_classes(self):
        return list(self.classes)

    def direct_subclasses(self, class_ref):
        return []

    def direct_instances(self, class_ref):
        return []

    def types_of(self, individual):
        return []

    def object_property_assertions(self, individual):
        return []

    def data_property_assertions(self, individual):
        return []

    def all_classes(self):
        return list(self.classes)

    def all_object_properties(self):
        return list(self.properties)

    def all_individuals(self):
        return list(self.individuals)

    def serialize(self, fmt="turtle"):
        return ""


def test_service_initialization():
    """Test OntologyService initialization."""
    print("Testing OntologyService initialization...")

    kb = MockKnowledgeBase()
    service = OntologyService(kb)
    assert service.knowledge_base is kb

    print("✓ OntologyService initialization working correctly")


def test_find_by_kind():
    """Test case-insensitive exact lookups per kind."""
    print("Testing find_class / find_individual / find_object_property...")

    service = OntologyService(load_sample_store())

    person = service.find_class("person")
    assert person is not None and person.short_name == "Person"
    assert service.find_class("Pers") is None
    assert service.find_class("") is None

    karna = service.find_individual("KARNA")
    assert karna is not None and karna.is_individual

    fights = service.find_object_property("Fights")
    assert fights is not None and fights.is_property

    print("✓ lookups by kind working correctly")


def test_resolve_entity_order():
    """Test that individuals win over classes, classes over properties."""
    print("Testing resolve_entity order...")

    service = OntologyService(MockKnowledgeBase())

    mercury = service.resolve_entity("mercury")
    assert mercury is not None
    assert mercury.kind == EntityKind.INDIVIDUAL

    cls = service.resolve_entity("class01")
    assert cls is not None and cls.is_class

    prop = service.resolve_entity("PROP00")
    assert prop is not None and prop.is_property

    print("✓ resolve_entity order working correctly")


def test_resolve_entity_miss():
    """Test that unknown or empty names resolve to None."""
    print("Testing resolve_entity misses...")

    service = OntologyService(load_sample_store())

    assert service.resolve_entity("Dragon") is None
    assert service.resolve_entity("") is None
    assert service.resolve_entity("   ") is None

    print("✓ resolve_entity misses working correctly")


def test_search_classes_and_properties():
    """Test substring search; empty pattern matches everything."""
    print("Testing search_classes / search_properties...")

    service = OntologyService(load_sample_store())

    assert [c.short_name for c in service.search_classes("king")] == ["King", "Kingdom", "WarriorKing"]
    assert len(service.search_classes("")) == 7
    assert service.search_classes("dragon") == []

    assert [p.short_name for p in service.search_properties("o")] == ["brotherOf"]
    assert len(service.search_properties("")) == 4

    print("✓ pattern search working correctly")


def test_ontology_context():
    """Test the bounded prompt context."""
    print("Testing get_ontology_context...")

    service = OntologyService(load_sample_store())
    context = service.get_ontology_context()

    assert context["title"] == "mahabharata"
    assert "Warrior" in context["classes"]
    assert "fights" in context["object_properties"]
    assert "Arjuna" in context["individuals"]
    assert context["truncated"] is False

    print("✓ get_ontology_context working correctly")


def test_ontology_context_caps():
    """Test that the context lists are capped."""
    print("Testing get_ontology_context caps...")

    service = OntologyService(MockKnowledgeBase(n_classes=40, n_properties=25, n_individuals=30))
    context = service.get_ontology_context(max_classes=30, max_properties=20, max_individuals=20)

    assert len(context["classes"]) == 30
    assert len(context["object_properties"]) == 20
    assert len(context["individuals"]) == 20
    assert context["truncated"] is True

    print("✓ get_ontology_context caps working correctly")


def run_all_tests():
    """Run all service tests."""
    print("=" * 50)
    print("Running Ontology Service Tests")
    print("=" * 50)

    test_functions = [
        test_service_initialization,
        test_find_by_kind,
        test_resolve_entity_order,
        test_resolve_entity_miss,
        test_search_classes_and_properties,
        test_ontology_context,
        test_ontology_context_caps,
    ]

    passed = 0
    failed = 0

    for test_func in test_functions:
        try:
            test_func()
            passed += 1
        except Exception as e:
            print(f"✗ {test_func.__name__} FAILED: {e}")
            failed += 1

    print("=" * 50)
    print(f"Test Results: {passed} passed, {failed} failed")
    print("=" * 50)

    return failed == 0


def main():
    """Main function to run the tests."""
    success = run_all_tests()
    if success:
        print("All tests passed!")
        return 0
    else:
        print("Some tests failed!")
        return 1


if __name__ == "__main__":
    exit(main())
