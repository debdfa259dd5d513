"""
Unit test for the ontology domain models.

HOW TO RUN:
The virtual environment .venv should be activated before running the tests.

From the src directory, run:
    python -m ontology.test_domain

Or from the project root:
    cd src; python -m ontology.test_domain
"""

from .domain import EntityKind, EntityRef, OntologyStats, RelationKind, Relationship, short_form

NS = "http://example.org/mahabharata#"


def test_short_form():
    """Test short names taken from fragments and path segments."""
    print("Testing short_form...")

    assert short_form(NS + "Warrior") == "Warrior"
    assert short_form("http://example.org/mahabharata") == "mahabharata"
    assert short_form("http://example.org/people/") == "people"

    print("✓ short_form test passed")


def test_entity_ref_identity():
    """Test that identity is the IRI only."""
    print("Testing EntityRef identity...")

    a = EntityRef.from_iri(NS + "Karna", EntityKind.INDIVIDUAL)
    b = EntityRef(id=NS + "Karna", kind=EntityKind.CLASS, short_name="something else")
    c = EntityRef.from_iri(NS + "Arjuna", EntityKind.INDIVIDUAL)

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2
    assert a.short_name == "Karna"
    assert str(a) == "Karna"

    print("✓ EntityRef identity test passed")


def test_entity_ref_kinds():
    """Test kind predicates."""
    print("Testing EntityRef kind predicates...")

    cls = EntityRef.from_iri(NS + "Warrior", EntityKind.CLASS)
    ind = EntityRef.from_iri(NS + "Bhima", EntityKind.INDIVIDUAL)
    prop = EntityRef.from_iri(NS + "fights", EntityKind.OBJECT_PROPERTY)

    assert cls.is_class and not cls.is_individual and not cls.is_property
    assert ind.is_individual and not ind.is_class
    assert prop.is_property and not prop.is_class

    print("✓ EntityRef kind predicates test passed")


def test_entity_ref_matching():
    """Test exact and substring name matching."""
    print("Testing EntityRef matching...")

    ref = EntityRef.from_iri(NS + "WarriorKing", EntityKind.CLASS)

    assert ref.matches("warriorking")
    assert ref.matches("  WarriorKing ")
    assert not ref.matches("Warrior")
    assert ref.contains("king")
    assert ref.contains("")
    assert not ref.contains("queen")

    print("✓ EntityRef matching test passed")


def test_relationship_constructors():
    """Test typed edge constructors and labels."""
    print("Testing Relationship constructors...")

    person = EntityRef.from_iri(NS + "Person", EntityKind.CLASS)
    warrior = EntityRef.from_iri(NS + "Warrior", EntityKind.CLASS)
    arjuna = EntityRef.from_iri(NS + "Arjuna", EntityKind.INDIVIDUAL)
    karna = EntityRef.from_iri(NS + "Karna", EntityKind.INDIVIDUAL)

    sub = Relationship.sub_class_of(warrior, person)
    assert sub.source == warrior and sub.target == person
    assert sub.kind == RelationKind.SUB_CLASS_OF
    assert sub.label == ""

    inst = Relationship.instance_of(arjuna, warrior)
    assert inst.kind == RelationKind.INSTANCE_OF

    typ = Relationship.type_of(arjuna, warrior)
    assert typ.kind == RelationKind.TYPE
    assert typ.label == "type"
    assert typ != inst

    fights = Relationship.object_property(arjuna, karna, "fights")
    assert fights.label == "fights"
    assert str(fights) == "Arjuna --fights-> Karna"

    print("✓ Relationship constructors test passed")


def test_relationship_equality():
    """Test that edges are value objects usable in sets."""
    print("Testing Relationship equality...")

    arjuna = EntityRef.from_iri(NS + "Arjuna", EntityKind.INDIVIDUAL)
    karna = EntityRef.from_iri(NS + "Karna", EntityKind.INDIVIDUAL)

    edges = {
        Relationship.object_property(arjuna, karna, "fights"),
        Relationship.object_property(arjuna, karna, "fights"),
        Relationship.object_property(arjuna, karna, "knows"),
    }
    assert len(edges) == 2

    print("✓ Relationship equality test passed")


def test_ontology_stats():
    """Test OntologyStats creation."""
    print("Testing OntologyStats...")

    stats = OntologyStats(total_classes=7, total_object_properties=4, total_individuals=7,
                          total_triples=60, root_classes=3)
    assert stats.total_classes == 7
    assert stats.root_classes == 3

    print("✓ OntologyStats test passed")


def run_all_tests():
    """Run all domain tests."""
    print("=" * 50)
    print("Running Ontology Domain Tests")
    print("=" * 50)

    test_functions = [
        test_short_form,
        test_entity_ref_identity,
        test_entity_ref_kinds,
        test_entity_ref_matching,
        test_relationship_constructors,
        test_relationship_equality,
        test_ontology_stats,
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
