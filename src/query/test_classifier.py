"""
Tests for query classification.

This module tests parsing of both response shapes (line-oriented and JSON),
the failure arm for unusable responses, and the prompt sent to the
completion service. The completion service is replaced by a fake.
"""

import pytest

from ontology.sample import load_sample_store
from ontology.service import OntologyService
from query.classifier import CLASSIFICATION_TEMPERATURE, QueryClassifier, parse_response
from query.completion import CompletionError
from query.domain import QueryKind


class FakeCompletion:
    """Completion service returning scripted responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def complete(self, system_prompt, user_prompt, temperature=0.7):
        self.calls.append((system_prompt, user_prompt, temperature))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def ontology_service():
    return OntologyService(load_sample_store())


class TestLineFormat:
    """QUERY_TYPE / TARGET responses."""

    def test_basic(self):
        result = parse_response("QUERY_TYPE: Instances\nTARGET: Person")
        assert result.ok
        assert result.intent.kind == QueryKind.INSTANCES
        assert result.intent.target == "Person"

    def test_prose_around_lines_is_ignored(self):
        response = ("Sure! Here is the analysis.\n"
                    "  QUERY_TYPE:   relationships  \n"
                    "TARGET:  Arjuna \n"
                    "Let me know if you need more.")
        result = parse_response(response)
        assert result.intent.kind == QueryKind.RELATIONSHIPS
        assert result.intent.target == "Arjuna"

    def test_escaped_newlines(self):
        result = parse_response("QUERY_TYPE: classes\\nTARGET: King")
        assert result.ok
        assert result.intent.kind == QueryKind.CLASSES
        assert result.intent.target == "King"

    def test_quoted_values(self):
        result = parse_response('QUERY_TYPE: "individual"\nTARGET: \'Karna\'')
        assert result.intent.kind == QueryKind.INDIVIDUAL_DETAIL
        assert result.intent.target == "Karna"

    def test_empty_pattern_allowed_for_classes(self):
        result = parse_response("QUERY_TYPE: properties\nTARGET:")
        assert result.ok
        assert result.intent.kind == QueryKind.PROPERTIES
        assert result.intent.target == ""

    def test_missing_target_for_instances(self):
        result = parse_response("QUERY_TYPE: instances\nTARGET:   ")
        assert not result.ok
        assert "requires a target" in result.failure

    @pytest.mark.parametrize("token", ["individual", "IndividualDetail", "individual_detail", "entity"])
    def test_individual_aliases(self, token):
        result = parse_response(f"QUERY_TYPE: {token}\nTARGET: Bhima")
        assert result.intent.kind == QueryKind.INDIVIDUAL_DETAIL


class TestStructuredFormat:
    """JSON responses, fenced or bare."""

    def test_bare_json(self):
        result = parse_response('{"type":"instances","target":"Person"}')
        assert result.intent.kind == QueryKind.INSTANCES
        assert result.intent.target == "Person"

    def test_fenced_json(self):
        result = parse_response('```json\n{"type": "instances", "target": "Person"}\n```')
        assert result.intent.kind == QueryKind.INSTANCES
        assert result.intent.target == "Person"

    def test_complex_with_filters(self):
        response = ('{"type": "complex", "target": "Warrior", "filters": ['
                    '{"property": "fights", "value": "Karna", "operator": "equals"},'
                    '{"property": "wields", "value": "Gandiva"}]}')
        result = parse_response(response)

        intent = result.intent
        assert intent.kind == QueryKind.COMPLEX
        assert intent.target == "Warrior"
        assert [(f.property, f.value, f.operator) for f in intent.filters] == [
            ("fights", "Karna", "equals"),
            ("wields", "Gandiva", "equals"),
        ]

    def test_malformed_filter_entries_skipped(self):
        response = ('{"type": "complex", "target": "Warrior", "filters": ['
                    '{"property": "fights"}, "oops", {"property": "fights", "value": "Karna"}]}')
        result = parse_response(response)
        assert len(result.intent.filters) == 1
        assert result.intent.filters[0].value == "Karna"

    def test_invalid_json_falls_back_to_fields(self):
        response = ('Here you go: {"type": "complex", "target": "Warrior", '
                    '"filters": [{"property": "fights", "value": "Duryodhana"},],}')
        result = parse_response(response)
        assert result.ok
        assert result.intent.kind == QueryKind.COMPLEX
        assert result.intent.filters[0].property == "fights"
        assert result.intent.filters[0].value == "Duryodhana"
        assert result.intent.filters[0].operator == "equals"

    def test_complex_without_filters_is_unusable(self):
        result = parse_response('{"type": "complex", "target": "Warrior", "filters": []}')
        assert not result.ok
        assert "filters" in result.failure

    def test_filters_dropped_for_simple_kinds(self):
        response = '{"type": "instances", "target": "Warrior", "filters": [{"property": "a", "value": "b"}]}'
        result = parse_response(response)
        assert result.intent.kind == QueryKind.INSTANCES
        assert result.intent.filters == []


class TestAmbiguity:
    """Ambiguous classifications."""

    def test_ambiguous_with_question(self):
        result = parse_response('{"type": "ambiguous", "target": "Person", "question": "Which Person?"}')
        assert result.ok
        assert result.intent.is_ambiguous
        assert result.intent.clarification_question == "Which Person?"

    def test_ambiguous_without_question_is_unusable(self):
        result = parse_response('{"type": "Ambiguous", "target": "Person"}')
        assert not result.ok
        assert result.intent is None

    def test_ambiguous_blank_question_is_unusable(self):
        result = parse_response('{"type": "ambiguous", "target": "Person", "question": "  "}')
        assert not result.ok


class TestMalformation:
    """Responses that cannot be used never raise."""

    @pytest.mark.parametrize("response", [
        None,
        "",
        "   \n ",
        "I think you are asking about warriors.",
        "QUERY_TYPE: instances",
        '{"target": "Person"}',
        '{"type": "spaceships", "target": "Person"}',
        "{{{{",
    ])
    def test_unusable_responses(self, response):
        result = parse_response(response)
        assert not result.ok
        assert result.intent is None
        assert result.failure

    def test_raw_response_kept(self):
        result = parse_response("nonsense")
        assert result.raw_response == "nonsense"


class TestQueryClassifier:
    """Round-trip through the completion service."""

    def test_system_prompt_lists_ontology(self, ontology_service):
        classifier = QueryClassifier(FakeCompletion(), ontology_service)
        prompt = classifier.system_prompt()

        assert "QUERY_TYPE:" in prompt
        assert "DO NOT answer" in prompt
        assert 'name="mahabharata"' in prompt
        for name in ("Warrior", "fights", "Arjuna"):
            assert f"  - {name}" in prompt

    def test_prompt_caps(self, ontology_service):
        classifier = QueryClassifier(FakeCompletion(), ontology_service, max_classes=2, max_individuals=1)
        prompt = classifier.system_prompt()

        assert "  - Bow" in prompt and "  - King" in prompt
        assert "  - Kingdom" not in prompt
        assert "  - Arjuna" in prompt and "  - Bhima" not in prompt

    def test_classify(self, ontology_service):
        completion = FakeCompletion("QUERY_TYPE: instances\nTARGET: Warrior")
        classifier = QueryClassifier(completion, ontology_service)

        result = classifier.classify("Who are the warriors?")

        assert result.intent.kind == QueryKind.INSTANCES
        assert result.intent.target == "Warrior"
        _, user_prompt, temperature = completion.calls[0]
        assert user_prompt == "Who are the warriors?"
        assert temperature == CLASSIFICATION_TEMPERATURE == 0.3

    def test_completion_failure_propagates(self, ontology_service):
        classifier = QueryClassifier(FakeCompletion(CompletionError("timeout")), ontology_service)
        with pytest.raises(CompletionError, match="timeout"):
            classifier.classify("Who are the warriors?")


# Test runner for manual execution
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
