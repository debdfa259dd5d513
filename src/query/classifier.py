"""
Classification of free-text questions into structured query intents.

The completion service is asked to describe the question, not answer it.
Its reply may come in either of two shapes:

    line-oriented   QUERY_TYPE: instances
                    TARGET: Person
                    (any other lines are ignored)

    structured      {"type": "complex", "target": "Warrior",
                     "filters": [{"property": "fights", "value": "Karna", "operator": "equals"}]}
                    optionally wrapped in a ```json fenced block

Parsing never raises: anything unusable becomes an unrecognized
``ClassificationResult`` carrying the reason, and fields parsed from a
response that turns out to be unusable are discarded.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from ontology.service import OntologyService

from .completion import CompletionService
from .domain import (
    TARGET_REQUIRED,
    TYPE_TOKENS,
    ClassificationResult,
    QueryFilter,
    QueryIntent,
    QueryKind,
)

logger = logging.getLogger(__name__)

CLASSIFICATION_TEMPERATURE = 0.3

QUERY_TYPE_PREFIX = "QUERY_TYPE:"
TARGET_PREFIX = "TARGET:"

classification_system_prompt = """<ROLE>You are an ontology query analyzer.</ROLE>
<TASK>Parse the user's natural language question and identify what they are asking about. You must handle complex queries with multiple conditions.</TASK>
<INSTRUCTIONS>
- DO NOT answer the question yourself. Just identify the search criteria.
- Use only names that appear in the ontology context below.
- For simple questions respond in this exact format:
QUERY_TYPE: [instances|classes|properties|relationships|individual]
TARGET: [search term]
- For questions with conditions on object properties respond with JSON only:
{"type": "complex", "target": "<class name>", "filters": [{"property": "<object property>", "value": "<individual>", "operator": "equals"}]}
- If the question could refer to several entities and you cannot decide, respond with JSON only:
{"type": "ambiguous", "target": "<best guess>", "question": "<short clarification question for the user>"}
</INSTRUCTIONS>"""

ontology_context_template = """<ONTOLOGY name="{title}">
Available Classes:
{classes}

Available Object Properties:
{properties}

Available Individuals:
{individuals}
</ONTOLOGY>"""

_FENCE = re.compile(r"```(?:json|JSON)?")
_FILTERS_ARRAY = re.compile(r'"filters"\s*:\s*\[(.*)\]', re.DOTALL)
_FILTER_OBJECT = re.compile(r"\{[^{}]*\}")


def _bullets(names: List[str]) -> str:
    if not names:
        return "  (none)"
    return "\n".join(f"  - {name}" for name in names)


def build_system_prompt(context: Dict[str, Any]) -> str:
    """System prompt with a bounded summary of the ontology.

    Args:
        context: Output of ``OntologyService.get_ontology_context``.
    """
    ontology_context = ontology_context_template.format(
        title=context.get("title", "Anonymous Ontology"),
        classes=_bullets(context.get("classes", [])),
        properties=_bullets(context.get("object_properties", [])),
        individuals=_bullets(context.get("individuals", [])),
    )
    return classification_system_prompt + "\n" + ontology_context


def _clean_value(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1].strip()
    return value


def _parse_line_format(text: str) -> Optional[Dict[str, Any]]:
    query_type = None
    target = None
    for line in text.splitlines():
        line = line.strip()
        if line.startswith(QUERY_TYPE_PREFIX):
            query_type = _clean_value(line[len(QUERY_TYPE_PREFIX):])
        elif line.startswith(TARGET_PREFIX):
            target = _clean_value(line[len(TARGET_PREFIX):])
    if query_type is None or target is None:
        return None
    return {"type": query_type, "target": target, "question": None, "filters": []}


def _filter_from_mapping(entry: Any) -> Optional[QueryFilter]:
    if not isinstance(entry, dict):
        return None
    prop = entry.get("property")
    value = entry.get("value")
    if not isinstance(prop, str) or not isinstance(value, str) or not prop.strip() or not value.strip():
        return None
    operator = entry.get("operator")
    if not isinstance(operator, str) or not operator.strip():
        operator = "equals"
    return QueryFilter(property=prop.strip(), value=value.strip(), operator=operator.strip())


def _extract_string(source: str, field: str) -> Optional[str]:
    match = re.search(r'"%s"\s*:\s*"((?:[^"\\]|\\.)*)"' % re.escape(field), source)
    if not match:
        return None
    raw = match.group(1)
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        return raw


def _parse_structured(text: str) -> Optional[Dict[str, Any]]:
    body = _FENCE.sub("", text).strip()
    start = body.find("{")
    end = body.rfind("}")
    if start == -1 or end <= start:
        return None
    candidate = body[start:end + 1]

    try:
        obj = json.loads(candidate)
    except ValueError:
        obj = None

    if isinstance(obj, dict):
        raw_filters = obj.get("filters")
        filters = []
        if isinstance(raw_filters, list):
            filters = [f for f in (_filter_from_mapping(e) for e in raw_filters) if f is not None]
        return {
            "type": obj.get("type") if isinstance(obj.get("type"), str) else None,
            "target": obj.get("target") if isinstance(obj.get("target"), str) else None,
            "question": obj.get("question") if isinstance(obj.get("question"), str) else None,
            "filters": filters,
        }

    # Not valid JSON: pull the fields out one by one
    filters = []
    array = _FILTERS_ARRAY.search(candidate)
    if array:
        for chunk in _FILTER_OBJECT.findall(array.group(1)):
            entry = {name: _extract_string(chunk, name) for name in ("property", "value", "operator")}
            parsed = _filter_from_mapping(entry)
            if parsed is not None:
                filters.append(parsed)
    return {
        "type": _extract_string(candidate, "type"),
        "target": _extract_string(candidate, "target"),
        "question": _extract_string(candidate, "question"),
        "filters": filters,
    }


def _to_result(fields: Dict[str, Any], raw_response: str) -> ClassificationResult:
    token = (fields.get("type") or "").strip().lower().replace(" ", "").replace("-", "_")
    if not token:
        return ClassificationResult.unrecognized("Response does not name a query type", raw_response)

    kind = TYPE_TOKENS.get(token)
    if kind is None:
        return ClassificationResult.unrecognized(f"Unrecognized query type '{token}'", raw_response)

    target = (fields.get("target") or "").strip()
    question = (fields.get("question") or "").strip()
    filters = fields.get("filters") or []

    if kind == QueryKind.AMBIGUOUS:
        if not question:
            return ClassificationResult.unrecognized(
                "Ambiguous classification without a clarification question", raw_response)
        return ClassificationResult.success(
            QueryIntent(kind=kind, target=target, clarification_question=question), raw_response)

    if kind == QueryKind.COMPLEX and not filters:
        return ClassificationResult.unrecognized("Complex query without usable filters", raw_response)

    if kind in TARGET_REQUIRED and not target:
        return ClassificationResult.unrecognized(f"Query type '{kind.value}' requires a target", raw_response)

    intent = QueryIntent(kind=kind, target=target, filters=filters if kind == QueryKind.COMPLEX else [])
    return ClassificationResult.success(intent, raw_response)


def parse_response(response: Optional[str]) -> ClassificationResult:
    """Turn a completion response into a classification result; never raises."""
    raw = response or ""
    try:
        if not raw.strip():
            return ClassificationResult.unrecognized("Empty response", raw)

        # Escaped newlines only matter for the line-oriented shape
        fields = _parse_line_format(raw.replace("\\n", "\n"))
        if fields is None:
            fields = _parse_structured(raw)
        if fields is None:
            return ClassificationResult.unrecognized(
                "Response matches neither the line-oriented nor the JSON format", raw)
        result = _to_result(fields, raw)
    except Exception as e:
        logger.warning(f"Error parsing classification response: {e}")
        return ClassificationResult.unrecognized(f"Could not parse response: {e}", raw)

    if not result.ok:
        logger.warning(f"Unusable classification response: {result.failure}")
    return result


class QueryClassifier:
    """Classifies questions against the ontology with the completion service."""

    def __init__(self, completion: CompletionService, ontology_service: OntologyService,
                 temperature: float = CLASSIFICATION_TEMPERATURE, max_classes: int = 30,
                 max_properties: int = 20, max_individuals: int = 20):
        self.completion = completion
        self.ontology_service = ontology_service
        self.temperature = temperature
        self.max_classes = max_classes
        self.max_properties = max_properties
        self.max_individuals = max_individuals

    def system_prompt(self) -> str:
        context = self.ontology_service.get_ontology_context(
            max_classes=self.max_classes,
            max_properties=self.max_properties,
            max_individuals=self.max_individuals,
        )
        return build_system_prompt(context)

    def fetch(self, question: str, system_prompt: Optional[str] = None) -> str:
        """Blocking round-trip to the completion service.

        Args:
            question: The user's question.
            system_prompt: Prompt built beforehand with ``system_prompt()``;
                built here when omitted.

        Raises:
            CompletionError: If the service fails.
        """
        logger.info(f"User query: {question}")
        if system_prompt is None:
            system_prompt = self.system_prompt()
        response = self.completion.complete(system_prompt, question, self.temperature)
        logger.info(f"Raw LLM response: {response}")
        return response

    def parse(self, response: str) -> ClassificationResult:
        result = parse_response(response)
        if result.ok:
            intent = result.intent
            logger.info(f"Parsed - Type: {intent.kind.value}, Target: {intent.target}, "
                        f"Filters: {len(intent.filters)}")
        return result

    def classify(self, question: str) -> ClassificationResult:
        """Fetch and parse in one call; completion failures propagate."""
        return self.parse(self.fetch(question))
