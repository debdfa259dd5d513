"""
Query module turning free-text questions into ontology searches.

Public Interface:
- QueryClassifier: Classifies a question into a QueryIntent via the completion service
- QueryExecutor: Executes an intent and highlights the result in the graph view
- OntologyExplainer: Bullet-point description of a whole ontology
- CompletionService: OpenAI-compatible chat completion client
"""

from .classifier import QueryClassifier, parse_response
from .completion import CompletionError, CompletionService
from .domain import ClassificationResult, QueryFilter, QueryIntent, QueryKind, QueryReport
from .executor import QueryExecutor
from .explainer import OntologyExplainer

__all__ = [
    "ClassificationResult",
    "CompletionError",
    "CompletionService",
    "OntologyExplainer",
    "QueryClassifier",
    "QueryExecutor",
    "QueryFilter",
    "QueryIntent",
    "QueryKind",
    "QueryReport",
    "parse_response",
]
