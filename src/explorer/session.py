"""
Exploration session coordinating classification, clarification and execution.

State machine for one submission:

    IDLE ─submit→ CLASSIFYING ─┬→ AMBIGUOUS ─clarify→ CLASSIFYING
                               │            └decline→ IDLE (cancelled)
                               ├→ RESOLVED → EXECUTING → DONE → IDLE
                               └→ FAILED → IDLE

Only one round-trip to the completion service is outstanding at a time; a
submission while the session is not idle raises ``SessionBusyError``.

The blocking completion call runs on a single worker thread; its prompt is
built before submission, so the knowledge base is never read there. The result is
handed back as a ``Future`` and must be applied with ``apply`` on the thread
that owns the session and its graph view; parsing, execution and every
graph mutation happen there. ``run`` is the synchronous driver that does
both and loops over clarification rounds without recursion.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from graph.view import GraphView
from ontology.knowledge_base import KnowledgeBase
from ontology.service import OntologyService
from query.classifier import QueryClassifier
from query.completion import CompletionError, CompletionService
from query.domain import QueryIntent, QueryReport
from query.executor import QueryExecutor
from query.explainer import OntologyExplainer

from .config import ExplorerSettings

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = (
    "❌ OpenAI not configured!\n\n"
    "You need to set:\n"
    "  • OPENAI_BASE_URL (e.g., https://api.openai.com/v1)\n"
    "  • OPENAI_API_KEY\n"
    "  • OPENAI_MODEL (e.g., gpt-4o-mini)\n"
)

COMPLETION_FAILURE_HINT = (
    "Please check:\n"
    "✗ Your API key is correct\n"
    "✗ Your base URL is correct\n"
    "✗ You have internet connectivity\n"
    "✗ Your API key has sufficient credits\n"
)

CANCELLED_MESSAGE = "❌ Query cancelled or clarification not provided."


class SessionState(str, Enum):
    IDLE = "idle"
    CLASSIFYING = "classifying"
    AMBIGUOUS = "ambiguous"
    RESOLVED = "resolved"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"
    EXPLAINING = "explaining"


class SessionBusyError(RuntimeError):
    """A query was submitted while another one is still outstanding."""


@dataclass
class SessionOutcome:
    """What the caller gets back after a step of the state machine."""

    state: SessionState
    report_text: str = ""
    question: Optional[str] = None
    intent: Optional[QueryIntent] = None
    report: Optional[QueryReport] = None

    @property
    def needs_clarification(self) -> bool:
        return self.state == SessionState.AMBIGUOUS


def _failed_future(error: Exception) -> Future:
    future: Future = Future()
    future.set_exception(error)
    return future


class ExplorationSession:
    """Owns a graph view and drives natural-language queries against it."""

    def __init__(self, knowledge_base: KnowledgeBase, completion: Optional[CompletionService] = None,
                 settings: Optional[ExplorerSettings] = None, view: Optional[GraphView] = None):
        """Create a session.

        Args:
            knowledge_base: Read-only ontology accessor.
            completion: Completion service; None leaves querying unconfigured.
            settings: Prompt bounds and temperature; defaults if None.
            view: Graph view to drive; a fresh one over ``knowledge_base`` if None.
        """
        self.settings = settings if settings is not None else ExplorerSettings()
        self.knowledge_base = knowledge_base
        self.ontology_service = OntologyService(knowledge_base)
        self.view = view if view is not None else GraphView(knowledge_base)
        self.completion = completion
        self.executor = QueryExecutor(self.ontology_service, self.view)

        self.classifier: Optional[QueryClassifier] = None
        self.explainer: Optional[OntologyExplainer] = None
        if completion is not None:
            self.classifier = QueryClassifier(
                completion,
                self.ontology_service,
                temperature=self.settings.temperature,
                max_classes=self.settings.max_prompt_classes,
                max_properties=self.settings.max_prompt_properties,
                max_individuals=self.settings.max_prompt_individuals,
            )
            self.explainer = OntologyExplainer(completion, knowledge_base, self.settings.max_explain_chars)

        self._state = SessionState.IDLE
        self._original_query: Optional[str] = None
        self._current_query: Optional[str] = None
        self._question: Optional[str] = None
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="completion")

    @classmethod
    def from_settings(cls, knowledge_base: KnowledgeBase, settings: ExplorerSettings) -> "ExplorationSession":
        """Session with a completion service built from ``settings`` when configured."""
        completion = settings.create_completion_service() if settings.is_configured else None
        return cls(knowledge_base, completion, settings)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state == SessionState.IDLE

    @property
    def original_query(self) -> Optional[str]:
        return self._original_query

    @property
    def current_query(self) -> Optional[str]:
        """Query text including any clarification answers appended so far."""
        return self._current_query

    @property
    def pending_question(self) -> Optional[str]:
        return self._question

    def _reset(self) -> None:
        self._state = SessionState.IDLE
        self._original_query = None
        self._current_query = None
        self._question = None

    def _fail(self, text: str) -> SessionOutcome:
        self._state = SessionState.FAILED
        outcome = SessionOutcome(state=SessionState.FAILED, report_text=text)
        self._reset()
        return outcome

    def _require_state(self, expected: SessionState, action: str) -> None:
        if self._state != expected:
            raise RuntimeError(f"Cannot {action} while session is {self._state.value}")

    # ------------------------------------------------------------------
    # Query protocol
    # ------------------------------------------------------------------

    def submit(self, text: str) -> Future:
        """Start classifying a question.

        Returns:
            Future resolving to the raw completion response; pass it to
            ``apply`` on the owning thread.

        Raises:
            ValueError: If the text is empty.
            SessionBusyError: If another query is outstanding.
        """
        query = (text or "").strip()
        if not query:
            raise ValueError("Please enter a query.")
        if self._state != SessionState.IDLE:
            raise SessionBusyError(f"A query is already in progress (state: {self._state.value})")

        self._original_query = query
        self._current_query = query
        return self._start_classification()

    def _start_classification(self) -> Future:
        self._state = SessionState.CLASSIFYING
        self._question = None
        if self.classifier is None:
            return _failed_future(CompletionError("Completion service not configured"))
        logger.info("=== NLP Query Execution ===")
        # The knowledge base is only read on the owning thread
        try:
            prompt = self.classifier.system_prompt()
        except Exception as e:
            logger.error(f"Failed to build classification prompt: {e}")
            return _failed_future(e)
        return self._pool.submit(self.classifier.fetch, self._current_query, prompt)

    def apply(self, future: Future) -> SessionOutcome:
        """Apply a finished classification round-trip; blocks until it is done."""
        self._require_state(SessionState.CLASSIFYING, "apply a classification")

        try:
            response = future.result()
        except CompletionError as e:
            if self.classifier is None:
                return self._fail(NOT_CONFIGURED_MESSAGE)
            return self._fail(f"❌ Error calling completion service:\n\n{e}\n\n{COMPLETION_FAILURE_HINT}")
        except Exception as e:
            logger.error(f"Classification failed: {e}")
            return self._fail(f"❌ Error classifying query:\n\n{e}")

        result = self.classifier.parse(response)
        if not result.ok:
            return self._fail(f"⚠️ Could not understand the query ({result.failure}). Please try rephrasing.")

        intent = result.intent
        if intent.is_ambiguous:
            self._state = SessionState.AMBIGUOUS
            self._question = intent.clarification_question
            return SessionOutcome(state=SessionState.AMBIGUOUS, report_text=f"❓ {self._question}",
                                  question=self._question, intent=intent)

        self._state = SessionState.RESOLVED
        return self._execute(intent)

    def _execute(self, intent: QueryIntent) -> SessionOutcome:
        self._state = SessionState.EXECUTING
        report = self.executor.execute(intent)

        header = (f"✅ Query Results from Ontology\n\n"
                  f"Natural Language: {self._current_query}\n\n"
                  f"Query Type: {intent.kind.value}\n"
                  f"Target: {intent.target}\n")
        if intent.filters:
            header += f"Filters: {len(intent.filters)}\n"

        self._state = SessionState.DONE
        outcome = SessionOutcome(state=SessionState.DONE, report_text=header + "\n" + report.text,
                                 intent=intent, report=report)
        self._reset()
        return outcome

    def clarify(self, answer: str) -> Future:
        """Append the user's answer to the query and classify again.

        Raises:
            ValueError: If the answer is empty (use ``decline`` instead).
        """
        self._require_state(SessionState.AMBIGUOUS, "clarify")
        answer = (answer or "").strip()
        if not answer:
            raise ValueError("Clarification answer must not be empty")

        self._current_query = f"{self._current_query} {answer}"
        return self._start_classification()

    def decline(self) -> SessionOutcome:
        """Abandon the clarification round and return to idle."""
        self._require_state(SessionState.AMBIGUOUS, "decline")
        self._reset()
        return SessionOutcome(state=SessionState.IDLE, report_text=CANCELLED_MESSAGE)

    def run(self, text: str, ask: Optional[Callable[[str], Optional[str]]] = None) -> SessionOutcome:
        """Drive one submission to completion on the calling thread.

        Args:
            text: The question.
            ask: Called with each clarification question; returning None or
                blank text declines. Without it, ambiguity is declined.
        """
        future = self.submit(text)
        while True:
            outcome = self.apply(future)
            if not outcome.needs_clarification:
                return outcome
            answer = ask(outcome.question) if ask is not None else None
            if answer is None or not answer.strip():
                return self.decline()
            future = self.clarify(answer)

    # ------------------------------------------------------------------
    # Ontology explanation
    # ------------------------------------------------------------------

    def request_explanation(self) -> Future:
        if self._state != SessionState.IDLE:
            raise SessionBusyError(f"A query is already in progress (state: {self._state.value})")
        self._state = SessionState.EXPLAINING
        if self.explainer is None:
            return _failed_future(CompletionError("Completion service not configured"))
        try:
            prompt = self.explainer.user_prompt()
        except Exception as e:
            logger.error(f"Failed to serialize ontology: {e}")
            return _failed_future(e)
        return self._pool.submit(self.explainer.explain, prompt)

    def apply_explanation(self, future: Future) -> SessionOutcome:
        self._require_state(SessionState.EXPLAINING, "apply an explanation")
        try:
            explanation = future.result()
        except CompletionError as e:
            if self.explainer is None:
                return self._fail(NOT_CONFIGURED_MESSAGE)
            return self._fail(f"ERROR: Failed to get explanation from LLM: {e}")
        except Exception as e:
            logger.error(f"Failed to explain ontology: {e}")
            return self._fail(f"ERROR: Failed to explain ontology: {e}")

        self._reset()
        return SessionOutcome(state=SessionState.DONE,
                              report_text=f"=== ONTOLOGY EXPLANATION ===\n\n{explanation}")

    def explain(self) -> SessionOutcome:
        return self.apply_explanation(self.request_explanation())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self._pool.shutdown(wait=False)

    def __enter__(self) -> "ExplorationSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
