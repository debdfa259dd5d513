"""
Execution of classified query intents against the knowledge base.

Every intent produces a ``QueryReport``; names that do not resolve give a
not-found report and execution errors give an error report, so callers never
have to catch anything. When a graph view is attached, the entities a query
is about are highlighted in it.
"""

import logging
from typing import Callable, Dict, List, Optional

from graph.view import GraphView
from ontology.domain import EntityRef
from ontology.service import OntologyService

from .domain import QueryFilter, QueryIntent, QueryKind, QueryReport

logger = logging.getLogger(__name__)


def _bullet_list(lines: List[str], empty: str) -> str:
    if not lines:
        return f"  {empty}\n"
    return "".join(f"  • {line}\n" for line in lines)


class QueryExecutor:
    """Runs query intents and surfaces their entities in the graph view."""

    def __init__(self, ontology_service: OntologyService, view: Optional[GraphView] = None):
        self.ontology_service = ontology_service
        self.knowledge_base = ontology_service.knowledge_base
        self.view = view
        self._handlers: Dict[QueryKind, Callable[[QueryIntent], QueryReport]] = {
            QueryKind.INSTANCES: self._instances,
            QueryKind.CLASSES: self._classes,
            QueryKind.PROPERTIES: self._properties,
            QueryKind.RELATIONSHIPS: self._relationships,
            QueryKind.INDIVIDUAL_DETAIL: self._individual_detail,
            QueryKind.COMPLEX: self._complex,
        }

    def execute(self, intent: QueryIntent) -> QueryReport:
        """Execute an intent and highlight what it is about.

        Args:
            intent: A classified, non-ambiguous intent.

        Returns:
            QueryReport with the report text, the listed entities and the
            highlighted entity (if any).
        """
        handler = self._handlers.get(intent.kind)
        if handler is None:
            return QueryReport(intent=intent, text=f"⚠️ Cannot execute a '{intent.kind.value}' query.",
                               found=False, error=f"Unsupported query kind: {intent.kind.value}")

        try:
            report = handler(intent)
            if intent.kind != QueryKind.COMPLEX:
                report.highlighted = self.highlight(intent.target)
        except Exception as e:
            logger.error(f"Error executing {intent.kind.value} query for '{intent.target}': {e}")
            return QueryReport(intent=intent, text=f"❌ Error: {e}", found=False, error=str(e))
        return report

    def highlight(self, name: str) -> Optional[EntityRef]:
        """Resolve ``name`` (individuals, then classes, then properties) and select it.

        Returns:
            The highlighted entity, or None when the name does not resolve
            or no view is attached.
        """
        entity = self.ontology_service.resolve_entity(name)
        if entity is None:
            return None
        if self.view is not None:
            self.view.highlight(entity)
        return entity

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _instances(self, intent: QueryIntent) -> QueryReport:
        class_name = intent.target
        text = f"📦 Instances of '{class_name}':\n\n"

        target_class = self.ontology_service.find_class(class_name)
        if target_class is None:
            text += f"❌ Class not found: {class_name}\n"
            return QueryReport(intent=intent, text=text, found=False)

        instances = self.knowledge_base.direct_instances(target_class)
        text += _bullet_list([i.short_name for i in instances], "(No instances found)")
        if instances:
            text += f"\nTotal: {len(instances)} instance(s)\n"
        return QueryReport(intent=intent, text=text, matches=instances)

    def _classes(self, intent: QueryIntent) -> QueryReport:
        pattern = intent.target
        text = f"🗂️ Classes matching '{pattern}':\n\n"

        classes = self.ontology_service.search_classes(pattern)
        text += _bullet_list([c.short_name for c in classes], "(No classes found)")
        if classes:
            text += f"\nTotal: {len(classes)} class(es)\n"
        return QueryReport(intent=intent, text=text, matches=classes)

    def _properties(self, intent: QueryIntent) -> QueryReport:
        pattern = intent.target
        text = f"🔗 Object Properties matching '{pattern}':\n\n"

        properties = self.ontology_service.search_properties(pattern)
        text += _bullet_list([p.short_name for p in properties], "(No properties found)")
        if properties:
            text += f"\nTotal: {len(properties)} propert(y/ies)\n"
        return QueryReport(intent=intent, text=text, matches=properties)

    def _relationships(self, intent: QueryIntent) -> QueryReport:
        name = intent.target
        text = f"🔗 Relationships for '{name}':\n\n"

        individual = self.ontology_service.find_individual(name)
        if individual is None:
            text += f"❌ Individual not found: {name}\n"
            return QueryReport(intent=intent, text=text, found=False)

        assertions = self.knowledge_base.object_property_assertions(individual)
        text += _bullet_list([f"{prop.short_name} → {target.short_name}" for prop, target in assertions],
                             "(No relationships found)")
        if assertions:
            text += f"\nTotal: {len(assertions)} relationship(s)\n"
        return QueryReport(intent=intent, text=text, matches=[target for _, target in assertions])

    def _individual_detail(self, intent: QueryIntent) -> QueryReport:
        name = intent.target
        individual = self.ontology_service.find_individual(name)
        if individual is None:
            return QueryReport(intent=intent, text=f"❌ Individual '{name}' not found in ontology.\n",
                               found=False)

        types = self.knowledge_base.types_of(individual)
        assertions = self.knowledge_base.object_property_assertions(individual)
        data = self.knowledge_base.data_property_assertions(individual)

        text = f"📋 Individual: {individual.short_name}\n\n"
        text += "🏷️ Types:\n"
        text += _bullet_list([t.short_name for t in types], "(No types found)")
        text += "\n🔗 Relationships:\n"
        text += _bullet_list([f"{prop.short_name} → {target.short_name}" for prop, target in assertions],
                             "(No relationships found)")
        text += "\n📊 Data Properties:\n"
        text += _bullet_list([f"{prop} = {value}" for prop, value in data], "(No data properties found)")
        return QueryReport(intent=intent, text=text, matches=[individual])

    def _satisfies(self, individual: EntityRef, query_filter: QueryFilter) -> bool:
        for prop, target in self.knowledge_base.object_property_assertions(individual):
            if prop.matches(query_filter.property) and target.matches(query_filter.value):
                return True
        return False

    def _complex(self, intent: QueryIntent) -> QueryReport:
        class_name = intent.target
        target_class = self.ontology_service.find_class(class_name)
        if target_class is None:
            return QueryReport(intent=intent, text=f"❌ Class '{class_name}' not found.\n", found=False)

        for query_filter in intent.filters:
            if query_filter.operator.lower() not in ("equals", "=", "==", "eq", "is"):
                logger.warning(f"Operator '{query_filter.operator}' treated as equality")

        matches = [individual for individual in self.knowledge_base.direct_instances(target_class)
                   if all(self._satisfies(individual, f) for f in intent.filters)]

        highlighted = None
        if self.view is not None:
            highlighted = self.view.highlight_all(matches)

        text = f"🔍 Complex Query Results for '{class_name}':\n\n"
        text += _bullet_list([m.short_name for m in matches], "(No matching instances found)")
        if matches:
            text += f"\nTotal: {len(matches)} match(es)\n"
        return QueryReport(intent=intent, text=text, matches=matches, highlighted=highlighted)
