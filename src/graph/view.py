"""
Materialized, partial view over a knowledge base.

The view holds the vertices and edges a renderer draws and keeps them equal to
what the materialization rule derives from the current state:

    vertices == seeds ∪ closure(expanded) ∪ focus(selected)

Materialization rule (one hop from an entity):
    class       direct subclasses (s --subClassOf-> c) and direct instances
                (i --instanceOf-> c); subclasses that are themselves expanded
                are materialized recursively
    individual  asserted types (i --type-> c) and object property targets
                (i --property-> t), one hop only
    property    nothing

Seeds are the pinned entry points of the initial view (root classes and
object properties). The focus of the selected entity is the entity plus its
one-hop materialization, so highlighting something not yet visible makes it
and its neighbourhood appear.

``expand`` adds to the view incrementally because the rule is monotone.
``collapse`` and selection changes re-derive the whole view from the
remaining state: an entity reachable through two expanded parents must stay
when only one of them collapses.

Every operation computes into fresh sets and commits at the end, so an
exception raised by the knowledge base leaves the view untouched. The view
is single-writer; it does no locking.
"""

import logging
from typing import FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from ontology.domain import EntityRef, Relationship
from ontology.knowledge_base import KnowledgeBase

from .domain import ViewListener, ViewSnapshot

logger = logging.getLogger(__name__)


class GraphView:
    """Expand/collapse/highlight state over a knowledge base."""

    def __init__(self, knowledge_base: KnowledgeBase):
        self.knowledge_base = knowledge_base
        self._vertices: Set[EntityRef] = set()
        self._edges: Set[Relationship] = set()
        self._expanded: Set[EntityRef] = set()
        self._seeds: Set[EntityRef] = set()
        self._selected: Optional[EntityRef] = None
        self._listeners: List[ViewListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def vertices(self) -> FrozenSet[EntityRef]:
        return frozenset(self._vertices)

    @property
    def edges(self) -> FrozenSet[Relationship]:
        return frozenset(self._edges)

    @property
    def expanded(self) -> FrozenSet[EntityRef]:
        return frozenset(self._expanded)

    @property
    def seeds(self) -> FrozenSet[EntityRef]:
        return frozenset(self._seeds)

    @property
    def selected(self) -> Optional[EntityRef]:
        return self._selected

    def __contains__(self, entity: EntityRef) -> bool:
        return entity in self._vertices

    def is_expanded(self, entity: EntityRef) -> bool:
        return entity in self._expanded

    def is_expandable(self, entity: EntityRef) -> bool:
        return self.knowledge_base.has_children(entity)

    def label(self, entity: EntityRef) -> str:
        """Node label with the expansion marker used by renderers."""
        if entity in self._expanded:
            return f"[-] {entity.short_name}"
        if self.is_expandable(entity):
            return f"[+] {entity.short_name}"
        return entity.short_name

    def snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(
            vertices=frozenset(self._vertices),
            edges=frozenset(self._edges),
            expanded=frozenset(self._expanded),
            selected=self._selected,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: ViewListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ViewListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def center_on(self, entity: EntityRef) -> None:
        """Forward a re-centering hint to every listener."""
        for listener in self._listeners:
            listener.request_center_on(entity)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener.on_view_changed(snapshot)

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def _children(self, entity: EntityRef) -> Iterator[Tuple[EntityRef, Relationship]]:
        kb = self.knowledge_base
        if entity.is_class:
            for subclass in kb.direct_subclasses(entity):
                yield subclass, Relationship.sub_class_of(subclass, entity)
            for instance in kb.direct_instances(entity):
                yield instance, Relationship.instance_of(instance, entity)
        elif entity.is_individual:
            for class_ref in kb.types_of(entity):
                yield class_ref, Relationship.type_of(entity, class_ref)
            for prop, target in kb.object_property_assertions(entity):
                yield target, Relationship.object_property(entity, target, prop.short_name)

    def _materialize(self, roots: Iterable[EntityRef], expanded: Set[EntityRef],
                     vertices: Set[EntityRef], edges: Set[Relationship]) -> None:
        """Add ``roots`` and their children to the given sets.

        Subclasses found while materializing a class are followed when they
        are in ``expanded``. Iterative, so deep hierarchies and cycles in
        the subclass graph are fine.
        """
        pending = list(roots)
        done: Set[EntityRef] = set()
        while pending:
            entity = pending.pop()
            if entity in done:
                continue
            done.add(entity)
            vertices.add(entity)
            for child, edge in self._children(entity):
                vertices.add(child)
                edges.add(edge)
                if entity.is_class and child.is_class and child in expanded and child not in done:
                    pending.append(child)

    def closure(self, expanded: Optional[Set[EntityRef]] = None,
                selected: Optional[EntityRef] = None,
                seeds: Optional[Set[EntityRef]] = None) -> Tuple[Set[EntityRef], Set[Relationship]]:
        """Derive vertices and edges from scratch without touching the view.

        Arguments default to the view's current state; pass ``selected``
        explicitly only together with ``expanded``.
        """
        if expanded is None:
            expanded = set(self._expanded)
            selected = self._selected
        if seeds is None:
            seeds = set(self._seeds)

        vertices: Set[EntityRef] = set(seeds)
        edges: Set[Relationship] = set()
        self._materialize(expanded, expanded, vertices, edges)
        if selected is not None:
            self._materialize([selected], set(), vertices, edges)
        return vertices, edges

    def _commit(self, vertices: Set[EntityRef], edges: Set[Relationship],
                expanded: Set[EntityRef], selected: Optional[EntityRef],
                seeds: Optional[Set[EntityRef]] = None) -> None:
        self._vertices = vertices
        self._edges = edges
        self._expanded = expanded
        self._selected = selected
        if seeds is not None:
            self._seeds = seeds
        self._notify()

    def _require_known(self, entity: EntityRef) -> None:
        if not self.knowledge_base.contains(entity):
            raise ValueError(f"Entity not found in knowledge base: {entity.id}")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def seed(self) -> None:
        """Pin root classes and object properties and auto-expand the roots."""
        roots = self.knowledge_base.list_root_classes()
        properties = self.knowledge_base.all_object_properties()
        seeds = set(self._seeds) | set(roots) | set(properties)
        expanded = set(self._expanded) | set(roots)
        vertices, edges = self.closure(expanded, self._selected, seeds)
        self._commit(vertices, edges, expanded, self._selected, seeds)
        logger.info(f"Seeded view with {len(roots)} root classes and {len(properties)} properties - "
                    f"{len(vertices)} vertices, {len(edges)} edges")

    def reset(self) -> None:
        """Drop all state and seed the view afresh."""
        self._commit(set(), set(), set(), None, set())
        self.seed()

    def expand(self, entity: EntityRef) -> None:
        """Materialize the children of ``entity`` and mark it expanded."""
        if entity in self._expanded:
            return
        self._require_known(entity)

        expanded = set(self._expanded)
        expanded.add(entity)
        vertices = set(self._vertices)
        edges = set(self._edges)
        self._materialize([entity], expanded, vertices, edges)
        self._commit(vertices, edges, expanded, self._selected)
        logger.debug(f"Expanded {entity.short_name}: {len(vertices)} vertices, {len(edges)} edges")

    def collapse(self, entity: EntityRef) -> None:
        """Unmark ``entity`` and re-derive the view from what stays expanded."""
        if entity not in self._expanded:
            return

        expanded = set(self._expanded)
        expanded.discard(entity)
        vertices, edges = self.closure(expanded, self._selected)
        self._commit(vertices, edges, expanded, self._selected)
        logger.debug(f"Collapsed {entity.short_name}: {len(vertices)} vertices, {len(edges)} edges")

    def toggle(self, entity: EntityRef) -> bool:
        """Expand or collapse ``entity``; returns True if it ends up expanded."""
        if entity in self._expanded:
            self.collapse(entity)
            return False
        self.expand(entity)
        return True

    def highlight(self, entity: EntityRef) -> None:
        """Select ``entity``, making it and its one-hop neighbourhood visible."""
        self._require_known(entity)

        if self._selected is None:
            vertices = set(self._vertices)
            edges = set(self._edges)
            self._materialize([entity], set(), vertices, edges)
        else:
            # The previous focus may have been the only path to some vertices
            vertices, edges = self.closure(set(self._expanded), entity)
        self._commit(vertices, edges, set(self._expanded), entity)
        logger.debug(f"Selected {entity.short_name}")
        self.center_on(entity)

    def highlight_all(self, entities: Iterable[EntityRef]) -> Optional[EntityRef]:
        """Highlight ``entities`` in turn as one change.

        Only the last focus survives a sequence of highlights, so the view is
        derived once for the last entity and committed once; a failure for
        any of them leaves the view untouched.

        Returns:
            The entity left selected, or None if ``entities`` is empty.
        """
        entities = list(entities)
        if not entities:
            return None
        for entity in entities:
            self._require_known(entity)

        selected = entities[-1]
        vertices, edges = self.closure(set(self._expanded), selected)
        self._commit(vertices, edges, set(self._expanded), selected)
        logger.debug(f"Selected {len(entities)} entities, last {selected.short_name}")
        self.center_on(selected)
        return selected

    def clear_selection(self) -> None:
        if self._selected is None:
            return
        vertices, edges = self.closure(set(self._expanded), None)
        self._commit(vertices, edges, set(self._expanded), None)

    def refresh(self) -> None:
        """Re-derive the view after the knowledge base changed underneath.

        Expanded branches still known to the knowledge base heal; entities
        that disappeared are dropped from every part of the state.
        """
        kb = self.knowledge_base
        expanded = {e for e in self._expanded if kb.contains(e)}
        seeds = {e for e in self._seeds if kb.contains(e)}
        if self._seeds:
            seeds |= set(kb.list_root_classes()) | set(kb.all_object_properties())
        selected = self._selected if self._selected is not None and kb.contains(self._selected) else None

        vertices, edges = self.closure(expanded, selected, seeds)
        self._commit(vertices, edges, expanded, selected, seeds)
        logger.info(f"Graph refreshed - {len(vertices)} vertices, {len(edges)} edges")
