"""
Domain models shared between the graph view and rendering adapters.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from ontology.domain import EntityRef, Relationship


@dataclass(frozen=True)
class ViewSnapshot:
    """Immutable copy of the materialized view handed to renderers."""

    vertices: FrozenSet[EntityRef]
    edges: FrozenSet[Relationship]
    expanded: FrozenSet[EntityRef]
    selected: Optional[EntityRef] = None

    def children_of(self, entity: EntityRef):
        """Visible edges pointing at ``entity`` (subclasses, instances)."""
        return sorted((e for e in self.edges if e.target == entity),
                      key=lambda e: (e.kind.value, e.source.short_name.lower()))

    def outgoing(self, entity: EntityRef):
        """Visible edges leaving ``entity`` (types, property assertions)."""
        return sorted((e for e in self.edges if e.source == entity),
                      key=lambda e: (e.kind.value, e.label.lower(), e.target.short_name.lower()))


class ViewListener:
    """Rendering surface notified about view changes.

    Both hooks are no-ops by default; layout and styling stay with the
    renderer.
    """

    def on_view_changed(self, snapshot: ViewSnapshot) -> None:
        pass

    def request_center_on(self, entity: EntityRef) -> None:
        pass
