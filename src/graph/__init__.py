"""
Graph view module.

Keeps a partial, materialized view of the knowledge base consistent under
expand, collapse and highlight operations.

Public Interface:
- GraphView: Expansion state and materialized vertices/edges
- ViewListener: Base class for rendering adapters
- ViewSnapshot: Immutable view copy delivered to listeners
"""

from .domain import ViewListener, ViewSnapshot
from .view import GraphView

__all__ = ["GraphView", "ViewListener", "ViewSnapshot"]
