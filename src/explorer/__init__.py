"""
Exploration session module.

Ties the graph view, the query classifier and the executor together behind a
small state machine, and provides the interactive CLI.

Public Interface:
- ExplorationSession: Submit, clarify and execute natural-language queries
- ExplorerSettings: Completion service and prompt configuration
- SessionState, SessionOutcome, SessionBusyError: Session protocol types
"""

from .config import ExplorerSettings
from .session import ExplorationSession, SessionBusyError, SessionOutcome, SessionState

__all__ = [
    "ExplorationSession",
    "ExplorerSettings",
    "SessionBusyError",
    "SessionOutcome",
    "SessionState",
]
