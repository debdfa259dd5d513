#!/usr/bin/env python3
"""
Interactive CLI for the Ontology Explorer

Browse an OWL ontology as an expandable tree and ask questions about it in
natural language. Answers are highlighted in the tree.

Usage:
    cd src
    python -m explorer.cli [ontology-file] [--format turtle] [--verbose]

    Without a file the bundled sample ontology is loaded.

Commands:
    # View Commands
    show                      - Print the visible part of the ontology
    expand <name>             - Show subclasses and instances of a class
    collapse <name>           - Hide what expanding <name> showed
    toggle <name>             - Expand or collapse <name>
    select <name>             - Highlight an entity and its neighbourhood
    clear                     - Clear the highlight
    refresh                   - Re-derive the view from the ontology
    reset                     - Start over from the root classes

    # Query Commands
    ask <question>            - Ask a question in natural language
    explain                   - Ask the model to describe the ontology

    # Other Commands
    config                    - Show the completion service configuration
    help                      - Show this help message
    exit / quit               - Exit the CLI

Examples:
    expand Warrior
    ask Who are the warriors that fight Karna?
    ask Tell me about Arjuna
    select Hastinapura

Short Commands:
    s, e, c, t, sel, a, cfg, h, q
"""

import argparse
import logging
import sys
from typing import List, Optional, Set

from graph.domain import ViewListener, ViewSnapshot
from ontology.domain import EntityRef, RelationKind
from ontology.knowledge_base import KnowledgeBase
from ontology.sample import load_sample_store
from ontology.store import OntologyStore

from .config import ExplorerSettings
from .session import ExplorationSession, SessionBusyError

logger = logging.getLogger(__name__)


class TreeRenderer(ViewListener):
    """Prints the materialized view as an indented tree."""

    def __init__(self, session: ExplorationSession):
        self.session = session
        self.snapshot: Optional[ViewSnapshot] = None
        self.centered: Optional[EntityRef] = None

    def on_view_changed(self, snapshot: ViewSnapshot) -> None:
        self.snapshot = snapshot

    def request_center_on(self, entity: EntityRef) -> None:
        self.centered = entity

    def _node(self, entity: EntityRef) -> str:
        marker = " *" if self.snapshot.selected == entity else ""
        return f"{self.session.view.label(entity)}{marker}"

    def _print_branch(self, entity: EntityRef, depth: int, printed: Set[EntityRef]) -> None:
        indent = "  " * depth
        if entity in printed:
            print(f"{indent}{self._node(entity)} ↑")
            return
        printed.add(entity)
        print(f"{indent}{self._node(entity)}")
        for edge in self.snapshot.children_of(entity):
            if edge.kind in (RelationKind.SUB_CLASS_OF, RelationKind.INSTANCE_OF):
                self._print_branch(edge.source, depth + 1, printed)

    def render(self) -> None:
        if self.snapshot is None:
            self.snapshot = self.session.view.snapshot()
        snapshot = self.snapshot
        printed: Set[EntityRef] = set()

        hierarchy_edges = [e for e in snapshot.edges
                           if e.kind in (RelationKind.SUB_CLASS_OF, RelationKind.INSTANCE_OF)]
        has_parent = {e.source for e in hierarchy_edges}
        top = sorted((v for v in snapshot.vertices if v.is_class and v not in has_parent),
                     key=lambda v: v.short_name.lower())

        print(f"\n🌳 {self.session.knowledge_base.title()}")
        print("=" * 60)
        for entity in top:
            self._print_branch(entity, 0, printed)

        others = sorted((v for v in snapshot.vertices if v not in printed and not v.is_property),
                        key=lambda v: v.short_name.lower())
        for entity in others:
            self._print_branch(entity, 0, printed)

        properties = sorted((v for v in snapshot.vertices if v.is_property), key=lambda v: v.short_name.lower())
        if properties:
            print("\n🔗 Object Properties:")
            for prop in properties:
                print(f"  {self._node(prop)}")

        links = [e for e in snapshot.edges if e.kind in (RelationKind.TYPE, RelationKind.OBJECT_PROPERTY)]
        if links:
            print("\n➡️  Relationships:")
            for edge in sorted(links, key=lambda e: (e.source.short_name.lower(), e.label.lower(),
                                                     e.target.short_name.lower())):
                print(f"  {edge}")

        print(f"\n📊 {len(snapshot.vertices)} vertices, {len(snapshot.edges)} edges, "
              f"{len(snapshot.expanded)} expanded")


class OntologyExplorerCLI:
    """Interactive CLI for the ontology explorer."""

    def __init__(self, knowledge_base: KnowledgeBase, settings: ExplorerSettings):
        self.settings = settings
        self.session = ExplorationSession.from_settings(knowledge_base, settings)
        self.renderer = TreeRenderer(self.session)
        self.session.view.add_listener(self.renderer)

        # Command mappings
        self.commands = {
            # View commands
            'show': self.cmd_show,
            's': self.cmd_show,
            'expand': self.cmd_expand,
            'e': self.cmd_expand,
            'collapse': self.cmd_collapse,
            'c': self.cmd_collapse,
            'toggle': self.cmd_toggle,
            't': self.cmd_toggle,
            'select': self.cmd_select,
            'sel': self.cmd_select,
            'clear': self.cmd_clear,
            'refresh': self.cmd_refresh,
            'reset': self.cmd_reset,
            # Query commands
            'ask': self.cmd_ask,
            'a': self.cmd_ask,
            'explain': self.cmd_explain,
            # Other commands
            'config': self.cmd_config,
            'cfg': self.cmd_config,
            'help': self.cmd_help,
            'h': self.cmd_help,
            '?': self.cmd_help,
            'exit': self.cmd_exit,
            'quit': self.cmd_exit,
            'q': self.cmd_exit,
        }

    def initialize(self) -> bool:
        """Seed the view from the root classes."""
        print("🚀 Initializing Ontology Explorer CLI")
        print("=" * 60)

        try:
            self.session.view.seed()
        except Exception as e:
            print(f"❌ Failed to build the initial view: {e}")
            return False

        kb = self.session.knowledge_base
        print(f"✅ Loaded ontology: {kb.title()}")
        print(f"📊 {len(kb.all_classes())} classes, {len(kb.all_object_properties())} object properties, "
              f"{len(kb.all_individuals())} individuals")

        if self.settings.is_configured:
            print(f"🤖 Completion service: {self.settings.model} at {self.settings.base_url}")
        else:
            print("⚠️  OPENAI_API_KEY not set - 'ask' and 'explain' are unavailable")

        print("\n🎉 CLI ready! Type 'help' for available commands.")
        return True

    def run(self):
        """Run the interactive CLI."""
        if not self.initialize():
            return

        print("\n" + "=" * 60)
        print("🔎 ONTOLOGY EXPLORER CLI")
        print("=" * 60)
        print("Type 'help' for commands or 'exit' to quit")
        print("Try: show")
        print("     ask Who are the warriors?")
        print("")

        with self.session:
            while True:
                try:
                    command_line = input("explorer> ").strip()

                    if not command_line:
                        continue

                    parts = command_line.split()
                    command = parts[0].lower()
                    args = parts[1:] if len(parts) > 1 else []

                    if command in self.commands:
                        self.commands[command](args)
                    else:
                        print(f"❌ Unknown command: {command}")
                        print("Type 'help' for available commands")

                except (KeyboardInterrupt, EOFError):
                    print("\n👋 Goodbye!")
                    break
                except Exception as e:
                    print(f"❌ Error: {e}")

    def _resolve(self, args: List[str], usage: str) -> Optional[EntityRef]:
        if not args:
            print(f"Usage: {usage}")
            return None
        name = " ".join(args)
        entity = self.session.ontology_service.resolve_entity(name)
        if entity is None:
            print(f"❌ Not found in ontology: {name}")
        return entity

    # ------------------------------------------------------------------
    # View commands
    # ------------------------------------------------------------------

    def cmd_show(self, args: List[str]):
        """Print the visible part of the ontology."""
        self.renderer.render()

    def cmd_expand(self, args: List[str]):
        """Expand a class or individual."""
        entity = self._resolve(args, "expand <name>")
        if entity is None:
            return
        if not self.session.view.is_expandable(entity):
            print(f"ℹ️  {entity.short_name} has nothing to expand")
            return
        self.session.view.expand(entity)
        self.renderer.render()

    def cmd_collapse(self, args: List[str]):
        """Collapse an expanded entity."""
        entity = self._resolve(args, "collapse <name>")
        if entity is None:
            return
        if not self.session.view.is_expanded(entity):
            print(f"ℹ️  {entity.short_name} is not expanded")
            return
        self.session.view.collapse(entity)
        self.renderer.render()

    def cmd_toggle(self, args: List[str]):
        """Expand or collapse an entity."""
        entity = self._resolve(args, "toggle <name>")
        if entity is None:
            return
        expanded = self.session.view.toggle(entity)
        print(f"{'➕ Expanded' if expanded else '➖ Collapsed'} {entity.short_name}")
        self.renderer.render()

    def cmd_select(self, args: List[str]):
        """Highlight an entity."""
        entity = self._resolve(args, "select <name>")
        if entity is None:
            return
        self.session.view.highlight(entity)
        print(f"🎯 Selected {entity.short_name}")
        self.renderer.render()

    def cmd_clear(self, args: List[str]):
        self.session.view.clear_selection()
        print("✅ Selection cleared")

    def cmd_refresh(self, args: List[str]):
        self.session.view.refresh()
        print("🔄 Graph refreshed")
        self.renderer.render()

    def cmd_reset(self, args: List[str]):
        self.session.view.reset()
        print("🔄 View reset to the root classes")
        self.renderer.render()

    # ------------------------------------------------------------------
    # Query commands
    # ------------------------------------------------------------------

    def _ask_clarification(self, question: str) -> Optional[str]:
        print(f"\n❓ {question}")
        try:
            return input("clarify> ").strip()
        except EOFError:
            return None

    def cmd_ask(self, args: List[str]):
        """Classify a natural-language question and run it."""
        if not args:
            print("Usage: ask <question>")
            print("Example: ask Which warriors fight Karna?")
            return

        question = " ".join(args)
        print(f"🤔 Analyzing: '{question}'")
        try:
            outcome = self.session.run(question, self._ask_clarification)
        except (ValueError, SessionBusyError) as e:
            print(f"❌ {e}")
            return

        print()
        print(outcome.report_text)
        if outcome.report is not None and outcome.report.highlighted is not None:
            print(f"🎯 Highlighted: {outcome.report.highlighted.short_name}")

    def cmd_explain(self, args: List[str]):
        """Ask the completion service to describe the ontology."""
        print("🤖 Analyzing ontology with AI...")
        try:
            outcome = self.session.explain()
        except SessionBusyError as e:
            print(f"❌ {e}")
            return
        print()
        print(outcome.report_text)

    # ------------------------------------------------------------------
    # Other commands
    # ------------------------------------------------------------------

    def cmd_config(self, args: List[str]):
        """Show current configuration."""
        print("\n⚙️  Current Configuration")
        print("=" * 40)
        print(self.settings.describe())
        print(f"max_prompt_classes: {self.settings.max_prompt_classes}")
        print(f"max_prompt_properties: {self.settings.max_prompt_properties}")
        print(f"max_prompt_individuals: {self.settings.max_prompt_individuals}")
        print(f"max_explain_chars: {self.settings.max_explain_chars}")

    def cmd_help(self, args: List[str]):
        """Show help information."""
        print("\n📖 Ontology Explorer CLI Help")
        print("=" * 50)
        print("\n🌳 View Commands:")
        print("  show                    - Print the visible part of the ontology (s)")
        print("  expand <name>           - Show subclasses and instances (e)")
        print("  collapse <name>         - Hide what expanding showed (c)")
        print("  toggle <name>           - Expand or collapse (t)")
        print("  select <name>           - Highlight an entity and its neighbourhood (sel)")
        print("  clear                   - Clear the highlight")
        print("  refresh                 - Re-derive the view from the ontology")
        print("  reset                   - Start over from the root classes")
        print("\n🤖 Query Commands:")
        print("  ask <question>          - Ask a question in natural language (a)")
        print("  explain                 - Describe the whole ontology")
        print("\n⚙️  Other Commands:")
        print("  config                  - Show configuration (cfg)")
        print("  help / h / ?            - Show this help")
        print("  exit / quit / q         - Exit the CLI")
        print("\n💡 Tree Markers:")
        print("  [+] can be expanded, [-] is expanded, * is selected, ↑ already shown above")

    def cmd_exit(self, args: List[str]):
        """Exit the CLI."""
        print("👋 Goodbye!")
        self.session.close()
        sys.exit(0)


def load_knowledge_base(path: Optional[str], fmt: Optional[str]) -> KnowledgeBase:
    if not path:
        return load_sample_store()
    return OntologyStore.from_file(path, fmt)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Explore an OWL ontology and query it in natural language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Explore the bundled sample ontology
  python -m explorer.cli

  # Explore an ontology file
  python -m explorer.cli data/pizza.ttl --format turtle
        """
    )
    parser.add_argument("ontology", nargs="?", help="Ontology file to load (default: bundled sample)")
    parser.add_argument("--format", dest="fmt", default=None,
                        help="RDF serialization of the file (guessed from the extension if omitted)")
    parser.add_argument("--verbose", action="store_true", help="Show INFO log messages")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.ERROR,
                        format='%(levelname)s: %(message)s')

    print(__doc__)

    try:
        knowledge_base = load_knowledge_base(args.ontology, args.fmt)
    except Exception as e:
        print(f"❌ Failed to load ontology: {e}")
        sys.exit(1)

    cli = OntologyExplorerCLI(knowledge_base, ExplorerSettings.from_env())
    cli.run()


if __name__ == "__main__":
    main()
