import logging
from typing import Optional

from ontology.knowledge_base import KnowledgeBase

from .completion import CompletionService

logger = logging.getLogger(__name__)

MAX_EXPLAIN_CHARS = 15000

explanation_system_prompt = """<ROLE>You are an expert in ontology analysis and OWL (Web Ontology Language).</ROLE>
<TASK>Analyze the provided ontology and create a clear, concise explanation.</TASK>
<INSTRUCTIONS>
- Format your response as bullet points describing:
  --- the main purpose or domain of the ontology
  --- key classes and their relationships
  --- important properties
  --- notable individuals (if any)
  --- overall structure and organization
- Keep it clear and accessible, avoiding overly technical jargon where possible.
</INSTRUCTIONS>"""
explanation_user_prompt = """Please analyze this ontology and explain what it represents:
<ONTOLOGY>{content}</ONTOLOGY>"""


class OntologyExplainer:
    """
    This class is responsible for asking the completion service to describe a whole ontology.
    """

    def __init__(self, completion: CompletionService, knowledge_base: KnowledgeBase,
                 max_chars: int = MAX_EXPLAIN_CHARS):
        self.completion = completion
        self.knowledge_base = knowledge_base
        self.max_chars = max_chars

    def user_prompt(self) -> str:
        """
        Serialized ontology wrapped for the prompt, truncated to ``max_chars``.
        """
        content = self.knowledge_base.serialize("turtle")
        logger.info(f"Ontology serialized - {len(content)} characters")
        if len(content) > self.max_chars:
            content = content[:self.max_chars] + "\n\n... (truncated for length)"
            logger.info(f"Ontology content truncated to {self.max_chars} characters")
        return explanation_user_prompt.format(content=content)

    def explain(self, user_prompt: Optional[str] = None) -> str:
        """
        :param user_prompt: Prompt built beforehand with user_prompt(); built here when omitted
        :return: Bullet-point explanation of the ontology
        :raises CompletionError: If the completion service fails
        """
        if user_prompt is None:
            user_prompt = self.user_prompt()
        response = self.completion.complete(explanation_system_prompt, user_prompt)
        logger.info(f"Received ontology explanation from LLM - {len(response)} characters")
        return response
