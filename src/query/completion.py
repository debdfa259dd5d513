"""
Thin client for an OpenAI-compatible chat completion endpoint.

The client sends one system message and one user message and returns the
text of the first choice. It performs no retries; callers decide what to do
with a ``CompletionError``.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7


class CompletionError(RuntimeError):
    """The completion service could not be reached or returned nothing usable."""


class CompletionService:
    """
    This class is responsible for calling the text-completion service.
    """

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, base_url: str = DEFAULT_BASE_URL,
                 timeout: float = 30.0, client: Optional[OpenAI] = None):
        """
        Initialize the completion client.

        :param api_key: API key for the endpoint ('demo' for demo proxies)
        :param model: Model name, e.g. gpt-4o-mini
        :param base_url: Base URL of the OpenAI-compatible API
        :param timeout: Request timeout in seconds
        :param client: Pre-built OpenAI client (mainly for tests)
        :raises ValueError: If the API key or base URL is missing
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key must be provided.")
        if not base_url or not base_url.strip():
            raise ValueError("Base URL must be provided.")

        self.model = model or DEFAULT_MODEL
        self.base_url = base_url.strip().rstrip("/")
        self.client = client if client is not None else OpenAI(
            api_key=api_key.strip(),
            base_url=self.base_url,
            timeout=timeout,
            max_retries=0,
        )

    def complete(self, system_prompt: str, user_prompt: str,
                 temperature: float = DEFAULT_TEMPERATURE) -> str:
        """
        Send the prompts and return the generated text.

        :param system_prompt: Instruction setting the model's behavior
        :param user_prompt: The user's input
        :param temperature: Sampling temperature (0.0 to 2.0)
        :return: The text of the first choice
        :raises CompletionError: On network, timeout, auth or empty responses
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
            )
        except OpenAIError as e:
            logger.error(f"Completion call to {self.base_url} failed: {e}")
            raise CompletionError(f"Completion call failed: {e}") from e

        if not response.choices or response.choices[0].message.content is None:
            raise CompletionError("Completion service returned no content")

        content = response.choices[0].message.content
        logger.debug(f"Completion returned {len(content)} characters")
        return content
