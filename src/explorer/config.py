"""
Settings for the exploration session.

Values come from the environment (and a ``.env`` file, if present). Nothing
is written back; the settings live only as long as the process.

Environment variables:
    OPENAI_BASE_URL       Base URL of the OpenAI-compatible API
    OPENAI_API_KEY        API key ('demo' for demo proxies)
    OPENAI_MODEL          Model name
    EXPLORER_TIMEOUT      Completion timeout in seconds
    EXPLORER_TEMPERATURE  Sampling temperature for query classification
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from query.completion import DEFAULT_BASE_URL, DEFAULT_MODEL, CompletionService


class ExplorerSettings(BaseModel):
    """Configuration for the completion service and prompt sizes."""

    # Completion service
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL of the OpenAI-compatible API")
    api_key: str = Field(default="", description="API key for the completion service")
    model: str = Field(default=DEFAULT_MODEL, description="Model used for classification and explanation")
    timeout: float = Field(default=30.0, description="Completion request timeout in seconds")
    temperature: float = Field(default=0.3, description="Sampling temperature for query classification")

    # Prompt bounds
    max_prompt_classes: int = Field(default=30, description="Classes listed in the classification prompt")
    max_prompt_properties: int = Field(default=20, description="Object properties listed in the prompt")
    max_prompt_individuals: int = Field(default=20, description="Individuals listed in the prompt")
    max_explain_chars: int = Field(default=15000, description="Serialized ontology size sent for explanation")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "ExplorerSettings":
        """Read settings from the environment after loading ``.env``."""
        load_dotenv(dotenv_path)
        return cls(
            base_url=os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
            api_key=os.getenv("OPENAI_API_KEY", ""),
            model=os.getenv("OPENAI_MODEL") or DEFAULT_MODEL,
            timeout=float(os.getenv("EXPLORER_TIMEOUT", "30")),
            temperature=float(os.getenv("EXPLORER_TEMPERATURE", "0.3")),
        )

    @property
    def is_configured(self) -> bool:
        """True when an API key is set."""
        return bool(self.api_key and self.api_key.strip())

    def create_completion_service(self) -> CompletionService:
        """
        :raises ValueError: If the API key is missing
        """
        if not self.is_configured:
            raise ValueError("OPENAI_API_KEY not found in environment variables")
        return CompletionService(
            api_key=self.api_key,
            model=self.model,
            base_url=self.base_url,
            timeout=self.timeout,
        )

    def describe(self) -> str:
        """Printable summary with the API key masked."""
        masked = "(not set)"
        if self.is_configured:
            key = self.api_key.strip()
            masked = key if key.lower() == "demo" else f"{key[:4]}…{key[-2:]}"
        return (f"base_url: {self.base_url}\n"
                f"api_key: {masked}\n"
                f"model: {self.model}\n"
                f"timeout: {self.timeout}s\n"
                f"temperature: {self.temperature}")
