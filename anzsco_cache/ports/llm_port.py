"""
ports/llm_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for LLM (large language model) providers.

Current implementations: GeminiLLMAdapter (Vertex AI Gemini),
OpenAILLMAdapter (OpenAI chat completions).
To add another: write an adapter implementing this Protocol, then add a
provider branch in services/container.py.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMPort(Protocol):
    """Contract for a text-generating LLM provider."""

    @property
    def model_name(self) -> str:
        """Identifier of the underlying LLM (recorded as answer provenance)."""
        ...

    def generate_text(
        self,
        system_prompt: str,
        user_message: str,
    ) -> str:
        """Send a prompt to the LLM and return its answer text.

        Args:
            system_prompt: System-level instruction.
            user_message:  User-turn content.

        Returns:
            Non-empty answer text.

        Raises:
            LLMError: On API failure, exhausted retries or an empty answer.
            AuthenticationError: If credentials are rejected.
        """
        ...
