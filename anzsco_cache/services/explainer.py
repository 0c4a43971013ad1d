"""
services/explainer.py
──────────────────────────────────────────────────────────────────────────────
Generation source: asks the LLM to explain one section of an occupation.

Responsibilities:
  1. Build a section-specific prompt (via config/prompts.py).
  2. Call the LLMPort once.
  3. Wrap the answer with its provenance (the LLM model name).

Failures are not retried here.  The LLM adapter retries transport errors;
LLMError propagates so the CacheFacade stores nothing.
"""
from __future__ import annotations

import logging

from anzsco_cache.config.prompts import build_system_prompt, build_user_message
from anzsco_cache.domain.models import GeneratedResponse, Section
from anzsco_cache.ports.llm_port import LLMPort

logger = logging.getLogger(__name__)


class SectionExplainer:
    """GenerationSourcePort backed by an LLM.

    Args:
        llm: Any object satisfying LLMPort.
    """

    def __init__(self, llm: LLMPort) -> None:
        self._llm = llm
        logger.debug("SectionExplainer init | model=%s", llm.model_name)

    def generate(
        self,
        query: str,
        occupation_name: str,
        section: Section,
    ) -> GeneratedResponse:
        logger.info(
            "generate | occupation=%r section=%s query=%r",
            occupation_name,
            section.value,
            query[:80],
        )
        text = self._llm.generate_text(
            build_system_prompt(section),
            build_user_message(query, occupation_name, section),
        )
        return GeneratedResponse(response=text, source=self._llm.model_name)
