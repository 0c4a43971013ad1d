"""
config/prompts.py
──────────────────────────────────────────────────────────────────────────────
All LLM prompt strings in one place.

Why centralise prompts?
  • Easy to diff and review prompt changes in version control
  • Swap or tune a prompt without touching service logic
  • Cached answers carry the model name as provenance, so a prompt change
    can be rolled out by evicting the query cache

To change the tone of every answer: edit EXPLAIN_SYSTEM_BASE below.
To change what one section covers: edit SECTION_GUIDANCE.
"""
from __future__ import annotations

from anzsco_cache.domain.models import Section

# ── Section explanation system prompt ──────────────────────────────────────────
EXPLAIN_SYSTEM_BASE = """\
You are an Australian skilled-migration adviser with deep knowledge of ANZSCO \
(Australian and New Zealand Standard Classification of Occupations).
You answer questions from prospective migrants about a single occupation.

Rules:
- Answer only about the occupation named in the question.
- Write plain prose in short paragraphs; use bullet points only for lists.
- Never invent visa subclasses, assessing authorities, fees or dates. If you \
are not certain, say that the applicant should confirm with the official source.
- Keep the answer under 300 words.
"""

SECTION_GUIDANCE: dict[Section, str] = {
    Section.VISA: (
        "Focus on which skilled visa subclasses the occupation may be eligible "
        "for and the occupation lists that govern eligibility."
    ),
    Section.DETAILS: (
        "Focus on what the occupation involves day to day, its ANZSCO unit "
        "group and its skill level."
    ),
    Section.ASSESSMENT: (
        "Focus on the skills assessment: the assessing authority, typical "
        "qualification and work-experience requirements."
    ),
    Section.EOI: (
        "Focus on Expression of Interest (SkillSelect) rounds: how invitations "
        "work and what affects competitiveness for this occupation."
    ),
    Section.NOMINATION: (
        "Focus on state and territory nomination: which jurisdictions commonly "
        "nominate this occupation and what they usually require."
    ),
}

EXPLAIN_USER_TEMPLATE = """\
Occupation: {occupation_name}
Section: {section}

Question:
{query}
"""


def build_system_prompt(section: Section) -> str:
    """Assembles the system prompt for one occupation section.

    Args:
        section: Section the answer will be displayed under.

    Returns:
        Complete system prompt string ready to send to the LLM.
    """
    return f"{EXPLAIN_SYSTEM_BASE}\n{SECTION_GUIDANCE[section]}\n"


def build_user_message(query: str, occupation_name: str, section: Section) -> str:
    """Assembles the user-turn message for the LLM.

    Args:
        query:           Question text exactly as the user asked it.
        occupation_name: Occupation the question is about.
        section:         Section the answer will be displayed under.

    Returns:
        Formatted user message string.
    """
    return EXPLAIN_USER_TEMPLATE.format(
        occupation_name=occupation_name,
        section=section.value,
        query=query,
    )
