"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects — Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • adapters produce and consume them
  • services store and orchestrate them
  • interfaces (CLI, future API) serialise them

Every record is persisted as ``model_dump(mode="json")`` and restored with
``model_validate`` — the document stores never see anything but plain dicts.
"""
from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ── Enums ──────────────────────────────────────────────────────────────────────

class Section(str, Enum):
    """Occupation page sections the LLM writes explanatory text for."""
    VISA        = "visa"
    DETAILS     = "details"
    ASSESSMENT  = "assessment"
    EOI         = "eoi"
    NOMINATION  = "nomination"


# ── Key normalisation ──────────────────────────────────────────────────────────

def normalize_occupation_name(name: str) -> str:
    """Natural-key form of an occupation name: trimmed and case-folded."""
    return name.strip().casefold()


def normalize_section(section: str | Section) -> Section:
    """Trim and case-fold a section tag into a Section.

    Raises:
        ValueError: If the tag is not one of the fixed section names.
    """
    if isinstance(section, Section):
        return section
    tag = str(section).strip().casefold()
    try:
        return Section(tag)
    except ValueError:
        valid = ", ".join(s.value for s in Section)
        raise ValueError(f"Unknown section {section!r}. Valid sections: {valid}") from None


def four_digit_code(anzsco_code: str) -> str:
    """Reduce an ANZSCO code to its four-digit unit group.

    Non-digits are stripped and the first four digits kept, so "261313"
    and "2613-13" both map to "2613".

    Raises:
        ValueError: If the code contains no digits at all.
    """
    digits = re.sub(r"\D", "", str(anzsco_code))
    if not digits:
        raise ValueError(f"Invalid ANZSCO code {anzsco_code!r}: no digits found")
    return digits[:4]


# ── Occupation tier ────────────────────────────────────────────────────────────

class OccupationEntry(BaseModel):
    """Occupation Index record: free-text name → ANZSCO code + reference link."""

    occupation_name: str = Field(..., min_length=1, max_length=300)
    anzsco_code:     str = Field(..., min_length=1, max_length=20)
    direct_link:     str = ""

    @field_validator("occupation_name", "anzsco_code", "direct_link")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @property
    def key(self) -> str:
        return normalize_occupation_name(self.occupation_name)


class OccupationDetail(BaseModel):
    """Enriched metadata for one ANZSCO code.

    ``tasks`` keeps source order verbatim: no sorting, no de-duplication.
    """

    title:       str
    unit_group:  str = ""
    skill_level: str = ""
    tasks:       list[str] = Field(default_factory=list)
    source:      str = ""
    link:        str = ""


class OccupationLookup(BaseModel):
    """Result of CacheFacade.resolve_occupation()."""

    entry:  OccupationEntry
    detail: OccupationDetail

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


# ── Query tier ─────────────────────────────────────────────────────────────────

class QueryRecord(BaseModel):
    """A generated answer cached under its (query, occupation, section) key."""

    id:              str
    query:           str
    occupation_name: str
    section:         Section
    response:        str
    created_at:      datetime
    accessed_at:     datetime
    source:          str = ""

    @model_validator(mode="after")
    def accessed_not_before_created(self) -> "QueryRecord":
        if self.accessed_at < self.created_at:
            raise ValueError("accessed_at must not precede created_at")
        return self

    def to_dict(self) -> dict:
        """Serialise to a plain dict (ISO timestamps, section as string)."""
        return self.model_dump(mode="json")


# ── External source payloads ───────────────────────────────────────────────────

class Classification(BaseModel):
    """What a classification source returns for an occupation name."""

    anzsco_code:    str = Field(..., min_length=1)
    direct_link:    str = ""
    # The source's own spelling, for logging only.  Index entries keep the
    # name the caller asked for so later lookups by that name hit.
    canonical_name: Optional[str] = None


class GeneratedResponse(BaseModel):
    """What a generation source returns for a query."""

    response: str = Field(..., min_length=1)
    source:   str = ""
