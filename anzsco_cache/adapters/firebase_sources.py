"""
adapters/firebase_sources.py
──────────────────────────────────────────────────────────────────────────────
Implements ClassificationSourcePort and DetailSourcePort against the public
ANZSCO datasets published on Firebase Realtime Database.

  OCCUPATION_SOURCE_URL  list of {"Occupation Name", "Anzsco Code",
                          "Alternative Title", "OSCA Code", …}
  DETAIL_SOURCE_URL      list of {"OCode", "OName", "Description",
                          "SLevel", "Tasks", …} at unit-group (4-digit) level

Both endpoints return either a JSON array or an object keyed by push-id;
both shapes are accepted.  Each call is a single GET with no retries.  A
failure reaches the caller and nothing gets cached.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from anzsco_cache.config.settings import Settings
from anzsco_cache.domain.exceptions import ExternalSourceError, UnknownOccupationError
from anzsco_cache.domain.models import (
    Classification,
    OccupationDetail,
    four_digit_code,
    normalize_occupation_name,
)

logger = logging.getLogger(__name__)

DETAIL_PROVENANCE = "Australian Bureau of Statistics"


def _fetch_records(url: str, timeout: int) -> list[dict]:
    """GET a Firebase dataset and flatten it to a list of record dicts."""
    try:
        resp = requests.get(
            url,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise ExternalSourceError(f"Request to {url} failed: {exc}") from exc

    if not resp.ok:
        logger.error("Source HTTP %d from %s: %s", resp.status_code, url, resp.text[:300])
        raise ExternalSourceError(f"{url} returned HTTP {resp.status_code}")

    try:
        data: Any = resp.json()
    except ValueError as exc:
        raise ExternalSourceError(f"{url} returned invalid JSON: {exc}") from exc

    if not data:
        raise ExternalSourceError(f"No data returned from {url}")
    if isinstance(data, dict):
        items = list(data.values())
    elif isinstance(data, list):
        items = data
    else:
        raise ExternalSourceError(
            f"{url} returned {type(data).__name__}, expected a JSON array or object"
        )
    return [item for item in items if isinstance(item, dict)]


def _text(record: dict, field: str) -> str:
    value = record.get(field)
    return "" if value is None else str(value).strip()


class FirebaseClassificationSource:
    """Resolves occupation names against the ANZSCO occupation list.

    Matching is exact on the normalised "Occupation Name" first, then on
    "Alternative Title".  No fuzzy matching.
    """

    def __init__(self, settings: Settings) -> None:
        self._url = settings.occupation_source_url
        self._link_template = settings.anzsco_link_template
        self._timeout = settings.source_timeout
        logger.debug("FirebaseClassificationSource ready | url=%s", self._url)

    def classify(self, occupation_name: str) -> Classification:
        wanted = normalize_occupation_name(occupation_name)
        records = _fetch_records(self._url, self._timeout)

        match = next(
            (r for r in records
             if normalize_occupation_name(_text(r, "Occupation Name")) == wanted),
            None,
        )
        if match is None:
            match = next(
                (r for r in records
                 if normalize_occupation_name(_text(r, "Alternative Title")) == wanted),
                None,
            )
        if match is None or not _text(match, "Anzsco Code"):
            raise UnknownOccupationError(
                f"No ANZSCO occupation named {occupation_name.strip()!r}"
            )

        code = _text(match, "Anzsco Code")
        logger.info("Classified %r → %s", occupation_name, code)
        return Classification(
            anzsco_code=code,
            direct_link=self._link_template.format(code=code),
            canonical_name=_text(match, "Occupation Name") or None,
        )


class FirebaseDetailSource:
    """Fetches unit-group metadata for an ANZSCO code.

    Six-digit occupation codes are reduced to their four-digit unit group
    before matching on "OCode".
    """

    def __init__(self, settings: Settings) -> None:
        self._url = settings.detail_source_url
        self._link_template = settings.anzsco_link_template
        self._timeout = settings.source_timeout
        logger.debug("FirebaseDetailSource ready | url=%s", self._url)

    def fetch_detail(self, anzsco_code: str) -> OccupationDetail:
        try:
            unit_code = four_digit_code(anzsco_code)
        except ValueError as exc:
            raise UnknownOccupationError(str(exc)) from exc

        records = _fetch_records(self._url, self._timeout)
        match = next((r for r in records if _text(r, "OCode") == unit_code), None)
        if match is None:
            raise UnknownOccupationError(f"No ANZSCO unit group {unit_code}")

        tasks = match.get("Tasks")
        title = _text(match, "OName")
        return OccupationDetail(
            title=title,
            unit_group=f"{unit_code} {title}".strip(),
            skill_level=_text(match, "SLevel"),
            tasks=[str(t) for t in tasks] if isinstance(tasks, list) else [],
            source=DETAIL_PROVENANCE,
            link=self._link_template.format(code=anzsco_code),
        )
