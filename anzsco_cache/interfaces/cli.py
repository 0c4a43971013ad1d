"""
interfaces/cli.py
──────────────────────────────────────────────────────────────────────────────
Command-line interface for the ANZSCO cache.

Usage:
  # Resolve an occupation (code, link, unit group, tasks)
  python -m anzsco_cache.interfaces.cli occupation "Software Engineer"

  # Ask a question about one section of an occupation
  python -m anzsco_cache.interfaces.cli ask "What skills are needed?" \
      --occupation "Software Engineer" --section assessment

  # Drop query records outside the retention window (run from cron)
  python -m anzsco_cache.interfaces.cli evict

  # JSON output / debug logging
  anzsco-cache --verbose occupation "nurse" --json

Exit codes:
  0 — success
  1 — cache or source error (printed as "unavailable")
  2 — argument error
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from anzsco_cache.domain.exceptions import ANZSCOCacheError
from anzsco_cache.domain.models import OccupationLookup, QueryRecord, Section
from anzsco_cache.services.container import build_facade
from anzsco_cache.services.facade import CacheFacade

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="anzsco-cache",
        description="Look up ANZSCO occupations and cached AI explanations.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    occ = sub.add_parser("occupation", help="Resolve an occupation name.")
    occ.add_argument("name", metavar="NAME", help="Occupation name, e.g. 'Software Engineer'.")
    occ.add_argument("--json", action="store_true", dest="json_output", help="Output JSON.")

    ask = sub.add_parser("ask", help="Answer a question about an occupation section.")
    ask.add_argument("query", metavar="QUERY", help="Question text.")
    ask.add_argument("--occupation", "-o", required=True, help="Occupation name.")
    ask.add_argument(
        "--section", "-s",
        required=True,
        choices=[s.value for s in Section],
        help="Section the answer is for.",
    )
    ask.add_argument("--json", action="store_true", dest="json_output", help="Output JSON.")

    evict = sub.add_parser("evict", help="Evict query records outside the retention window.")
    evict.add_argument("--json", action="store_true", dest="json_output", help="Output JSON.")
    return p


# ── Formatting helpers ─────────────────────────────────────────────────────

def _print_occupation(lookup: OccupationLookup, as_json: bool) -> None:
    if as_json:
        print(json.dumps(lookup.to_dict(), indent=2, ensure_ascii=False))
        return
    entry, detail = lookup.entry, lookup.detail
    print(f"\n{'─' * 60}")
    print(f"Occupation : {entry.occupation_name}")
    print(f"ANZSCO     : {entry.anzsco_code}")
    if entry.direct_link:
        print(f"Link       : {entry.direct_link}")
    print(f"{'─' * 60}")
    print(f"  Title       : {detail.title}")
    if detail.unit_group:
        print(f"  Unit group  : {detail.unit_group}")
    if detail.skill_level:
        print(f"  Skill level : {detail.skill_level}")
    for i, task in enumerate(detail.tasks, 1):
        print(f"  {i:>2}. {task}")
    if detail.source:
        print(f"  Source: {detail.source}")
    print()


def _print_answer(record: QueryRecord, as_json: bool) -> None:
    if as_json:
        print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
        return
    print(f"\n{'─' * 60}")
    print(f"{record.occupation_name}  |  {record.section.value}")
    print(f"Q: {record.query}")
    print(f"{'─' * 60}")
    print(record.response)
    print(f"\n(source: {record.source}, cached {record.created_at:%Y-%m-%d %H:%M} UTC)\n")


# ── Main logic ─────────────────────────────────────────────────────────────

def run(args: argparse.Namespace, facade: CacheFacade | None = None) -> int:
    """Execute one command against a CacheFacade.

    Args:
        args:   Parsed command-line arguments.
        facade: Facade to use; built from settings when omitted.

    Returns:
        Exit code (0 = success, 1 = unavailable, 2 = bad input).
    """
    if facade is None:
        try:
            facade = build_facade()
        except ANZSCOCacheError as exc:
            logger.exception("Failed to initialise cache")
            print(f"unavailable: {exc}", file=sys.stderr)
            return 1

    try:
        if args.command == "occupation":
            _print_occupation(facade.resolve_occupation(args.name), args.json_output)
        elif args.command == "ask":
            record = facade.answer_query(args.query, args.occupation, args.section)
            _print_answer(record, args.json_output)
        elif args.command == "evict":
            removed = facade.evict_stale()
            if args.json_output:
                print(json.dumps({"evicted": removed}))
            else:
                print(f"Evicted {removed} query record(s).")
        else:
            print(f"ERROR: unknown command {args.command!r}", file=sys.stderr)
            return 2
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except ANZSCOCacheError as exc:
        logger.exception("%s failed", args.command)
        print(f"unavailable: {exc}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """Entry point for the anzsco-cache console script."""
    parser = _build_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(2)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
