"""
ANZSCO Occupation Cache — Production Package
=============================================
Hexagonal (Ports & Adapters) architecture.

Two-tier cache in front of the ANZSCO occupation sources and the LLM that
writes explanatory text for each occupation section:

  Occupation Index   name → (ANZSCO code, reference link)   append-only
  Detail Store       code → enriched occupation metadata    replace-only
  Query Cache        (query, occupation, section) → answer  evictable

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings & prompt strings
  domain/       Pure business objects (models, exceptions) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (Firebase, Postgres…)
  services/     Stores + CacheFacade; depend only on Ports, never Adapters
  interfaces/   Delivery layer: CLI
  tests/        Full test suite: unit / integration / e2e

Swapping any external dependency (LLM, occupation source, document store):
  1. Write a new adapter in adapters/ implementing the relevant Port
  2. Add a provider branch in services/container.py
  3. Done — zero other files touched
"""
__version__ = "1.0.0"
