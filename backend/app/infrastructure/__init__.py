"""Infrastructure Layer — store, cache and feed adapters plus cross-cutting concerns.

Invariants:
    - Infrastructure implements core/repository_protocols.py, never core decision logic
    - All external failures mapped to typed errors from core/errors.py

Design Decisions:
    - Thin adapters over raw clients (ADR: single responsibility)
"""
