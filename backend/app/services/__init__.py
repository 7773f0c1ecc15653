"""Services Layer — order reconciliation and cache population orchestration.

Invariants:
    - Services depend on core/repository_protocols.py, never on concrete adapters
    - Pure decisions (merge, validation, sizing) delegated to core/

Design Decisions:
    - Two services, one per concern: reconciliation and bounded-cache population
"""
