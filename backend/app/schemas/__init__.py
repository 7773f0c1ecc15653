"""Pydantic Schemas — request/response/payload validation at system boundaries.

Invariants:
    - Schemas validate at system boundary (REST body, feed message, cache entry)
    - Conversion to core dataclasses happens here, never inside core/

Design Decisions:
    - Separate from models: schemas are wire contracts, models are persistence (ADR: DDD boundary)
"""
