"""Cache Capacity Arithmetic — pure sizing decisions for the bounded order cache.

Invariants:
    - All functions are PURE and never return negative counts
    - current - evictions + loads <= max_entries for every plan produced here

Design Decisions:
    - Arithmetic split from the IO policy (services/cache_population.py) so the bound
      can be tested without a cache
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PreloadPlan:
    """How many entries to evict and how many orders to load at startup."""
    evict: int
    load: int


def eviction_count(current: int, incoming: int, max_entries: int) -> int:
    """Entries to evict so that current + incoming fits into max_entries."""
    overflow = current + incoming - max_entries
    return min(max(overflow, 0), current)


def plan_preload(current: int, max_entries: int, limit: int | None = None) -> PreloadPlan:
    """Plan a startup preload.

    A full (or over-full) cache evicts current - max_entries + 1 entries so at
    least one fresh order can be loaded; the load then fills the free slots,
    capped by limit.
    """
    evict = current - max_entries + 1 if current >= max_entries else 0
    free = max_entries - (current - evict)
    load = free if limit is None else min(free, max(limit, 0))
    return PreloadPlan(evict=evict, load=load)
