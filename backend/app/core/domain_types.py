"""Domain Types — identity types and bounds shared across the order domain.

Invariants:
    - CacheKey wraps str: only cache_key() builds one
    - ORDER_UID_MIN_LENGTH <= len(uid) <= ORDER_UID_MAX_LENGTH for every stored order
    - MIN_CACHE_ENTRIES is the smallest cache bound the configuration layer accepts
    - *_STRING_LIMITS / *_INT_FIELDS are the single source for column widths (models
      read them) and for the storage-bound checks in validate_order.py

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CacheKey = NewType("CacheKey", str)


# ─── Bounds ──────────────────────────────────────────────────────

ORDER_UID_MIN_LENGTH = 10
ORDER_UID_MAX_LENGTH = 255
MIN_CACHE_ENTRIES = 5


def cache_key(prefix: str, uid: str) -> CacheKey:
    """Build the cache key for an order uid (e.g. 'order:b563feb7b2b84b6test')."""
    return CacheKey(f"{prefix}{uid}")


# ─── Storage Bounds ──────────────────────────────────────────────
# Column widths of the order tables; validation rejects what would not fit.

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

ORDER_STRING_LIMITS = {
    "track_number": 255, "entry": 255, "locale": 10, "internal_signature": 255,
    "customer_id": 255, "delivery_service": 255, "shardkey": 50, "oof_shard": 50,
}
DELIVERY_STRING_LIMITS = {
    "name": 255, "phone": 50, "zip": 20, "city": 255, "address": 500,
    "region": 255, "email": 255,
}
PAYMENT_STRING_LIMITS = {
    "transaction": 255, "request_id": 255, "currency": 10, "provider": 100,
    "bank": 100,
}
ITEM_STRING_LIMITS = {
    "track_number": 255, "rid": 255, "name": 255, "size": 50, "brand": 255,
}

ORDER_INT_FIELDS = ("sm_id",)
PAYMENT_INT_FIELDS = ("amount", "delivery_cost", "goods_total", "custom_fee")
PAYMENT_BIGINT_FIELDS = ("payment_dt",)
ITEM_INT_FIELDS = ("chrt_id", "price", "sale", "total_price", "nm_id", "status")
