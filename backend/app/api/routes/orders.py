"""Order Routes — point lookups, upserts, listing and cache statistics.

Invariants:
    - Routes hold no logic beyond schema mapping; decisions live in the service
    - Typed service errors propagate to the global handlers (400/403/404/409/500)
    - GET /order/cache/stats is declared before GET /order/{uid} so it is not
      captured as a uid

Design Decisions:
    - X-Customer-Id is an optional ownership hint, not authentication
      (ADR: stub until a real identity provider exists)
"""

import logging

from fastapi import APIRouter, Depends, Header, Query, status

from app.api.dependencies import get_cache_policy, get_order_service
from app.core.errors import ForbiddenError
from app.core.validate_order import can_access_customer_order
from app.schemas.order import CacheStatsResponse, OrderListResponse, OrderSchema
from app.services.cache_population import CachePopulationPolicy
from app.services.order_service import OrderReconciliationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/order", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def list_orders(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: OrderReconciliationService = Depends(get_order_service),
):
    """List stored orders, newest first."""
    orders = await service.list_orders(limit, offset)
    return OrderListResponse(
        orders=[OrderSchema.from_domain(o) for o in orders],
        limit=limit,
        offset=offset,
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(
    policy: CachePopulationPolicy = Depends(get_cache_policy),
):
    return CacheStatsResponse(
        cached_orders=await policy.current_size(),
        max_orders=policy.max_entries,
    )


@router.get("/{uid}", response_model=OrderSchema)
async def get_order(
    uid: str,
    x_customer_id: str | None = Header(None),
    service: OrderReconciliationService = Depends(get_order_service),
):
    """Read-through lookup: cache first, then the store."""
    order = await service.get_by_uid(uid)
    if x_customer_id and not can_access_customer_order(
        order.customer_id, x_customer_id,
    ):
        logger.warning(
            "Customer mismatch on order lookup", extra={"order_uid": uid},
        )
        raise ForbiddenError("order belongs to another customer")
    return OrderSchema.from_domain(order)


@router.post(
    "", response_model=OrderSchema,
    status_code=status.HTTP_201_CREATED,
)
async def create_or_update_order(
    body: OrderSchema,
    service: OrderReconciliationService = Depends(get_order_service),
):
    """Insert a new order or merge the body into the stored one."""
    order = body.to_domain()
    await service.create_or_update(order)
    return OrderSchema.from_domain(order)
