"""Route Dependencies — hand out the services built in the lifespan.

Invariants:
    - Services live on app.state, constructed once per process in main.lifespan
    - Routes receive them through Depends(), never by importing module globals

Design Decisions:
    - app.state over module-level singletons: tests swap in fakes by assigning
      app.state attributes, without dependency_overrides bookkeeping
"""

from fastapi import Request

from app.services.cache_population import CachePopulationPolicy
from app.services.order_service import OrderReconciliationService


def get_order_service(request: Request) -> OrderReconciliationService:
    return request.app.state.order_service


def get_cache_policy(request: Request) -> CachePopulationPolicy:
    return request.app.state.cache_policy
