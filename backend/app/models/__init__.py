"""ORM Models — SQLAlchemy declarative models for the order aggregate.

Invariants:
    - All models inherit from Base (db/base.py)
    - OrderRecord is the aggregate root; delivery, payment, items scoped by order_id

Design Decisions:
    - One file per table for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from app.models.order import OrderRecord  # noqa: F401
from app.models.delivery import DeliveryRecord  # noqa: F401
from app.models.payment import PaymentRecord  # noqa: F401
from app.models.item import ItemRecord  # noqa: F401
