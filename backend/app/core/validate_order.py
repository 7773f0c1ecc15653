"""Order Validation — structural checks applied before any merge or persistence decision.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return ValidationError on violation, None on success (errors are values here;
      the service decides whether to raise)
    - validate_order chains all checks — first error wins
    - Field paths are dotted/indexed: "delivery.email", "items[2].price"
    - Storage bounds run last: structural rules keep their precedence

Design Decisions:
    - Delivery/Payment rules only fire when the sub-record is "present": a non-empty
      name / transaction id. All-empty sub-records are legal (partial feed updates)
    - Return values over exceptions: checks compose with `or` and test without mocks
"""

from app.core.domain_types import (
    DELIVERY_STRING_LIMITS, INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN,
    ITEM_INT_FIELDS, ITEM_STRING_LIMITS, ORDER_INT_FIELDS, ORDER_STRING_LIMITS,
    ORDER_UID_MAX_LENGTH, ORDER_UID_MIN_LENGTH, PAYMENT_BIGINT_FIELDS,
    PAYMENT_INT_FIELDS, PAYMENT_STRING_LIMITS,
)
from app.core.errors import ValidationError
from app.core.order import Delivery, Item, Order, Payment


def check_order_uid(uid: str) -> ValidationError | None:
    """Rule 1: uid non-empty, 10-255 chars, no spaces."""
    if not uid:
        return ValidationError("order_uid", "cannot be empty")
    if not ORDER_UID_MIN_LENGTH <= len(uid) <= ORDER_UID_MAX_LENGTH:
        return ValidationError(
            "order_uid",
            f"must be between {ORDER_UID_MIN_LENGTH} and "
            f"{ORDER_UID_MAX_LENGTH} characters",
        )
    if " " in uid:
        return ValidationError("order_uid", "cannot contain spaces")
    return None


def check_required_fields(order: Order) -> ValidationError | None:
    """Rule 2: track_number and customer_id are mandatory."""
    if not order.track_number:
        return ValidationError("track_number", "cannot be empty")
    if not order.customer_id:
        return ValidationError("customer_id", "cannot be empty")
    return None


def check_delivery(delivery: Delivery | None) -> ValidationError | None:
    """Rule 3: a named delivery needs phone and address; email must look like one."""
    if delivery is None or not delivery.name:
        return None
    if not delivery.phone:
        return ValidationError("delivery.phone", "cannot be empty")
    if not delivery.address:
        return ValidationError("delivery.address", "cannot be empty")
    if delivery.email and "@" not in delivery.email:
        return ValidationError("delivery.email", "invalid email format")
    return None


def check_payment(payment: Payment | None) -> ValidationError | None:
    """Rule 4: a payment with a transaction id needs currency, provider, amount > 0."""
    if payment is None or not payment.transaction:
        return None
    if not payment.currency:
        return ValidationError("payment.currency", "cannot be empty")
    if not payment.provider:
        return ValidationError("payment.provider", "cannot be empty")
    if payment.amount <= 0:
        return ValidationError("payment.amount", "must be greater than 0")
    return None


def check_item(item: Item, index: int) -> ValidationError | None:
    """Rule 5b: each item has a name, a brand and a positive price."""
    if not item.name:
        return ValidationError(f"items[{index}].name", "cannot be empty")
    if item.price <= 0:
        return ValidationError(f"items[{index}].price", "must be greater than 0")
    if not item.brand:
        return ValidationError(f"items[{index}].brand", "cannot be empty")
    return None


def check_items(items: list[Item]) -> ValidationError | None:
    """Rule 5: at least one item, each item valid."""
    if not items:
        return ValidationError("items", "order must contain at least one item")
    for index, item in enumerate(items):
        error = check_item(item, index)
        if error:
            return error
    return None


def check_field_bounds(
    path: str,
    record: object,
    string_limits: dict[str, int],
    int_fields: tuple[str, ...] = (),
    int_range: tuple[int, int] = (INT32_MIN, INT32_MAX),
) -> ValidationError | None:
    """Reject values the order tables cannot store (string width, integer range)."""
    prefix = f"{path}." if path else ""
    for name, limit in string_limits.items():
        if len(getattr(record, name)) > limit:
            return ValidationError(
                f"{prefix}{name}", f"must be at most {limit} characters",
            )
    low, high = int_range
    for name in int_fields:
        if not low <= getattr(record, name) <= high:
            return ValidationError(f"{prefix}{name}", "is out of range")
    return None


def check_storage_bounds(order: Order) -> ValidationError | None:
    """Rule 6: every value fits its column, so a valid order never fails on insert."""
    error = check_field_bounds("", order, ORDER_STRING_LIMITS, ORDER_INT_FIELDS)
    if error:
        return error
    if order.delivery is not None:
        error = check_field_bounds("delivery", order.delivery, DELIVERY_STRING_LIMITS)
        if error:
            return error
    if order.payment is not None:
        error = (
            check_field_bounds(
                "payment", order.payment, PAYMENT_STRING_LIMITS, PAYMENT_INT_FIELDS,
            )
            or check_field_bounds(
                "payment", order.payment, {}, PAYMENT_BIGINT_FIELDS,
                (INT64_MIN, INT64_MAX),
            )
        )
        if error:
            return error
    for index, item in enumerate(order.items):
        error = check_field_bounds(
            f"items[{index}]", item, ITEM_STRING_LIMITS, ITEM_INT_FIELDS,
        )
        if error:
            return error
    return None


def validate_order(order: Order) -> ValidationError | None:
    """Chain all order checks. Returns first error or None."""
    return (
        check_order_uid(order.order_uid)
        or check_required_fields(order)
        or check_delivery(order.delivery)
        or check_payment(order.payment)
        or check_items(order.items)
        or check_storage_bounds(order)
    )


def can_access_customer_order(customer_id: str, requesting_customer_id: str) -> bool:
    """Ownership stub: a customer may only read their own orders.

    Not a security boundary: the caller-supplied id is trusted as-is.
    """
    return customer_id == requesting_customer_id
