from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"


class UserRole(str, Enum):
    ORDER_TAKER = "order_taker"
    KITCHEN = "kitchen"
    DELIVERY = "delivery"
    ADMIN = "admin"


STATUS_FLOW: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
)

KITCHEN_STATUSES = frozenset({OrderStatus.PREPARING, OrderStatus.READY})
DELIVERY_STATUSES = frozenset({OrderStatus.DELIVERED})

BOARD_STATUSES: dict[UserRole, tuple[OrderStatus, ...]] = {
    UserRole.KITCHEN: (OrderStatus.PENDING, OrderStatus.PREPARING),
    UserRole.DELIVERY: (OrderStatus.READY,),
    UserRole.ORDER_TAKER: STATUS_FLOW,
    UserRole.ADMIN: STATUS_FLOW,
}


class StatusChangeError(ValueError):
    pass


class InvalidStatusError(StatusChangeError):
    pass


class InvalidRoleError(StatusChangeError):
    pass


class StatusPermissionError(StatusChangeError):
    pass


@dataclass(frozen=True)
class StatusChange:
    previous: OrderStatus
    current: OrderStatus
    changed: bool


def parse_status(value: Union[str, OrderStatus, None]) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError as exc:
        raise InvalidStatusError("Invalid status") from exc


def parse_role(value: Union[str, UserRole, None]) -> UserRole:
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole((value or "").strip().lower())
    except ValueError as exc:
        raise InvalidRoleError("Invalid role") from exc


def next_status(status: Union[str, OrderStatus]) -> Optional[OrderStatus]:
    current = parse_status(status)
    index = STATUS_FLOW.index(current)
    if index + 1 >= len(STATUS_FLOW):
        return None
    return STATUS_FLOW[index + 1]


def allowed_statuses_for(role: Union[str, UserRole]) -> frozenset[OrderStatus]:
    resolved = parse_role(role)
    if resolved is UserRole.KITCHEN:
        return KITCHEN_STATUSES
    if resolved is UserRole.DELIVERY:
        return DELIVERY_STATUSES
    return frozenset(STATUS_FLOW)


def board_statuses(role: Union[str, UserRole]) -> tuple[OrderStatus, ...]:
    return BOARD_STATUSES[parse_role(role)]


def authorize_status_change(
    role: Union[str, UserRole],
    current: Union[str, OrderStatus],
    requested: Union[str, OrderStatus],
    *,
    deleted: bool = False,
) -> StatusChange:
    """Check that ``role`` may move an order from ``current`` to ``requested``.

    Staff are not forced through the flow one step at a time: the kitchen
    may move an order back to preparing, and an admin can set any status.
    What each role may *set* is restricted.
    """
    resolved_role = parse_role(role)
    requested_status = parse_status(requested)
    current_status = parse_status(current)

    if resolved_role is UserRole.KITCHEN and requested_status not in KITCHEN_STATUSES:
        logger.warning(
            "Status change denied: role=%s requested=%s",
            resolved_role.value,
            requested_status.value,
        )
        raise StatusPermissionError("Kitchen staff can only update to preparing or ready")

    if resolved_role is UserRole.DELIVERY and requested_status not in DELIVERY_STATUSES:
        logger.warning(
            "Status change denied: role=%s requested=%s",
            resolved_role.value,
            requested_status.value,
        )
        raise StatusPermissionError("Delivery staff can only update to delivered")

    if deleted:
        raise StatusChangeError("Cannot update status of deleted order")

    changed = current_status is not requested_status
    if changed:
        logger.info(
            "Order status change authorized: role=%s %s -> %s",
            resolved_role.value,
            current_status.value,
            requested_status.value,
        )
    return StatusChange(previous=current_status, current=requested_status, changed=changed)
