"""Accept / reject / archive transitions for storefront orders."""
from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from supply_manager.models.catalog import utcnow
from supply_manager.models.order import StorefrontOrder
from supply_manager.orders.audit import record_order_action
from supply_manager.orders.errors import ErrorKind, OrderStateError

ACCEPTABLE_STATUSES = {"pending", "rejected"}


def _load(session: Session, order_id: str) -> StorefrontOrder:
    order = session.get(StorefrontOrder, order_id)
    if order is None:
        raise OrderStateError(ErrorKind.NOT_FOUND, "Order not found")
    return order


def _save(session: Session, order: StorefrontOrder, failure: str) -> None:
    order.date_last_updated = utcnow()
    try:
        session.add(order)
        session.commit()
        session.refresh(order)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"{failure} ({order.id}): {exc}")
        raise OrderStateError(ErrorKind.WRITE_FAILED, failure, details=str(exc)) from exc


def accept_storefront_order(
    session: Session, order_id: str, notes: Optional[str] = None
) -> StorefrontOrder:
    """Approve a pending or previously rejected order."""
    order = _load(session, order_id)
    previous_status = order.status
    if order.is_archived or (previous_status or "").lower() not in ACCEPTABLE_STATUSES:
        raise OrderStateError(
            ErrorKind.INVALID_STATE,
            "Order cannot be accepted. It may be archived or in an invalid state.",
        )

    order.status = "Approved"
    if notes:
        order.notes = notes
    _save(session, order, "Failed to update order status")
    logger.info(f"Storefront order {order_id} accepted ({previous_status} → Approved)")

    record_order_action(
        session,
        order_id,
        "accept",
        details=notes or "Order accepted",
        previous_status=previous_status,
        new_status="Approved",
    )
    return order


def reject_storefront_order(session: Session, order_id: str, reason: Optional[str]) -> StorefrontOrder:
    if not (reason or "").strip():
        raise OrderStateError(ErrorKind.INVALID_INPUT, "Rejection reason is required")

    order = _load(session, order_id)
    previous_status = order.status
    order.status = "Rejected"
    order.reject_reason = reason.strip()
    _save(session, order, "Failed to reject the order")
    logger.info(f"Storefront order {order_id} rejected")

    record_order_action(
        session,
        order_id,
        "reject",
        details=f"Order rejected. Reason: {order.reject_reason}",
        previous_status=previous_status,
        new_status="Rejected",
    )
    return order


def archive_storefront_order(session: Session, order_id: str) -> StorefrontOrder:
    """Soft delete. Archived orders drop out of the default listing."""
    order = _load(session, order_id)
    if order.is_archived:
        return order
    order.is_archived = True
    _save(session, order, "Failed to archive the order")
    logger.info(f"Storefront order {order_id} archived")

    record_order_action(session, order_id, "archive", details="Order archived")
    return order
