"""
Storefront order API routes.

Endpoints:
  GET  /api/storefront-orders                                  – paginated list
  GET  /api/storefront-orders/{id}                             – header + shopper + lines
  GET  /api/storefront-orders/{id}/logs                        – audit trail
  POST /api/storefront-orders/{id}/convert-to-customer-order   – materialise as customer order
  POST /api/storefront-orders/{id}/accept
  POST /api/storefront-orders/{id}/reject
  POST /api/storefront-orders/{id}/archive
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from loguru import logger
from sqlmodel import Session, col, func, select

from supply_manager.core.database import get_session
from supply_manager.models.order import StorefrontOrder, StorefrontOrderItem, StorefrontOrderLog
from supply_manager.models.party import StorefrontCustomer
from supply_manager.orders.conversion import (
    ConversionOptions,
    ConversionResult,
    convert_storefront_order,
)
from supply_manager.orders.errors import ConversionError, OrderStateError
from supply_manager.orders.lifecycle import (
    accept_storefront_order,
    archive_storefront_order,
    reject_storefront_order,
)
from supply_manager.schemas.responses import (
    AcceptOrderIn,
    OrderActionResponse,
    OrderLogRead,
    RejectOrderIn,
    StorefrontCustomerRead,
    StorefrontOrderDetail,
    StorefrontOrderItemRead,
    StorefrontOrderListResponse,
    StorefrontOrderRead,
)

storefront_router = APIRouter(prefix="/api/storefront-orders", tags=["storefront-orders"])


def _action_response(order: StorefrontOrder, message: str) -> OrderActionResponse:
    return OrderActionResponse(success=True, message=message, order_id=order.id, status=order.status)


# ── Queries ───────────────────────────────────────────────────────────────────


@storefront_router.get("", response_model=StorefrontOrderListResponse)
def list_storefront_orders(
    status: Optional[str] = Query(default=None, description="Case-insensitive status filter"),
    search: Optional[str] = Query(default=None, description="Search order name"),
    include_archived: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    session: Session = Depends(get_session),
):
    stmt = select(StorefrontOrder)
    if not include_archived:
        stmt = stmt.where(StorefrontOrder.is_archived == False)  # noqa: E712
    if status:
        stmt = stmt.where(func.upper(StorefrontOrder.status) == status.upper())
    if search:
        stmt = stmt.where(col(StorefrontOrder.order_name).contains(search))

    total = session.exec(select(func.count()).select_from(stmt.subquery())).one()

    stmt = stmt.order_by(col(StorefrontOrder.date_created).desc())
    stmt = stmt.offset((page - 1) * page_size).limit(page_size)
    orders = session.exec(stmt).all()

    return StorefrontOrderListResponse(
        total=total,
        page=page,
        page_size=page_size,
        items=[StorefrontOrderRead.model_validate(o) for o in orders],
    )


@storefront_router.get("/{order_id}", response_model=StorefrontOrderDetail)
def get_storefront_order(order_id: str, session: Session = Depends(get_session)):
    order = session.get(StorefrontOrder, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Storefront order not found")

    items = session.exec(
        select(StorefrontOrderItem)
        .where(StorefrontOrderItem.order_id == order_id)
        .order_by(StorefrontOrderItem.date_created)
    ).all()
    shopper = session.get(StorefrontCustomer, order.customer_id)

    detail = StorefrontOrderDetail.model_validate(order)
    detail.customer = StorefrontCustomerRead.model_validate(shopper) if shopper else None
    detail.items = [StorefrontOrderItemRead.model_validate(i) for i in items]
    return detail


@storefront_router.get("/{order_id}/logs", response_model=list[OrderLogRead])
def list_order_logs(order_id: str, session: Session = Depends(get_session)):
    """Audit entries for one order, newest first."""
    logs = session.exec(
        select(StorefrontOrderLog)
        .where(StorefrontOrderLog.order_id == order_id)
        .order_by(col(StorefrontOrderLog.created_at).desc())
    ).all()
    return [OrderLogRead.model_validate(entry) for entry in logs]


# ── Actions ───────────────────────────────────────────────────────────────────


@storefront_router.post(
    "/{order_id}/convert-to-customer-order",
    response_model=ConversionResult,
    response_model_exclude_none=True,
)
def convert_to_customer_order(
    order_id: str,
    body: Optional[ConversionOptions] = Body(default=None),
    session: Session = Depends(get_session),
):
    """
    Convert a storefront order into a customer order.

    200 even when some lines failed to copy (see ``itemErrors``);
    404 unknown order or selected customer; 409 already converted;
    500 customer or header write failed.

    The body is optional; an empty body means no notes and no selected
    customer. A body that is not valid JSON, or has wrongly typed fields,
    is rejected with 422 before conversion starts.
    """
    try:
        return convert_storefront_order(session, order_id, body)
    except ConversionError as exc:
        logger.error(f"Conversion of {order_id} failed at {exc.stage}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ConversionResult.failure(exc).model_dump(by_alias=True, exclude_none=True),
        )


@storefront_router.post("/{order_id}/accept", response_model=OrderActionResponse)
def accept_order(
    order_id: str,
    body: Optional[AcceptOrderIn] = Body(default=None),
    session: Session = Depends(get_session),
):
    try:
        order = accept_storefront_order(session, order_id, body.notes if body else None)
    except OrderStateError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return _action_response(order, "Order accepted successfully")


@storefront_router.post("/{order_id}/reject", response_model=OrderActionResponse)
def reject_order(order_id: str, body: RejectOrderIn, session: Session = Depends(get_session)):
    try:
        order = reject_storefront_order(session, order_id, body.rejection_reason)
    except OrderStateError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return _action_response(order, "Order rejected")


@storefront_router.post("/{order_id}/archive", response_model=OrderActionResponse)
def archive_order(order_id: str, session: Session = Depends(get_session)):
    try:
        order = archive_storefront_order(session, order_id)
    except OrderStateError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return _action_response(order, "Order archived")
