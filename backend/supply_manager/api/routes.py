"""
Core REST API routes.

Endpoints:
  GET  /api/health
  GET  /api/customers
  GET  /api/customers/{id}
  GET  /api/customer-orders/{id}
  GET  /api/customer-orders/{id}/export     – order sheet as .xlsx
"""
from __future__ import annotations

import io
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlmodel import Session, col, select

from supply_manager.core.database import get_session
from supply_manager.models.catalog import Product, ProductVariant
from supply_manager.models.order import CustomerOrder, CustomerOrderItem
from supply_manager.models.party import Customer
from supply_manager.schemas.responses import (
    CustomerOrderDetail,
    CustomerOrderItemRead,
    CustomerRead,
    HealthResponse,
)

router = APIRouter(prefix="/api")


# ── Health ────────────────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
def health(session: Session = Depends(get_session)):
    try:
        session.exec(select(Customer).limit(1))
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {e}"
    return HealthResponse(status="ok", db=db_status)


# ── Customers ─────────────────────────────────────────────────────────────────


@router.get("/customers", response_model=list[CustomerRead])
def list_customers(
    search: Optional[str] = Query(default=None, description="Search name or email"),
    include_archived: bool = Query(default=False),
    limit: int = Query(default=100, ge=1, le=1000),
    session: Session = Depends(get_session),
):
    """Customer picker for the conversion dialog."""
    stmt = select(Customer)
    if not include_archived:
        stmt = stmt.where(Customer.is_archived == False)  # noqa: E712
    if search:
        stmt = stmt.where(
            (col(Customer.customer_name).contains(search))
            | (col(Customer.email).contains(search))
        )
    stmt = stmt.order_by(Customer.customer_name).limit(limit)
    return [CustomerRead.model_validate(c) for c in session.exec(stmt).all()]


@router.get("/customers/{customer_id}", response_model=CustomerRead)
def get_customer(customer_id: str, session: Session = Depends(get_session)):
    customer = session.get(Customer, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerRead.model_validate(customer)


# ── Customer orders ───────────────────────────────────────────────────────────


def _load_customer_order(session: Session, order_id: str) -> tuple[CustomerOrder, list[CustomerOrderItem]]:
    order = session.get(CustomerOrder, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Customer order not found")
    items = session.exec(
        select(CustomerOrderItem)
        .where(
            CustomerOrderItem.customer_order_id == order_id,
            CustomerOrderItem.is_archived == False,  # noqa: E712
        )
        .order_by(CustomerOrderItem.date_created)
    ).all()
    return order, list(items)


@router.get("/customer-orders/{order_id}", response_model=CustomerOrderDetail)
def get_customer_order(order_id: str, session: Session = Depends(get_session)):
    order, items = _load_customer_order(session, order_id)
    detail = CustomerOrderDetail.model_validate(order)
    detail.items = [CustomerOrderItemRead.model_validate(i) for i in items]
    return detail


@router.get("/customer-orders/{order_id}/export")
def export_customer_order(order_id: str, session: Session = Depends(get_session)):
    """Order sheet (header block + line table + totals) as an .xlsx download."""
    order, items = _load_customer_order(session, order_id)
    customer = session.get(Customer, order.customer_id)

    variant_ids = {i.variant_id for i in items if i.variant_id}
    product_ids = {i.product_id for i in items}
    variants = {
        v.id: v
        for v in session.exec(
            select(ProductVariant).where(col(ProductVariant.id).in_(variant_ids))
        ).all()
    } if variant_ids else {}
    products = {
        p.id: p
        for p in session.exec(select(Product).where(col(Product.id).in_(product_ids))).all()
    } if product_ids else {}

    wb = Workbook()
    ws = wb.active
    ws.title = "Order"

    title_font = Font(bold=True, size=14)
    label_font = Font(bold=True, size=10)
    header_fill = PatternFill(start_color="1F3864", end_color="1F3864", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=10)
    row_font = Font(size=10)
    center = Alignment(horizontal="center", vertical="center")

    ws.cell(row=1, column=1, value=f"Order {order.order_name}").font = title_font

    # ── Header block ──────────────────────────────────────────────────────────
    info = [
        ("Customer", customer.customer_name if customer else order.customer_id),
        ("Email", customer.email if customer else ""),
        ("Status", order.status),
        ("Payment", order.payment_status),
        ("Delivery", order.delivery_method),
        ("Delivery date", str(order.delivery_date) if order.delivery_date else ""),
        ("Delivery time", order.delivery_time or ""),
        ("Address", order.delivery_address or ""),
        ("Instructions", order.delivery_instructions),
        ("Notes", order.notes),
    ]
    for offset, (label, value) in enumerate(info):
        ws.cell(row=3 + offset, column=1, value=label).font = label_font
        ws.cell(row=3 + offset, column=2, value=value).font = row_font

    # ── Line table ────────────────────────────────────────────────────────────
    table_row = 3 + len(info) + 1
    headers = ["Product", "Variant", "Quantity", "Unit", "Unit Price", "Discount %", "Total"]
    for col_idx, h in enumerate(headers, 1):
        cell = ws.cell(row=table_row, column=col_idx, value=h)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = center

    for row_idx, item in enumerate(items, table_row + 1):
        product = products.get(item.product_id)
        variant = variants.get(item.variant_id) if item.variant_id else None
        data = [
            product.product_name if product else item.product_id,
            variant.product_variant_name if variant else "",
            round(item.quantity, 3),
            (product.unit or "") if product else "",
            round(item.unit_price, 2),
            round(item.discount_percentage, 2),
            round(item.total_order_item_value, 2),
        ]
        for col_idx, val in enumerate(data, 1):
            ws.cell(row=row_idx, column=col_idx, value=val).font = row_font

    # ── Totals ────────────────────────────────────────────────────────────────
    totals_row = table_row + len(items) + 2
    totals = [
        ("Subtotal", round(order.subtotal_order_value, 2)),
        ("Discount %", round(order.discount_percentage, 2)),
        ("Tax rate %", round(order.tax_rate, 2)),
        ("Total", round(order.total_order_value, 2)),
        ("Amount paid", round(order.amount_paid, 2)),
    ]
    for offset, (label, value) in enumerate(totals):
        ws.cell(row=totals_row + offset, column=6, value=label).font = label_font
        ws.cell(row=totals_row + offset, column=7, value=value).font = row_font

    for col_idx, width in enumerate([28, 24, 12, 14, 12, 12, 14], 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    logger.info(f"Exported customer order {order.order_name} ({len(items)} line(s))")

    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={order.order_name}.xlsx"},
    )
