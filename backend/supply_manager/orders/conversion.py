"""
Storefront order → customer order conversion.

Steps (each write commits on its own; there is no umbrella transaction):
  1. resolve the customer   – explicit choice, else email match, else create
  2. order name             – source name or CO-<YYYYMMDD>-<4 digits>
  3. discount percentage    – discount_amount / subtotal * 100
  4. insert the header      – failure aborts, nothing else is written
  5. insert the lines       – one commit per line, failures are collected
  6. annotate the source    – conditional on it not being converted already
  7. audit log              – best-effort

A customer created in step 1 is not removed if step 4 fails; that state goes
to the reconciliation log instead.
"""
from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from supply_manager.core.config import settings
from supply_manager.core.logging import reconcile_logger
from supply_manager.models.catalog import utcnow
from supply_manager.models.order import (
    CustomerOrder,
    CustomerOrderItem,
    StorefrontOrder,
    StorefrontOrderItem,
)
from supply_manager.models.party import Customer, StorefrontCustomer
from supply_manager.orders.audit import record_order_action
from supply_manager.orders.errors import ConversionError, ErrorKind
from supply_manager.schemas.base import WireModel


class ConversionOptions(WireModel):
    """Body of POST /api/storefront-orders/{id}/convert-to-customer-order."""

    notes: Optional[str] = None
    selected_customer_id: Optional[str] = None


class ConversionResult(WireModel):
    success: bool
    message: Optional[str] = None
    customer_order_id: Optional[str] = None
    item_errors: Optional[list[str]] = None
    error: Optional[str] = None
    stage: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def failure(cls, exc: ConversionError) -> "ConversionResult":
        return cls(success=False, error=exc.message, stage=exc.stage, details=exc.details)


# ── Helpers ───────────────────────────────────────────────────────────────────


def generate_order_name(now: Optional[datetime] = None) -> str:
    """CO-<YYYYMMDD>-<4 random digits>."""
    now = now or utcnow()
    return f"CO-{now:%Y%m%d}-{random.randint(0, 9999):04d}"


def discount_percentage(subtotal: Optional[float], discount_amount: Optional[float]) -> float:
    if subtotal and subtotal > 0 and discount_amount:
        return discount_amount / subtotal * 100
    return 0.0


def _resolve_customer(
    session: Session,
    shopper: Optional[StorefrontCustomer],
    options: ConversionOptions,
    now: datetime,
) -> tuple[Customer, bool]:
    """Returns (customer, was_created)."""
    if options.selected_customer_id:
        chosen = session.get(Customer, options.selected_customer_id)
        if chosen is None:
            raise ConversionError(
                ErrorKind.NOT_FOUND,
                "Selected customer not found",
                stage="customer",
                details=f"customer id {options.selected_customer_id}",
            )
        logger.info(f"Conversion: using selected customer {chosen.id}")
        return chosen, False

    if shopper is None:
        raise ConversionError(
            ErrorKind.NOT_FOUND, "Storefront customer not found", stage="customer"
        )

    if shopper.email:
        existing = session.exec(
            select(Customer).where(Customer.email == shopper.email)
        ).first()
        if existing:
            logger.info(f"Conversion: reusing customer {existing.id} matched on email")
            return existing, False

    customer = Customer(
        customer_name=shopper.customer_name,
        email=shopper.email,
        phone_number=shopper.phone_number,
        address=shopper.address,
        city=shopper.city,
        province_name=shopper.province_name,
        postal_code=shopper.postal_code,
        customer_type=shopper.customer_type or settings.DEFAULT_CUSTOMER_TYPE,
        date_created=now,
        date_last_updated=now,
    )
    try:
        session.add(customer)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Conversion: failed to create customer: {exc}")
        raise ConversionError(
            ErrorKind.WRITE_FAILED, "Failed to create customer", stage="customer", details=str(exc)
        ) from exc
    logger.info(f"Conversion: created customer {customer.id}")
    return customer, True


# ── Conversion ────────────────────────────────────────────────────────────────


def convert_order(
    session: Session,
    source: StorefrontOrder,
    shopper: Optional[StorefrontCustomer],
    source_items: list[StorefrontOrderItem],
    options: Optional[ConversionOptions] = None,
) -> ConversionResult:
    """Materialise ``source`` as a customer order. Raises ConversionError on terminal failure."""
    options = options or ConversionOptions()
    now = utcnow()
    source_id = source.id
    source_notes = source.notes
    shopper_address = shopper.address if shopper else None

    if source.converted_customer_order_id:
        raise ConversionError(
            ErrorKind.CONFLICT,
            "Storefront order has already been converted",
            stage="lookup",
            details=f"customer order id {source.converted_customer_order_id}",
        )

    # 1. customer
    customer, customer_created = _resolve_customer(session, shopper, options, now)
    customer_id = customer.id
    customer_address = customer.address

    # 2–4. header
    header = CustomerOrder(
        customer_id=customer_id,
        order_name=source.order_name or generate_order_name(now),
        status=source.status or "Processing",
        payment_status=source.payment_status or "Unpaid",
        delivery_method=source.delivery_method or "Delivery",
        delivery_date=source.delivery_date,
        delivery_time=source.delivery_time or "09:00",
        delivery_address=source.delivery_address or shopper_address or customer_address,
        delivery_instructions=source.delivery_instructions or "",
        notes=options.notes or "",
        tax_rate=source.tax_rate or settings.DEFAULT_TAX_RATE,
        amount_paid=source.amount_paid or 0.0,
        subtotal_order_value=source.subtotal_order_value or 0.0,
        total_order_value=source.total_order_value or 0.0,
        discount_percentage=discount_percentage(
            source.subtotal_order_value, source.discount_amount
        ),
        send_email=False,
        source_storefront_order_id=source_id,
        date_created=now,
        date_last_updated=now,
    )
    customer_order_id = header.id
    try:
        session.add(header)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Conversion: failed to create customer order for {source_id}: {exc}")
        if customer_created:
            reconcile_logger(customer_id=customer_id, storefront_order_id=source_id).error(
                "Customer created but customer order header failed"
            )
        raise ConversionError(
            ErrorKind.WRITE_FAILED,
            "Failed to create customer order",
            stage="order",
            details=str(exc),
        ) from exc
    logger.info(f"Conversion: created customer order {customer_order_id} for customer {customer_id}")

    # 5. lines
    item_errors: list[str] = []
    for item in source_items:
        if item.is_archived:
            continue
        unit_price = item.unit_price or 0.0
        quantity = item.quantity or 0.0
        line = CustomerOrderItem(
            customer_order_id=customer_order_id,
            product_id=item.product_id,
            variant_id=item.variant_id,
            unit_price=unit_price,
            quantity=quantity,
            discount_percentage=0.0,
            discount=0.0,
            total_order_item_value=unit_price * quantity,
            is_pallet=False,
            pallets=0,
            layers=0,
            date_created=now,
            date_last_updated=now,
        )
        try:
            session.add(line)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            reason = getattr(exc, "orig", None) or exc
            logger.error(f"Conversion: failed to copy storefront item {item.id}: {reason}")
            item_errors.append(f"Item {item.id}: {reason}")

    # 6. annotate the source, only if nobody converted it meanwhile
    note = f"Converted to customer order ID: {customer_order_id}"
    try:
        annotated = session.execute(
            update(StorefrontOrder)
            .where(
                StorefrontOrder.id == source_id,
                StorefrontOrder.converted_customer_order_id.is_(None),
            )
            .values(
                notes=f"{source_notes}. {note}" if source_notes else note,
                converted_customer_order_id=customer_order_id,
                date_last_updated=now,
            )
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        reconcile_logger(customer_order_id=customer_order_id, storefront_order_id=source_id).error(
            f"Customer order created but storefront order annotation failed: {exc}"
        )
    else:
        if annotated.rowcount == 0:
            reconcile_logger(customer_order_id=customer_order_id, storefront_order_id=source_id).error(
                "Customer order created but storefront order was converted concurrently"
            )
            raise ConversionError(
                ErrorKind.CONFLICT,
                "Storefront order was converted by another request",
                stage="annotate",
                details=f"orphaned customer order id {customer_order_id}",
            )

    # 7. audit
    record_order_action(session, source_id, "convert", details=note)

    if item_errors:
        logger.warning(
            f"Conversion of {source_id} finished with {len(item_errors)} item error(s)"
        )
    else:
        logger.info(f"Conversion of {source_id} completed")

    return ConversionResult(
        success=True,
        message="Order converted to customer order successfully",
        customer_order_id=customer_order_id,
        item_errors=item_errors or None,
    )


def convert_storefront_order(
    session: Session, order_id: str, options: Optional[ConversionOptions] = None
) -> ConversionResult:
    """Load the storefront order with its shopper and lines, then convert it."""
    source = session.get(StorefrontOrder, order_id)
    if source is None:
        raise ConversionError(
            ErrorKind.NOT_FOUND, "Storefront order not found", stage="lookup"
        )
    shopper = session.get(StorefrontCustomer, source.customer_id)
    items = list(
        session.exec(
            select(StorefrontOrderItem)
            .where(StorefrontOrderItem.order_id == order_id)
            .order_by(StorefrontOrderItem.date_created)
        ).all()
    )
    logger.info(f"Converting storefront order {order_id} ({len(items)} line(s))")
    return convert_order(session, source, shopper, items, options)
