"""Pydantic request/response schemas for API endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from supply_manager.inventory.stock import LowStockVariant
from supply_manager.schemas.base import WireModel


class HealthResponse(WireModel):
    status: str
    db: str
    version: str = "1.0.0"


# ── Customers ─────────────────────────────────────────────────────────────────


class CustomerRead(WireModel):
    id: str
    customer_name: str
    email: Optional[str]
    phone_number: Optional[str]
    address: Optional[str]
    city: Optional[str]
    province_name: Optional[str]
    postal_code: Optional[str]
    customer_type: str
    is_archived: bool


class StorefrontCustomerRead(WireModel):
    id: str
    customer_name: str
    email: Optional[str]
    phone_number: Optional[str]
    address: Optional[str]
    city: Optional[str]
    province_name: Optional[str]
    postal_code: Optional[str]
    customer_type: Optional[str]


# ── Storefront orders ─────────────────────────────────────────────────────────


class StorefrontOrderItemRead(WireModel):
    id: str
    product_id: Optional[str]
    variant_id: Optional[str]
    unit_price: Optional[float]
    quantity: Optional[float]
    total_price: Optional[float]
    is_archived: bool


class StorefrontOrderRead(WireModel):
    id: str
    customer_id: str
    order_name: Optional[str]
    status: str
    payment_status: Optional[str]
    delivery_method: Optional[str]
    delivery_date: Optional[date]
    delivery_time: Optional[str]
    delivery_address: Optional[str]
    notes: Optional[str]
    reject_reason: Optional[str]
    subtotal_order_value: Optional[float]
    discount_amount: Optional[float]
    total_order_value: Optional[float]
    converted_customer_order_id: Optional[str]
    is_archived: bool
    date_created: datetime
    date_last_updated: datetime


class StorefrontOrderDetail(StorefrontOrderRead):
    customer: Optional[StorefrontCustomerRead] = None
    items: list[StorefrontOrderItemRead] = []


class StorefrontOrderListResponse(WireModel):
    total: int
    page: int
    page_size: int
    items: list[StorefrontOrderRead]


class OrderLogRead(WireModel):
    id: str
    order_id: str
    action: str
    details: Optional[str]
    previous_status: Optional[str]
    new_status: Optional[str]
    created_at: datetime


class AcceptOrderIn(WireModel):
    notes: Optional[str] = None


class RejectOrderIn(WireModel):
    rejection_reason: Optional[str] = None


class OrderActionResponse(WireModel):
    success: bool
    message: str
    order_id: str
    status: str


# ── Customer orders ───────────────────────────────────────────────────────────


class CustomerOrderItemRead(WireModel):
    id: str
    product_id: str
    variant_id: Optional[str]
    unit_price: float
    quantity: float
    discount_percentage: float
    discount: float
    total_order_item_value: float
    is_pallet: bool
    pallets: int
    layers: int


class CustomerOrderRead(WireModel):
    id: str
    customer_id: str
    order_name: str
    status: str
    payment_status: str
    delivery_method: str
    delivery_date: Optional[date]
    delivery_time: Optional[str]
    delivery_address: Optional[str]
    delivery_instructions: str
    notes: str
    tax_rate: float
    amount_paid: float
    subtotal_order_value: float
    total_order_value: float
    discount_percentage: float
    send_email: bool
    source_storefront_order_id: Optional[str]
    date_created: datetime


class CustomerOrderDetail(CustomerOrderRead):
    items: list[CustomerOrderItemRead] = []


# ── Inventory ─────────────────────────────────────────────────────────────────


class LowStockReport(WireModel):
    count: int
    items: list[LowStockVariant]
