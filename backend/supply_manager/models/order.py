"""SQLModel models for storefront orders, customer orders, their lines and the order audit log."""
from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field

from supply_manager.models.catalog import _new_id, utcnow


class StorefrontOrder(SQLModel, table=True):
    """Order placed through the public storefront, awaiting review or conversion."""

    __tablename__ = "storefront_orders"

    id: str = Field(default_factory=_new_id, primary_key=True)
    customer_id: str = Field(foreign_key="storefront_customers.id", index=True)
    order_name: Optional[str] = None

    status: str = Field(default="Pending", index=True)  # Pending, Approved, Rejected …
    payment_status: Optional[str] = None

    # Delivery
    delivery_method: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_time: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_instructions: Optional[str] = None

    notes: Optional[str] = None
    reject_reason: Optional[str] = None

    # Financial
    tax_rate: Optional[float] = None
    amount_paid: Optional[float] = None
    subtotal_order_value: Optional[float] = None
    discount_amount: Optional[float] = None
    total_order_value: Optional[float] = None

    # Set once, by the conversion that won; guards against double conversion
    converted_customer_order_id: Optional[str] = Field(default=None, index=True)

    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)


class StorefrontOrderItem(SQLModel, table=True):
    """A single line of a storefront order."""

    __tablename__ = "storefront_order_items"

    id: str = Field(default_factory=_new_id, primary_key=True)
    order_id: str = Field(foreign_key="storefront_orders.id", index=True)
    product_id: Optional[str] = None
    variant_id: Optional[str] = None
    unit_price: Optional[float] = None
    quantity: Optional[float] = None
    total_price: Optional[float] = None
    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)


class CustomerOrder(SQLModel, table=True):
    """Internal customer order header."""

    __tablename__ = "customer_orders"

    id: str = Field(default_factory=_new_id, primary_key=True)
    customer_id: str = Field(foreign_key="customers.id", index=True)
    order_name: str = Field(index=True)

    status: str = Field(default="Processing")
    payment_status: str = Field(default="Unpaid")

    delivery_method: str = Field(default="Delivery")
    delivery_date: Optional[date] = None
    delivery_time: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_instructions: str = Field(default="")

    notes: str = Field(default="")

    tax_rate: float = Field(default=13.0)
    amount_paid: float = Field(default=0.0)
    subtotal_order_value: float = Field(default=0.0)
    total_order_value: float = Field(default=0.0)
    discount_percentage: float = Field(default=0.0)

    send_email: bool = Field(default=False)
    source_storefront_order_id: Optional[str] = Field(default=None, index=True)

    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)


class CustomerOrderItem(SQLModel, table=True):
    """A single line of a customer order."""

    __tablename__ = "customer_order_items"

    id: str = Field(default_factory=_new_id, primary_key=True)
    customer_order_id: str = Field(foreign_key="customer_orders.id", index=True)
    product_id: str  # required: a line without a product cannot be fulfilled
    variant_id: Optional[str] = Field(default=None, index=True)

    unit_price: float = Field(default=0.0)
    quantity: float = Field(default=0.0)
    discount_percentage: float = Field(default=0.0)
    discount: float = Field(default=0.0)
    total_order_item_value: float = Field(default=0.0)

    # Pallet / layer breakdown of the line (pallet-decomposed units only)
    is_pallet: bool = Field(default=False)
    pallets: int = Field(default=0)
    layers: int = Field(default=0)

    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)


class StorefrontOrderLog(SQLModel, table=True):
    """Audit trail of actions taken on storefront orders. Writes are best-effort."""

    __tablename__ = "storefront_order_logs"

    id: str = Field(default_factory=_new_id, primary_key=True)
    order_id: str = Field(foreign_key="storefront_orders.id", index=True)
    action: str  # "accept", "reject", "convert", "archive"
    details: Optional[str] = None
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
