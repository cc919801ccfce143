"""SQLModel models for counterparties: internal customers and storefront shoppers."""
from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from supply_manager.models.catalog import _new_id, utcnow


class Customer(SQLModel, table=True):
    """Internal customer record that owns customer orders."""

    __tablename__ = "customers"

    id: str = Field(default_factory=_new_id, primary_key=True)
    customer_name: str = Field(index=True)
    email: Optional[str] = Field(default=None, index=True)
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province_name: Optional[str] = None
    postal_code: Optional[str] = None
    customer_type: str = Field(default="Retail")  # Retail, Contractor, Wholesale …
    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)


class StorefrontCustomer(SQLModel, table=True):
    """Shopper who placed an order through the public storefront."""

    __tablename__ = "storefront_customers"

    id: str = Field(default_factory=_new_id, primary_key=True)
    customer_name: str
    email: Optional[str] = Field(default=None, index=True)
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province_name: Optional[str] = None
    postal_code: Optional[str] = None
    customer_type: Optional[str] = None
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)
