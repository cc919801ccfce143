"""SQLModel models for the product catalogue (products and their stocked variants)."""
from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used for every date column."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class Product(SQLModel, table=True):
    """A sellable product. Packing constants apply to every variant of it."""

    __tablename__ = "products"

    id: str = Field(default_factory=_new_id, primary_key=True)
    product_name: str = Field(index=True)
    unit: Optional[str] = None  # "Square Feet", "Linear Feet", "Each", …
    feet_per_layer: Optional[float] = None
    layers_per_pallet: Optional[int] = None
    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)


class ProductVariant(SQLModel, table=True):
    """
    A stocked variant (colour, size, …) of a product.

    quantity, pallets and layers are stored independently; pallets/layers are
    only meaningful for pallet-decomposed units.
    """

    __tablename__ = "product_variants"

    id: str = Field(default_factory=_new_id, primary_key=True)
    product_id: str = Field(foreign_key="products.id", index=True)
    product_variant_name: str
    quantity: float = Field(default=0.0)  # may go negative on oversell
    pallets: Optional[int] = None
    layers: Optional[int] = None
    warning_threshold: Optional[float] = None
    critical_threshold: Optional[float] = None
    is_archived: bool = Field(default=False)
    date_created: datetime = Field(default_factory=utcnow)
    date_last_updated: datetime = Field(default_factory=utcnow)
