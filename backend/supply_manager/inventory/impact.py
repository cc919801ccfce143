"""
Inventory impact calculator.

Given a variant's stock snapshot and one order line's proposed change, work out
the stock level after the change, its pallet/layer breakdown and how it sits
against the variant's warning/critical thresholds.

Sign convention for ``change_quantity``:
  > 0   withdrawn from stock (line added or increased)
  < 0   returned to stock (line reduced)
  deleted lines always return ``abs(change_quantity)``, whatever the sign.

Pallet policy: pallets/layers are recomputed from the absolute new quantity
(ceil to whole layers, then split into pallets). ``current_pallets`` and
``current_layers`` are never adjusted incrementally, so repeated edits cannot
drift away from the quantity.

Everything here is pure: no session, no I/O.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from pydantic import field_validator

from supply_manager.core.config import settings
from supply_manager.schemas.base import FrozenWireModel


class StockStatus(str, Enum):
    CRITICAL = "Critical"
    WARNING = "Warning"
    OK = "Ok"


class VariantStockSnapshot(FrozenWireModel):
    """Stock of one variant at the moment the order line is edited."""

    variant_id: str
    unit: Optional[str] = None
    current_quantity: float = 0.0
    current_pallets: Optional[int] = None
    current_layers: Optional[int] = None
    feet_per_layer: Optional[float] = None
    layers_per_pallet: Optional[int] = None
    warning_threshold: Optional[float] = None
    critical_threshold: Optional[float] = None

    @field_validator("current_quantity", mode="before")
    @classmethod
    def null_quantity_is_zero(cls, v: Optional[float]) -> float:
        return 0.0 if v is None else v


class InventoryChange(FrozenWireModel):
    """One order line's proposed effect on a variant's stock."""

    change_quantity: float = 0.0
    change_pallets: Optional[int] = None
    change_layers: Optional[int] = None
    is_deleted: bool = False
    is_transient: bool = False  # added and removed in the same unsaved session

    @field_validator("change_quantity", mode="before")
    @classmethod
    def null_quantity_is_zero(cls, v: Optional[float]) -> float:
        return 0.0 if v is None else v

    @field_validator("is_deleted", "is_transient", mode="before")
    @classmethod
    def null_flag_is_false(cls, v: Optional[bool]) -> bool:
        return False if v is None else v


class ImpactResult(FrozenWireModel):
    new_quantity: float
    new_pallets: int
    new_layers: int
    status: StockStatus
    will_persist: bool


class ImpactLine(FrozenWireModel):
    """Snapshot + change pair, plus the labels the review table shows."""

    product_name: str = ""
    variant_name: str = ""
    snapshot: VariantStockSnapshot
    change: InventoryChange


class ImpactRow(ImpactLine):
    result: ImpactResult


def is_pallet_unit(unit: Optional[str]) -> bool:
    """True for area/length units tracked as pallets + layers as well as raw quantity."""
    return unit in settings.PALLET_UNITS


def can_decompose(snapshot: VariantStockSnapshot) -> bool:
    """Pallet/layer output is only computed for pallet units with both packing constants set."""
    return bool(
        is_pallet_unit(snapshot.unit)
        and snapshot.feet_per_layer
        and snapshot.layers_per_pallet
    )


def has_no_change(change: InventoryChange) -> bool:
    """Zero quantity delta and no (or zero) pallet/layer delta."""
    return (
        change.change_quantity == 0
        and not change.change_pallets
        and not change.change_layers
    )


def decompose_layers(
    quantity: float, feet_per_layer: float, layers_per_pallet: int
) -> tuple[int, int]:
    """
    Split a quantity into (pallets, layers).

    Partial layers round up; pallets are the floor of whole layers.
    Holds for negative stock too: pallets * layers_per_pallet + layers == total layers.
    """
    total_layers = math.ceil(quantity / feet_per_layer)
    pallets = math.floor(total_layers / layers_per_pallet)
    layers = total_layers - pallets * layers_per_pallet
    return int(pallets), int(layers)


def classify_stock(
    quantity: float,
    warning_threshold: Optional[float],
    critical_threshold: Optional[float],
) -> StockStatus:
    """Strict less-than: sitting exactly on a threshold is the milder level."""
    if quantity < (critical_threshold or 0):
        return StockStatus.CRITICAL
    if quantity < (warning_threshold or 0):
        return StockStatus.WARNING
    return StockStatus.OK


def compute_impact(snapshot: VariantStockSnapshot, change: InventoryChange) -> ImpactResult:
    magnitude = abs(change.change_quantity)
    returned = change.is_deleted or change.change_quantity < 0
    new_quantity = snapshot.current_quantity + (magnitude if returned else -magnitude)

    new_pallets = snapshot.current_pallets or 0
    new_layers = snapshot.current_layers or 0
    if can_decompose(snapshot):
        new_pallets, new_layers = decompose_layers(
            new_quantity, snapshot.feet_per_layer, snapshot.layers_per_pallet
        )

    return ImpactResult(
        new_quantity=new_quantity,
        new_pallets=new_pallets,
        new_layers=new_layers,
        status=classify_stock(
            new_quantity, snapshot.warning_threshold, snapshot.critical_threshold
        ),
        will_persist=not change.is_transient and not has_no_change(change),
    )


def prepare_impact_rows(lines: list[ImpactLine]) -> list[ImpactRow]:
    """
    Display/filter pass shared by the purchase-order and customer-order views.

    Transient lines are dropped. The rest keep their order; zero-change lines
    stay visible but come back with ``will_persist=False``.
    """
    return [
        ImpactRow(
            product_name=line.product_name,
            variant_name=line.variant_name,
            snapshot=line.snapshot,
            change=line.change,
            result=compute_impact(line.snapshot, line.change),
        )
        for line in lines
        if not line.change.is_transient
    ]
