"""
Stock persistence: turn variant rows into snapshots, write order-save impacts
back to ``product_variants`` and report low-stock variants.
"""
from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlmodel import Session, func, or_, select

from supply_manager.inventory.impact import (
    ImpactLine,
    StockStatus,
    VariantStockSnapshot,
    can_decompose,
    classify_stock,
    compute_impact,
    prepare_impact_rows,
)
from supply_manager.models.catalog import Product, ProductVariant, utcnow
from supply_manager.schemas.base import WireModel


class AppliedChange(WireModel):
    variant_id: str
    previous_quantity: float
    new_quantity: float
    new_pallets: Optional[int]
    new_layers: Optional[int]
    status: StockStatus


class SkippedChange(WireModel):
    variant_id: str
    reason: str


class ApplySummary(WireModel):
    applied: list[AppliedChange] = []
    skipped: list[SkippedChange] = []


class LowStockVariant(WireModel):
    variant_id: str
    variant_name: str
    product_name: str
    unit: Optional[str]
    quantity: float
    warning_threshold: Optional[float]
    critical_threshold: Optional[float]
    status: StockStatus


def snapshot_for_variant(variant: ProductVariant, product: Optional[Product]) -> VariantStockSnapshot:
    """Snapshot of a persisted variant. Missing packing constants stay missing."""
    return VariantStockSnapshot(
        variant_id=variant.id,
        unit=product.unit if product else None,
        current_quantity=variant.quantity or 0.0,
        current_pallets=variant.pallets,
        current_layers=variant.layers,
        feet_per_layer=product.feet_per_layer if product else None,
        layers_per_pallet=product.layers_per_pallet if product else None,
        warning_threshold=variant.warning_threshold,
        critical_threshold=variant.critical_threshold,
    )


def apply_inventory_changes(session: Session, lines: list[ImpactLine]) -> ApplySummary:
    """
    Persist the stock effect of a saved order.

    The snapshot sent by the client is only used for filtering; each impact
    is recomputed against the variant row as it is now, so two lines on the
    same variant stack correctly. Commits once at the end.
    """
    summary = ApplySummary()

    for row in prepare_impact_rows(lines):
        variant_id = row.snapshot.variant_id
        if not row.result.will_persist:
            summary.skipped.append(SkippedChange(variant_id=variant_id, reason="no change"))
            continue

        variant = session.get(ProductVariant, variant_id)
        if variant is None:
            logger.warning(f"Inventory apply: variant {variant_id} not found, skipping")
            summary.skipped.append(SkippedChange(variant_id=variant_id, reason="variant not found"))
            continue

        product = session.get(Product, variant.product_id)
        fresh = snapshot_for_variant(variant, product)
        result = compute_impact(fresh, row.change)

        previous_quantity = variant.quantity
        variant.quantity = result.new_quantity  # negative stock is allowed
        if can_decompose(fresh):
            variant.pallets = result.new_pallets
            variant.layers = result.new_layers
        variant.date_last_updated = utcnow()
        session.add(variant)

        logger.info(
            f"Inventory apply: variant {variant_id} {previous_quantity} → {result.new_quantity} "
            f"({result.status.value})"
        )
        summary.applied.append(
            AppliedChange(
                variant_id=variant_id,
                previous_quantity=previous_quantity,
                new_quantity=result.new_quantity,
                new_pallets=variant.pallets,
                new_layers=variant.layers,
                status=result.status,
            )
        )

    session.commit()
    return summary


_SEVERITY = {StockStatus.CRITICAL: 0, StockStatus.WARNING: 1, StockStatus.OK: 2}


def low_stock_variants(session: Session) -> list[LowStockVariant]:
    """Non-archived variants below their warning or critical threshold, most severe first."""
    stmt = (
        select(ProductVariant, Product)
        .join(Product, ProductVariant.product_id == Product.id)
        .where(
            ProductVariant.is_archived == False,  # noqa: E712
            # missing thresholds count as 0, as in classify_stock
            or_(
                ProductVariant.quantity < func.coalesce(ProductVariant.warning_threshold, 0),
                ProductVariant.quantity < func.coalesce(ProductVariant.critical_threshold, 0),
            ),
        )
    )
    rows = [
        LowStockVariant(
            variant_id=variant.id,
            variant_name=variant.product_variant_name,
            product_name=product.product_name,
            unit=product.unit,
            quantity=variant.quantity,
            warning_threshold=variant.warning_threshold,
            critical_threshold=variant.critical_threshold,
            status=classify_stock(
                variant.quantity, variant.warning_threshold, variant.critical_threshold
            ),
        )
        for variant, product in session.exec(stmt).all()
    ]
    return sorted(rows, key=lambda r: (_SEVERITY[r.status], r.quantity))
