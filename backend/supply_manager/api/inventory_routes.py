"""
Inventory impact API routes.

Endpoints:
  POST /api/inventory/impact     – preview rows for the order review table (no writes)
  POST /api/inventory/apply      – persist the stock effect of a saved order
  GET  /api/inventory/warnings   – variants below warning/critical threshold
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from supply_manager.core.database import get_session
from supply_manager.inventory.impact import ImpactLine, ImpactRow, prepare_impact_rows
from supply_manager.inventory.stock import (
    ApplySummary,
    apply_inventory_changes,
    low_stock_variants,
)
from supply_manager.schemas.responses import LowStockReport

inventory_router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@inventory_router.post("/impact", response_model=list[ImpactRow])
def preview_impact(lines: list[ImpactLine]):
    """Same filter + compute pass for purchase-order and customer-order screens."""
    return prepare_impact_rows(lines)


@inventory_router.post("/apply", response_model=ApplySummary)
def apply_impact(lines: list[ImpactLine], session: Session = Depends(get_session)):
    return apply_inventory_changes(session, lines)


@inventory_router.get("/warnings", response_model=LowStockReport)
def inventory_warnings(session: Session = Depends(get_session)):
    items = low_stock_variants(session)
    return LowStockReport(count=len(items), items=items)
