"""
Shared pytest fixtures.

Environment variables are set here, before anything imports
supply_manager.core.config, so every test module sees the same temporary
database and log files.
"""
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Ensure the package is importable when running pytest from the backend folder
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

_tmp_dir = tempfile.mkdtemp(prefix="supply_manager_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'api.db')}"
os.environ["LOG_FILE"] = os.path.join(_tmp_dir, "logs", "app.log")
os.environ["RECONCILE_LOG_FILE"] = os.path.join(_tmp_dir, "logs", "reconcile.log")

from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

import supply_manager.models  # noqa: E402,F401 – registers tables on SQLModel.metadata
from supply_manager.models import (  # noqa: E402
    Product,
    ProductVariant,
    StorefrontCustomer,
    StorefrontOrder,
    StorefrontOrderItem,
)


@pytest.fixture
def engine(tmp_path):
    """Fresh file-backed SQLite database per test."""
    eng = create_engine(
        f"sqlite:///{tmp_path / 'service.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


def seed_storefront_order(
    session: Session,
    *,
    email: str = "shopper@example.com",
    items: list[dict] | None = None,
    **order_fields,
) -> StorefrontOrder:
    """Insert a shopper, a storefront order and its lines; returns the order."""
    shopper = StorefrontCustomer(
        customer_name="Jamie Shopper",
        email=email,
        phone_number="555-0100",
        address="12 Quarry Rd",
        city="Guelph",
        province_name="Ontario",
        postal_code="N1H 1A1",
    )
    session.add(shopper)
    session.flush()

    defaults = dict(
        order_name="SF-1001",
        status="Approved",
        payment_status="Paid",
        subtotal_order_value=200.0,
        total_order_value=226.0,
        tax_rate=13.0,
    )
    defaults.update(order_fields)
    order = StorefrontOrder(customer_id=shopper.id, **defaults)
    session.add(order)
    session.flush()

    start = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)
    for offset, data in enumerate(items or []):
        line = dict(product_id="prod-1", variant_id="var-1", unit_price=10.0, quantity=1.0)
        line.update(data)
        session.add(
            StorefrontOrderItem(
                order_id=order.id,
                date_created=start + timedelta(seconds=offset),
                **line,
            )
        )
    session.commit()
    session.refresh(order)
    return order


def seed_variant(
    session: Session,
    *,
    unit: str = "Square Feet",
    quantity: float = 1000.0,
    pallets: int | None = 1,
    layers: int | None = 0,
    feet_per_layer: float | None = 100.0,
    layers_per_pallet: int | None = 10,
    warning_threshold: float | None = 500.0,
    critical_threshold: float | None = 100.0,
    name: str = "Charcoal 24x24",
) -> ProductVariant:
    product = Product(
        product_name="Paver Slab",
        unit=unit,
        feet_per_layer=feet_per_layer,
        layers_per_pallet=layers_per_pallet,
    )
    session.add(product)
    session.flush()
    variant = ProductVariant(
        product_id=product.id,
        product_variant_name=name,
        quantity=quantity,
        pallets=pallets,
        layers=layers,
        warning_threshold=warning_threshold,
        critical_threshold=critical_threshold,
    )
    session.add(variant)
    session.commit()
    session.refresh(variant)
    return variant
