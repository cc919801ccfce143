"""Best-effort audit trail for storefront order actions."""
from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from supply_manager.models.order import StorefrontOrderLog


def record_order_action(
    session: Session,
    order_id: str,
    action: str,
    details: Optional[str] = None,
    previous_status: Optional[str] = None,
    new_status: Optional[str] = None,
) -> bool:
    """
    Append an entry to ``storefront_order_logs``.

    Never raises: a missing table or a failed insert is logged and the caller
    carries on. Returns whether the entry was written.
    """
    entry = StorefrontOrderLog(
        order_id=order_id,
        action=action,
        details=details,
        previous_status=previous_status,
        new_status=new_status,
    )
    try:
        session.add(entry)
        session.commit()
        return True
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning(f"Audit log write skipped for order {order_id} ({action}): {exc}")
        return False
