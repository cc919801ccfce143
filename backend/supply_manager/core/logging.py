"""
Centralized logging setup using loguru.

Three sinks:
  stderr            – coloured, human readable
  LOG_FILE          – everything at LOG_LEVEL, rotated
  RECONCILE_LOG     – only records bound with ``reconcile=True``; these are
                      partially-applied multi-step writes (e.g. a customer was
                      created but the order header failed) that an operator
                      has to clean up by hand.
"""
import sys
from loguru import logger
from supply_manager.core.config import settings


def _is_reconcile_record(record) -> bool:
    return bool(record["extra"].get("reconcile"))


def setup_logging() -> None:
    """Configure loguru sinks. Called once from the app lifespan."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )
    logger.add(
        settings.LOG_FILE,
        level=settings.LOG_LEVEL,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )
    logger.add(
        settings.RECONCILE_LOG_FILE,
        level="WARNING",
        filter=_is_reconcile_record,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra} | {message}",
        retention="90 days",
    )


def reconcile_logger(**context):
    """Logger bound for the reconciliation sink, carrying ids of the half-written records."""
    return logger.bind(reconcile=True, **context)
