import logging

from kombu.exceptions import OperationalError

from stockapp.config import get_settings
from stockapp.services.stock_ledger import is_low_stock
from stockapp.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="notify_low_stock")
def notify_low_stock(
    product_id: int,
    product_name: str,
    quantity: int,
    min_stock_level: int,
) -> dict:
    """
    Background task raising a low-stock alert for a product.

    Receives a snapshot of the product taken right after the sale so the
    worker needs no database access.

    Args:
        product_id: ID of the product
        product_name: Product name at the time of the sale
        quantity: Units left in stock
        min_stock_level: The product's low-stock threshold

    Returns:
        Dictionary with the alert summary
    """
    logger.warning(
        f"Low stock: '{product_name}' (#{product_id}) has {quantity} left, "
        f"threshold is {min_stock_level}"
    )
    return {
        "status": "alerted",
        "product_id": product_id,
        "product_name": product_name,
        "quantity": quantity,
        "min_stock_level": min_stock_level,
    }


def dispatch_low_stock_alert(product) -> bool:
    """
    Queue notify_low_stock when the product is at or below its threshold.

    Returns True if a task was queued. A broker outage is logged and
    reported as False; the caller's stock change is already committed.
    """
    if not get_settings().LOW_STOCK_ALERTS_ENABLED or not is_low_stock(product):
        return False
    try:
        notify_low_stock.delay(
            product.id,
            product.name,
            product.quantity,
            product.min_stock_level,
        )
    except OperationalError as e:
        logger.error(f"Could not queue low-stock alert for product #{product.id}: {e}")
        return False
    return True
