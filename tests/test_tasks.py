"""Tests for background tasks."""
from unittest.mock import patch

from kombu.exceptions import OperationalError

from stockapp.models.product import Product
from stockapp.tasks.stock_tasks import dispatch_low_stock_alert, notify_low_stock


def test_notify_low_stock_runs_eagerly():
    result = notify_low_stock.delay(1, "Widget", 1, 2)

    assert result.get() == {
        "status": "alerted",
        "product_id": 1,
        "product_name": "Widget",
        "quantity": 1,
        "min_stock_level": 2,
    }


def test_dispatch_skips_healthy_stock():
    product = Product(id=1, name="Widget", quantity=10, min_stock_level=2)

    with patch("stockapp.tasks.stock_tasks.notify_low_stock.delay") as delay:
        assert dispatch_low_stock_alert(product) is False

    delay.assert_not_called()


def test_dispatch_queues_low_stock():
    product = Product(id=1, name="Widget", quantity=2, min_stock_level=2)

    with patch("stockapp.tasks.stock_tasks.notify_low_stock.delay") as delay:
        assert dispatch_low_stock_alert(product) is True

    delay.assert_called_once_with(1, "Widget", 2, 2)


def test_dispatch_survives_broker_outage():
    product = Product(id=1, name="Widget", quantity=0, min_stock_level=2)

    with patch(
        "stockapp.tasks.stock_tasks.notify_low_stock.delay",
        side_effect=OperationalError("broker down"),
    ):
        assert dispatch_low_stock_alert(product) is False
