import logging
from decimal import Decimal

import pytest

from tradesim.broker import BrokerAdapter, OrderNotFound, OrderStatus


def test_base_adapter_is_abstract():
    adapter = BrokerAdapter()
    with pytest.raises(NotImplementedError):
        adapter.get_open_orders()


def test_submit_market_order_produces_pollable_fill(adapter, morning):
    # Act
    order = adapter.submit_order("market", symbol="AAPL", quantity=10, side="buy", price=150, now=morning)
    # Assert
    assert order.status == OrderStatus.FILLED
    fills = adapter.poll_fills()
    assert len(fills) == 1
    assert fills[0].order_id == order.id
    assert fills[0].total == Decimal("1500")
    assert adapter.poll_fills() == []


def test_pending_orders_fill_through_process_tick(adapter, morning):
    order = adapter.submit_order("limit", symbol="AAPL", quantity=10, side="buy", limit_price=150, now=morning)
    assert adapter.get_open_orders() == [order]
    assert adapter.poll_fills() == []

    result = adapter.process_tick({"AAPL": 149}, now=morning)

    assert result.executed == [order]
    assert [f.order_id for f in adapter.poll_fills()] == [order.id]
    assert adapter.get_open_orders() == []


def test_on_fill_callback_receives_fills(adapter, morning):
    received = []
    adapter.on_fill(received.append)

    adapter.submit_order("market", symbol="AAPL", quantity=1, side="buy", price=150, now=morning)

    assert len(received) == 1
    assert received[0][0].symbol == "AAPL"


def test_failing_callback_is_logged_and_fill_kept(adapter, morning, caplog):
    def explode(fills):
        raise RuntimeError("listener down")

    adapter.on_fill(explode)
    with caplog.at_level(logging.ERROR, logger="tradesim.broker.adapter"):
        order = adapter.submit_order("market", symbol="AAPL", quantity=1, side="buy", price=150, now=morning)

    assert order.status == OrderStatus.FILLED
    assert "Fill callback raised" in caplog.text
    assert len(adapter.poll_fills()) == 1


def test_cancel_through_adapter(adapter, morning):
    order = adapter.submit_order("stop_loss", symbol="AAPL", quantity=1, side="sell", stop_price=90, now=morning)

    canceled = adapter.cancel_order(order.id)

    assert canceled.status == OrderStatus.CANCELED
    with pytest.raises(OrderNotFound):
        adapter.cancel_order(order.id)


def test_account_and_statistics(adapter, morning):
    adapter.submit_order("market", symbol="AAPL", quantity=10, side="buy", price=150, now=morning)
    pending = adapter.submit_order("limit", symbol="AAPL", quantity=5, side="sell", limit_price=170, now=morning)

    account = adapter.get_account()
    stats = adapter.get_order_statistics()

    assert account["cash"] == Decimal("98500")
    assert account["positions"] == {"AAPL": {"quantity": Decimal("10"), "cost_basis": Decimal("150")}}
    assert account["pending_orders"] == [pending.id]
    assert account["fills"] == 1
    assert stats.total_orders == 1
    assert stats.market_orders == 1
    assert adapter.portfolio.cash == Decimal("98500")
