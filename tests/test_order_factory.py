from decimal import Decimal

import pytest

from tradesim.broker import (
    InsufficientFunds,
    InsufficientShares,
    InvalidOrderType,
    InvalidPrice,
    InvalidQuantity,
    InvalidSymbol,
    OrderStatus,
    OrderType,
    Side,
    TimeInForce,
    create_limit_order,
    create_market_order,
    create_stop_limit_order,
    create_stop_loss_order,
    create_trailing_stop_order,
    submit_order,
)


def test_market_buy_updates_cash_position_and_cost_basis(portfolio, morning):
    # Act
    order = create_market_order(portfolio, "AAPL", 10, "buy", 150, now=morning)
    # Assert
    assert order.status == OrderStatus.FILLED
    assert order.execution_price == Decimal("150")
    assert portfolio.cash == Decimal("98500")
    assert portfolio.positions["AAPL"] == 10
    assert portfolio.cost_basis["AAPL"] == Decimal("150")
    assert len(portfolio.history) == 1
    assert portfolio.pending_orders == []


def test_market_buy_insufficient_funds_rejects_and_leaves_portfolio(portfolio, morning):
    # Act
    with pytest.raises(InsufficientFunds) as excinfo:
        create_market_order(portfolio, "AAPL", 1000, "buy", 150, now=morning)
    # Assert
    assert excinfo.value.required == Decimal("150000")
    assert excinfo.value.available == Decimal("100000")
    rejected = excinfo.value.order
    assert rejected.status == OrderStatus.REJECTED
    assert portfolio.get_order(rejected.id) is rejected
    assert portfolio.cash == Decimal("100000")
    assert portfolio.positions == {}
    assert portfolio.history == []


def test_market_sell_more_than_held_raises_insufficient_shares(portfolio, morning):
    create_market_order(portfolio, "AAPL", 5, "buy", 100, now=morning)

    with pytest.raises(InsufficientShares) as excinfo:
        create_market_order(portfolio, "AAPL", 6, "sell", 100, now=morning)

    assert excinfo.value.available == Decimal("5")
    assert portfolio.positions["AAPL"] == 5


def test_limit_order_is_pending_and_reserves_nothing(portfolio, morning):
    order = create_limit_order(portfolio, "aapl", 10, "buy", 150, now=morning)

    assert order.status == OrderStatus.PENDING
    assert order.symbol == "AAPL"
    assert order.order_type == OrderType.LIMIT
    assert order.limit_price == Decimal("150")
    assert portfolio.pending_orders == [order]
    assert portfolio.cash == Decimal("100000")


def test_underfunded_limit_order_is_accepted(portfolio, morning):
    # Affordability is only checked when the order fills
    order = create_limit_order(portfolio, "AAPL", 100000, "buy", 150, now=morning)
    assert order.status == OrderStatus.PENDING


def test_default_time_in_force_per_type(portfolio, morning, at):
    limit = create_limit_order(portfolio, "AAPL", 1, "buy", 100, now=morning)
    stop = create_stop_loss_order(portfolio, "AAPL", 1, "sell", 90, now=morning)
    stop_limit = create_stop_limit_order(portfolio, "AAPL", 1, "sell", 90, 89, now=morning)
    trailing = create_trailing_stop_order(portfolio, "AAPL", 1, "sell", 100, trail_percent=5, now=morning)

    assert limit.time_in_force == TimeInForce.DAY
    assert limit.expires_at == at(2025, 6, 2, 16)
    for order in (stop, stop_limit, trailing):
        assert order.time_in_force == TimeInForce.GTC
        assert order.expires_at is None


def test_time_in_force_override(portfolio, morning, at):
    limit = create_limit_order(portfolio, "AAPL", 1, "buy", 100, time_in_force="gtc", now=morning)
    stop = create_stop_loss_order(portfolio, "AAPL", 1, "sell", 90, time_in_force=TimeInForce.DAY, now=morning)

    assert limit.time_in_force == TimeInForce.GTC
    assert limit.expires_at is None
    assert stop.expires_at == at(2025, 6, 2, 16)


def test_day_order_after_close_expires_next_day(portfolio, at):
    order = create_limit_order(portfolio, "AAPL", 1, "buy", 100, now=at(2025, 6, 2, 17, 30))
    assert order.expires_at == at(2025, 6, 3, 16)


def test_day_order_placed_exactly_at_close_expires_next_day(portfolio, at):
    order = create_limit_order(portfolio, "AAPL", 1, "buy", 100, now=at(2025, 6, 2, 16))
    assert order.expires_at == at(2025, 6, 3, 16)


@pytest.mark.parametrize("quantity", [0, -5, "abc", None])
def test_invalid_quantity_rejected_at_placement(portfolio, quantity):
    with pytest.raises(InvalidQuantity):
        create_limit_order(portfolio, "AAPL", quantity, "buy", 100)
    assert portfolio.pending_orders == []


@pytest.mark.parametrize("price", [0, -1, None])
def test_invalid_price_rejected_at_placement(portfolio, price):
    with pytest.raises(InvalidPrice):
        create_stop_loss_order(portfolio, "AAPL", 1, "sell", price)
    with pytest.raises(InvalidPrice):
        create_market_order(portfolio, "AAPL", 1, "buy", price)
    assert portfolio.orders == {}


def test_blank_symbol_and_unknown_side_are_rejected(portfolio):
    with pytest.raises(InvalidSymbol):
        create_limit_order(portfolio, "  ", 1, "buy", 100)
    with pytest.raises(InvalidOrderType):
        create_limit_order(portfolio, "AAPL", 1, "hold", 100)


def test_trailing_stop_percent_sets_initial_stop_and_marks(portfolio, morning):
    order = create_trailing_stop_order(portfolio, "XYZ", 10, "sell", 100, trail_percent=5, now=morning)

    assert order.stop_price == Decimal("95")
    assert order.kind.high_water_mark == Decimal("100")
    assert order.kind.low_water_mark == Decimal("100")


def test_trailing_stop_amount_buy_side_trails_above(portfolio, morning):
    order = create_trailing_stop_order(portfolio, "XYZ", 10, Side.BUY, 50, trail_amount=2.5, now=morning)
    assert order.stop_price == Decimal("52.5")


def test_trailing_stop_requires_exactly_one_trail(portfolio):
    with pytest.raises(InvalidPrice):
        create_trailing_stop_order(portfolio, "XYZ", 1, "sell", 100)
    with pytest.raises(InvalidPrice):
        create_trailing_stop_order(portfolio, "XYZ", 1, "sell", 100, trail_amount=1, trail_percent=5)
    with pytest.raises(InvalidPrice):
        create_trailing_stop_order(portfolio, "XYZ", 1, "sell", 100, trail_percent=100)
    with pytest.raises(InvalidPrice):
        create_trailing_stop_order(portfolio, "XYZ", 1, "sell", 100, trail_amount=100)
    assert portfolio.pending_orders == []


def test_submit_order_dispatches_by_type_name(portfolio, morning):
    stop = submit_order(portfolio, "stop-loss", symbol="AAPL", quantity=3, side="sell", stop_price=90, now=morning)
    trailing = submit_order(portfolio, "trailing_stop", symbol="AAPL", quantity=3, side="sell",
                            current_price=100, trail_amount=5, now=morning)
    market = submit_order(portfolio, OrderType.MARKET, symbol="MSFT", quantity=2, side="buy", price=300, now=morning)

    assert stop.order_type == OrderType.STOP_LOSS
    assert trailing.order_type == OrderType.TRAILING_STOP
    assert market.status == OrderStatus.FILLED
    assert [o.id for o in portfolio.pending_orders] == [stop.id, trailing.id]


def test_submit_order_unknown_type(portfolio):
    with pytest.raises(InvalidOrderType):
        submit_order(portfolio, "iceberg", symbol="AAPL", quantity=1, side="buy")


def test_describe_messages(portfolio, morning):
    limit = create_limit_order(portfolio, "AAPL", 10, "buy", 150, now=morning)
    stop_limit = create_stop_limit_order(portfolio, "AAPL", 10, "sell", 140, 139.5, now=morning)
    trailing = create_trailing_stop_order(portfolio, "AAPL", 10, "sell", 150, trail_percent=5, now=morning)
    market = create_market_order(portfolio, "AAPL", 10, "buy", 150, now=morning)

    assert limit.describe() == "Limit order placed: BUY 10 AAPL @ $150.00"
    assert stop_limit.describe() == "Stop-limit order placed: SELL 10 AAPL @ $139.50 when price hits $140.00"
    assert trailing.describe() == "Trailing stop order placed: SELL 10 AAPL with 5% trail"
    assert market.describe() == "Market order filled: BUY 10 AAPL @ $150.00"
