"""
Unit tests for trade sizing.
"""

from decimal import Decimal

import pytest

from tests.mocks import make_cycle, make_sell_first_cycle
from triarb.core.types import Cycle
from triarb.strategy.sizer import base_trade_amount, min_trade_amount


class TestMinTradeAmount:
    """Tests for min_trade_amount."""

    def test_buy_first_edge(self, filled_cycle: Cycle) -> None:
        """Test cost in the base asset with 10% headroom."""
        assert min_trade_amount(filled_cycle, Decimal("10")) == Decimal("11.0")

    def test_sell_first_edge(self) -> None:
        """Test cost converted back through the edge price."""
        cycle = make_sell_first_cycle()

        amount = min_trade_amount(cycle, Decimal("30"))

        assert amount == Decimal("30") / Decimal("30000") * Decimal("1.1")


class TestBaseTradeAmount:
    """Tests for base_trade_amount."""

    def test_free_balance_bounds_buy_cycle(self, filled_cycle: Cycle) -> None:
        """Test that 1000 USDT free is the scarcest resource."""
        amount = base_trade_amount(filled_cycle, Decimal("1000"), Decimal("11"))

        # expressed in BTC, the destination of the first buy
        assert amount == Decimal("1000") / Decimal("30000")

    def test_edge_c_bounds_buy_cycle(self, filled_cycle: Cycle) -> None:
        """Test c = 4 ETH * 2110 = 8440 USDT bounds a large balance."""
        amount = base_trade_amount(filled_cycle, Decimal("100000"), Decimal("11"))

        assert amount == Decimal("8440") / Decimal("30000")

    def test_edge_b_bounds_buy_cycle(self) -> None:
        """Test b = 5 ETH * 0.07 * 30000 = 10500 USDT."""
        cycle = make_cycle(quantities=("1", "5", "40"))

        amount = base_trade_amount(cycle, Decimal("100000"), Decimal("11"))

        assert amount == Decimal("10500") / Decimal("30000")

    def test_edge_a_bounds_buy_cycle(self) -> None:
        """Test a = 0.1 BTC * 30000 = 3000 USDT."""
        cycle = make_cycle(quantities=("0.1", "50", "40"))

        amount = base_trade_amount(cycle, Decimal("100000"), Decimal("11"))

        assert amount == Decimal("3000") / Decimal("30000")

    def test_sell_first_edge_not_divided(self) -> None:
        """Test a sell first edge is sized in its own asset."""
        cycle = make_sell_first_cycle(quantities=("1", "10", "50"))

        amount = base_trade_amount(cycle, Decimal("0.25"), Decimal("0.001"))

        assert amount == Decimal("0.25")

    @pytest.mark.parametrize("free", ["1", "1000", "3000", "100000"])
    def test_never_exceeds_free_balance(self, filled_cycle: Cycle, free: str) -> None:
        amount = base_trade_amount(filled_cycle, Decimal(free), Decimal("11"))

        assert amount * filled_cycle.a.price <= Decimal(free)

    def test_missing_quantity_raises(self, cycle: Cycle) -> None:
        with pytest.raises(ValueError, match="without quantity"):
            base_trade_amount(cycle, Decimal("1000"), Decimal("11"))
