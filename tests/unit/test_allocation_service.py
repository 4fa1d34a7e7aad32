"""Unit tests for allocation service."""

from decimal import Decimal

import pytest

from condosplit.services.allocation_service import AllocationService, quantize_cent, to_decimal


class TestAllocationService:
    """Test allocation service methods."""

    @pytest.fixture
    def service(self):
        """Create allocation service instance."""
        return AllocationService()

    def test_distribute_with_remainder_proportional(self, service):
        """Test proportional distribution with remainder handling."""
        total = Decimal("100.00")
        shares = {1: Decimal("3"), 2: Decimal("3"), 3: Decimal("4")}

        result = service.distribute_with_remainder(total, shares)

        # Expected: 1→30, 2→30, 3→40
        assert result[1] == Decimal("30.00")
        assert result[2] == Decimal("30.00")
        assert result[3] == Decimal("40.00")
        assert sum(result.values()) == total

    def test_distribute_with_remainder_uneven_split(self, service):
        """Test uneven split that creates remainder."""
        total = Decimal("100.00")
        shares = {1: Decimal("1"), 2: Decimal("1"), 3: Decimal("1")}

        result = service.distribute_with_remainder(total, shares)

        # 100/3 = 33.333... → 33.33 each + remainder 0.01 to the first key
        assert sum(result.values()) == total
        assert result[1] == Decimal("33.34")
        assert result[2] == Decimal("33.33")
        assert result[3] == Decimal("33.33")

    def test_distribute_with_remainder_largest_fraction_wins(self, service):
        """Leftover cents go to the largest fractional part, not the first key."""
        # 10 * 1/6 = 1.666.., 10 * 2/6 = 3.333.., 10 * 3/6 = 5
        result = service.distribute_with_remainder(
            Decimal("10.00"), {"a": Decimal("1"), "b": Decimal("2"), "c": Decimal("3")}
        )

        assert result == {"a": Decimal("1.67"), "b": Decimal("3.33"), "c": Decimal("5.00")}

    def test_distribute_with_remainder_zero_money_loss(self, service):
        """Test that remainder distribution loses no money."""
        total = Decimal("1000.00")
        shares = {i: Decimal(str(i)) for i in range(1, 11)}  # 1 to 10

        result = service.distribute_with_remainder(total, shares)

        # Verify total preserved to the cent
        assert sum(result.values()) == total
        assert all(amount >= Decimal(0) for amount in result.values())

    def test_distribute_with_remainder_fractional_weights(self, service):
        """Weights can be metered consumptions with decimals."""
        total = Decimal("372.00")
        shares = {1: Decimal("80.125"), 2: Decimal("19.875"), 3: Decimal("0")}

        result = service.distribute_with_remainder(total, shares)

        assert sum(result.values()) == total
        assert result[3] == Decimal("0.00")

    def test_distribute_with_remainder_empty_shares(self, service):
        """Test with empty shares dictionary."""
        result = service.distribute_with_remainder(Decimal("100.00"), {})
        assert result == {}

    def test_distribute_with_remainder_zero_shares(self, service):
        """Test with all zero shares."""
        shares = {1: Decimal(0), 2: Decimal(0), 3: Decimal(0)}
        result = service.distribute_with_remainder(Decimal("100.00"), shares)

        assert all(amount == Decimal(0) for amount in result.values())
        assert set(result) == {1, 2, 3}

    def test_distribute_zero_total(self, service):
        """Zero total yields zero shares."""
        result = service.distribute_with_remainder(Decimal("0"), {1: Decimal("5"), 2: Decimal("5")})

        assert result == {1: Decimal("0.00"), 2: Decimal("0.00")}

    def test_percentage_of(self, service):
        """Percentages round half up to the cent."""
        assert service.percentage_of(Decimal("930"), Decimal("40")) == Decimal("372.00")
        assert service.percentage_of(Decimal("0.05"), Decimal("50")) == Decimal("0.03")

    def test_split_fraction_rest_absorbs_rounding(self, service):
        """The second part is always amount - first part."""
        first, rest = service.split_fraction(Decimal("248.00"), Decimal("0.10"))
        assert first == Decimal("24.80")
        assert rest == Decimal("223.20")

        first, rest = service.split_fraction(Decimal("0.05"), Decimal("0.10"))
        assert first + rest == Decimal("0.05")

    def test_split_halves_odd_cent(self, service):
        """An odd cent goes to the second half."""
        first, second = service.split_halves(Decimal("10.01"))

        assert first == Decimal("5.00")
        assert second == Decimal("5.01")

    def test_split_by_percentages_remainder_bucket_takes_cents(self, service):
        """Buckets are truncated and the remainder bucket absorbs the cents."""
        result = service.split_by_percentages(
            Decimal("0.10"),
            {"involuntary": Decimal("33.34"), "heating": Decimal("33.33"), "hot_water": Decimal("33.33")},
            "involuntary",
        )

        assert result == {
            "involuntary": Decimal("0.04"),
            "heating": Decimal("0.03"),
            "hot_water": Decimal("0.03"),
        }

    def test_split_by_percentages_remainder_even_when_smallest(self, service):
        """The remainder bucket gets the cents even when it has the lowest percentage."""
        result = service.split_by_percentages(
            Decimal("100.01"),
            {"involuntary": Decimal("0"), "heating": Decimal("50"), "hot_water": Decimal("50")},
            "involuntary",
        )

        assert result["heating"] == Decimal("50.00")
        assert result["hot_water"] == Decimal("50.00")
        assert result["involuntary"] == Decimal("0.01")
        assert sum(result.values()) == Decimal("100.01")

    def test_split_by_percentages_zero_percentages(self, service):
        result = service.split_by_percentages(Decimal("10"), {"a": Decimal("0"), "b": Decimal("0")}, "a")

        assert result == {"a": Decimal("0.00"), "b": Decimal("0.00")}


class TestDecimalHelpers:
    """Tests for decimal conversion helpers."""

    def test_to_decimal_avoids_float_noise(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal(0)
        assert to_decimal("12.50") == Decimal("12.50")

    def test_quantize_cent_half_up(self):
        assert quantize_cent("2.345") == Decimal("2.35")
        assert quantize_cent(3) == Decimal("3.00")
