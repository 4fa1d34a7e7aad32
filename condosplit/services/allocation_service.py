"""Allocation helpers for distributing money across units to the cent.

Supports allocation strategies:
- BY_WEIGHT: Distribute by a weight per unit (surface or metered consumption)
- PERCENTAGE: Take a percentage share of an amount, or split it into percentage buckets
- HALVES: Split a flat amount in two display buckets
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Dict, Hashable, Mapping

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Convert int/float/str/Decimal/None to Decimal without binary float noise."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_cent(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class AllocationService:
    """Cent-exact allocation engine."""

    def distribute_with_remainder(
        self,
        total_amount: Decimal,
        weights: Mapping[Hashable, Decimal],
    ) -> Dict[Hashable, Decimal]:
        """Distribute amount by weights, allocating leftover cents by largest remainder.

        Ensures: sum(result) == total_amount quantized to cents (zero money loss/creation)

        Algorithm:
        1. Compute the exact share of every key: total * weight / sum(weights)
        2. Truncate each share to cents
        3. Hand out the leftover cents one by one, largest fractional part first
           (ties broken by larger weight, then by insertion order)

        Args:
            total_amount: Total to distribute (Decimal, >= 0)
            weights: Dict mapping key to weight (Decimal, >= 0)

        Returns:
            Dict mapping key to allocated amount. All zeros if every weight is zero.
        """
        if not weights:
            return {}

        total = quantize_cent(total_amount)
        weight_dict = {k: to_decimal(v) for k, v in weights.items()}

        total_weight = sum(weight_dict.values(), Decimal(0))
        if total_weight == 0:
            return {k: ZERO for k in weight_dict}

        allocations: Dict[Hashable, Decimal] = {}
        fractions = []
        allocated_total = Decimal(0)

        for order, (key, weight) in enumerate(weight_dict.items()):
            exact = total * weight / total_weight
            truncated = exact.quantize(CENT, rounding=ROUND_DOWN)
            allocations[key] = truncated
            allocated_total += truncated
            fractions.append((exact - truncated, weight, -order, key))

        remainder_cents = int(((total - allocated_total) / CENT).to_integral_value())

        fractions.sort(reverse=True)
        for i in range(remainder_cents):
            key = fractions[i % len(fractions)][3]
            allocations[key] += CENT

        return allocations

    def split_by_percentages(
        self,
        amount: Decimal,
        percentages: Mapping[Hashable, Decimal],
        remainder_key: Hashable,
    ) -> Dict[Hashable, Decimal]:
        """Split amount into percentage buckets with one bucket taking the remainder.

        Every bucket except remainder_key gets its share truncated to the cent,
        relative to the sum of the percentages. remainder_key gets amount minus
        the other buckets, so the leftover cents always land there.

        Args:
            amount: Amount to split (Decimal, >= 0)
            percentages: Dict mapping bucket to percentage (Decimal, >= 0)
            remainder_key: Bucket receiving the rounding remainder

        Returns:
            Dict mapping bucket to amount, in the order of percentages
        """
        total = quantize_cent(amount)
        weights = {k: to_decimal(v) for k, v in percentages.items()}
        total_weight = sum(weights.values(), Decimal(0))
        if total_weight == 0:
            return {k: ZERO for k in weights}

        buckets: Dict[Hashable, Decimal] = {}
        for key, weight in weights.items():
            if key != remainder_key:
                buckets[key] = (total * weight / total_weight).quantize(CENT, rounding=ROUND_DOWN)
        rest = total - sum(buckets.values(), ZERO)
        return {k: rest if k == remainder_key else buckets[k] for k in weights}

    def percentage_of(self, amount: Decimal, percentage: Decimal) -> Decimal:
        """Return percentage% of amount, rounded to the cent."""
        return quantize_cent(to_decimal(amount) * to_decimal(percentage) / HUNDRED)

    def split_fraction(self, amount: Decimal, fraction: Decimal) -> tuple[Decimal, Decimal]:
        """Split amount into (fraction part, rest); the rest absorbs rounding."""
        amount = quantize_cent(amount)
        first = quantize_cent(amount * to_decimal(fraction))
        return first, amount - first

    def split_halves(self, amount: Decimal) -> tuple[Decimal, Decimal]:
        """Split amount in two; an odd cent goes to the second half."""
        amount = quantize_cent(amount)
        first = (amount / 2).quantize(CENT, rounding=ROUND_DOWN)
        return first, amount - first
