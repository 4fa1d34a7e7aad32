"""Service for apportioning the building gas bill across units."""

import logging
from decimal import Decimal
from typing import Sequence

from condosplit.services.allocation_service import ZERO, AllocationService, quantize_cent
from condosplit.services.errors import DeductionOverflowError, InsufficientDataError
from condosplit.services.split_settings import SplitSettings
from condosplit.services.split_types import GasCost, Season, UnitConsumption
from condosplit.services.trace import CalculationTrace

logger = logging.getLogger(__name__)

# Display-only split of the involuntary share between the two gas buckets.
INVOLUNTARY_HEATING_FRACTION = Decimal("0.10")


class GasSplitService:
    """Gas apportionment: seasonal percentages, forfaits and zero-consumption redistribution.

    Uninhabited units, commercial ones included, pay only their seasonal
    forfait. Inhabited commercial units never take part in gas apportionment.
    """

    def __init__(self, allocation: AllocationService | None = None):
        self.allocation = allocation or AllocationService()

    @staticmethod
    def common_areas_cost(settings: SplitSettings, months: int) -> Decimal:
        return quantize_cent(settings.common_areas_gas_monthly * months)

    @staticmethod
    def forfaits(
        consumptions: Sequence[UnitConsumption],
        season: Season,
        months: int,
    ) -> dict[int, Decimal]:
        """Seasonal gas forfait of every uninhabited unit for the period."""
        return {
            c.unit_id: quantize_cent(c.unit.gas_forfait(season) * months)
            for c in consumptions
            if not c.unit.is_inhabited
        }

    def split(
        self,
        total_gas_cost: Decimal,
        consumptions: Sequence[UnitConsumption],
        settings: SplitSettings,
        season: Season,
        months: int = 1,
        trace: CalculationTrace | None = None,
    ) -> dict[int, GasCost]:
        """Split the gas bill.

        Steps:
        1. Deduct common areas (monthly cost x months)
        2. Deduct uninhabited forfaits; the remainder is the cost to distribute
        3. Resolve and check the seasonal percentage model
        4. Allocate the cost to distribute into involuntary/heating/hot water buckets
        5. Move buckets without any consumption into the involuntary bucket
        6. Distribute per unit

        Args:
            total_gas_cost: Sum of gas bills for the period
            consumptions: Per-unit consumption for the period
            settings: Parsed settings
            season: Season of the period
            months: Number of months covered (multiplies monthly amounts)
            trace: Optional audit trail receiving intermediate values

        Returns:
            Dict mapping unit_id to GasCost, one entry per consumption record

        Raises:
            DeductionOverflowError: If a deduction exceeds the remaining bill
            ConfigurationError: If the percentages do not close to 100%
            InsufficientDataError: If an involuntary quota exists but no
                inhabited residential surface can carry it
        """
        trace = trace if trace is not None else CalculationTrace()
        total = quantize_cent(total_gas_cost)

        # Step 1: common areas
        common_areas = self.common_areas_cost(settings, months)
        after_common = total - common_areas
        if after_common < 0:
            raise DeductionOverflowError(
                f"Gas common areas cost {common_areas} EUR ({months} month(s)) "
                f"exceeds the gas bill total {total} EUR"
            )

        # Step 2: uninhabited forfaits
        forfaits = self.forfaits(consumptions, season, months)
        forfaits_total = sum(forfaits.values(), ZERO)
        cost_to_distribute = after_common - forfaits_total
        if cost_to_distribute < 0:
            raise DeductionOverflowError(
                f"Gas forfaits of uninhabited units ({forfaits_total} EUR) exceed the "
                f"{after_common} EUR left after common areas"
            )
        trace.record(
            "gas.deductions",
            total=total,
            common_areas=common_areas,
            forfaits=forfaits,
            forfaits_total=forfaits_total,
            cost_to_distribute=cost_to_distribute,
        )

        # Step 3: percentages
        model = settings.gas_percentages(season)
        trace.record(
            "gas.percentages",
            season=season,
            involuntary=model.involuntary,
            heating=model.heating,
            hot_water=model.hot_water,
        )

        # Step 4: buckets; involuntary takes the cent remainder
        buckets = self.allocation.split_by_percentages(
            cost_to_distribute,
            {
                "involuntary": model.involuntary,
                "heating": model.heating,
                "hot_water": model.hot_water,
            },
            remainder_key="involuntary",
        )

        # Step 5: zero-consumption redistribution over inhabited residential units
        residential = [c for c in consumptions if c.unit.is_residential_inhabited]
        totals = {
            "heating": sum((c.heating for c in residential), Decimal(0)),
            "hot_water": sum((c.hot_water for c in residential), Decimal(0)),
        }
        total_surface = sum((c.unit.surface_area for c in residential), Decimal(0))

        redistributed = []
        for category in ("heating", "hot_water"):
            if totals[category] == 0 and getattr(model, category) > 0:
                buckets["involuntary"] += buckets[category]
                buckets[category] = ZERO
                redistributed.append(category)

        trace.record(
            "gas.buckets",
            involuntary=buckets["involuntary"],
            heating=buckets["heating"],
            hot_water=buckets["hot_water"],
            total_heating=totals["heating"],
            total_hot_water=totals["hot_water"],
            total_surface=total_surface,
            redistributed=redistributed,
        )

        if buckets["involuntary"] > 0 and total_surface <= 0:
            raise InsufficientDataError(
                f"Gas involuntary quota of {buckets['involuntary']} EUR cannot be "
                f"apportioned: no inhabited residential surface"
            )

        # Step 6: per-unit distribution
        involuntary_shares = self.allocation.distribute_with_remainder(
            buckets["involuntary"], {c.unit_id: c.unit.surface_area for c in residential}
        )
        heating_shares = self.allocation.distribute_with_remainder(
            buckets["heating"], {c.unit_id: c.heating for c in residential}
        )
        hot_water_shares = self.allocation.distribute_with_remainder(
            buckets["hot_water"], {c.unit_id: c.hot_water for c in residential}
        )

        results: dict[int, GasCost] = {}
        for c in consumptions:
            if not c.unit.is_inhabited:
                heating, hot_water = self.allocation.split_halves(forfaits[c.unit_id])
                results[c.unit_id] = GasCost(heating=heating, hot_water=hot_water)
            elif c.unit.is_commercial:
                results[c.unit_id] = GasCost(heating=ZERO, hot_water=ZERO)
            else:
                involuntary_heating, involuntary_hot_water = self.allocation.split_fraction(
                    involuntary_shares[c.unit_id], INVOLUNTARY_HEATING_FRACTION
                )
                results[c.unit_id] = GasCost(
                    heating=heating_shares[c.unit_id] + involuntary_heating,
                    hot_water=hot_water_shares[c.unit_id] + involuntary_hot_water,
                )

        trace.record(
            "gas.units",
            shares={
                unit_id: {
                    "involuntary": involuntary_shares[unit_id],
                    "heating": heating_shares[unit_id],
                    "hot_water": hot_water_shares[unit_id],
                }
                for unit_id in involuntary_shares
            },
            costs={unit_id: cost._asdict() for unit_id, cost in results.items()},
        )

        logger.info(
            "Gas split (%s, %d month(s)): total=%s common=%s forfaits=%s distributed=%s",
            season.value,
            months,
            total,
            common_areas,
            forfaits_total,
            cost_to_distribute,
        )
        return results
