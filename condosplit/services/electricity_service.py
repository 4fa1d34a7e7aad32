"""Service for apportioning the building electricity bill across units."""

import logging
from decimal import Decimal
from typing import Sequence

from condosplit.services.allocation_service import ZERO, AllocationService, quantize_cent
from condosplit.services.errors import DeductionOverflowError, InsufficientDataError
from condosplit.services.season import resolve_season
from condosplit.services.split_settings import SplitSettings
from condosplit.services.split_types import ElectricityCost, Season, UnitConsumption
from condosplit.services.trace import CalculationTrace

logger = logging.getLogger(__name__)

INTERNAL_TOLERANCE = Decimal("0.02")
VOLUNTARY_CATEGORIES = ("heating", "cooling", "hot_water", "cold_water")


class ElectricitySplitService:
    """Electricity apportionment with the full deduction chain.

    Deductions, in order: common areas, staircase lights, commercial water
    forfait, uninhabited forfaits. What remains is split by the seasonal
    involuntary/voluntary model. Cooling has no meter of its own and is
    apportioned on the heating meter.
    """

    def __init__(self, allocation: AllocationService | None = None):
        self.allocation = allocation or AllocationService()

    @staticmethod
    def common_areas_cost(settings: SplitSettings, months: int) -> Decimal:
        return quantize_cent(settings.common_areas_elec_monthly * months)

    def _deduct(self, remaining: Decimal, amount: Decimal, label: str, total: Decimal) -> Decimal:
        left = remaining - amount
        if left < 0:
            raise DeductionOverflowError(
                f"Electricity {label} ({amount} EUR) exceed the {remaining} EUR left "
                f"on the electricity bill total {total} EUR"
            )
        return left

    def split(
        self,
        total_elec_cost: Decimal,
        consumptions: Sequence[UnitConsumption],
        settings: SplitSettings,
        month: int,
        months: int = 1,
        trace: CalculationTrace | None = None,
    ) -> dict[int, ElectricityCost]:
        """Split the electricity bill.

        Args:
            total_elec_cost: Sum of electricity bills for the period
            consumptions: Per-unit consumption for the period
            settings: Parsed settings
            month: Calendar month used to resolve the season
            months: Number of months covered (multiplies monthly amounts)
            trace: Optional audit trail receiving intermediate values

        Returns:
            Dict mapping unit_id to ElectricityCost, one entry per consumption record

        Raises:
            DeductionOverflowError: If a deduction exceeds the remaining bill
            ConfigurationError: If the percentages do not close to 100%
            InsufficientDataError: If an involuntary quota exists but no
                inhabited residential surface can carry it
        """
        trace = trace if trace is not None else CalculationTrace()
        season = resolve_season(month, settings)
        total = quantize_cent(total_elec_cost)

        inhabited = [c for c in consumptions if c.unit.is_inhabited]
        residential = [c for c in inhabited if not c.unit.is_commercial]
        commercial = [c for c in inhabited if c.unit.is_commercial]
        uninhabited = [c for c in consumptions if not c.unit.is_inhabited]

        # Step 1: common areas
        common_areas = self.common_areas_cost(settings, months)
        remaining = self._deduct(total, common_areas, "common areas cost", total)

        # Step 2: staircase lights, flat fee per inhabited flagged unit
        staircase_fee = quantize_cent(settings.staircase_lights_monthly * months)
        staircase_units = [c.unit_id for c in inhabited if c.unit.has_staircase_lights]
        staircase_total = staircase_fee * len(staircase_units)
        remaining = self._deduct(remaining, staircase_total, "staircase lights", total)

        # Step 3: commercial water forfait
        commercial_water = {
            c.unit_id: quantize_cent(c.unit.monthly_water_fixed * months) for c in commercial
        }
        commercial_water_total = sum(commercial_water.values(), ZERO)
        remaining = self._deduct(remaining, commercial_water_total, "commercial water forfaits", total)

        # Step 4: uninhabited forfaits
        forfaits = {c.unit_id: quantize_cent(c.unit.elec_forfait(season) * months) for c in uninhabited}
        forfaits_total = sum(forfaits.values(), ZERO)
        cost_to_distribute = self._deduct(remaining, forfaits_total, "uninhabited forfaits", total)

        trace.record(
            "electricity.deductions",
            total=total,
            common_areas=common_areas,
            staircase_fee=staircase_fee,
            staircase_units=staircase_units,
            staircase_total=staircase_total,
            commercial_water=commercial_water,
            commercial_water_total=commercial_water_total,
            forfaits=forfaits,
            forfaits_total=forfaits_total,
            cost_to_distribute=cost_to_distribute,
        )

        model = settings.electricity_percentages(season)
        trace.record(
            "electricity.percentages",
            season=season,
            involuntary=model.involuntary,
            **model.voluntary,
        )

        # Percentages apply to the whole cost to distribute; involuntary takes the cent remainder
        buckets = self.allocation.split_by_percentages(
            cost_to_distribute,
            {"involuntary": model.involuntary, **model.voluntary},
            remainder_key="involuntary",
        )

        heating_total = sum((c.heating for c in residential), Decimal(0))
        totals = {
            "heating": heating_total,
            "cooling": heating_total,
            "hot_water": sum((c.hot_water for c in residential), Decimal(0)),
            "cold_water": sum((c.cold_water for c in inhabited), Decimal(0)),
        }
        total_surface = sum((c.unit.surface_area for c in residential), Decimal(0))

        # Zero-consumption buckets go wholesale into the involuntary bucket.
        # A structurally zero seasonal percentage is not redistributed.
        redistributed = []
        for category in VOLUNTARY_CATEGORIES:
            if totals[category] == 0 and model.voluntary[category] > 0:
                buckets["involuntary"] += buckets[category]
                buckets[category] = ZERO
                redistributed.append(category)

        trace.record(
            "electricity.buckets",
            **buckets,
            totals=totals,
            total_surface=total_surface,
            redistributed=redistributed,
        )

        if buckets["involuntary"] > 0 and total_surface <= 0:
            raise InsufficientDataError(
                f"Electricity involuntary quota of {buckets['involuntary']} EUR cannot be "
                f"apportioned: no inhabited residential surface"
            )

        involuntary_shares = self.allocation.distribute_with_remainder(
            buckets["involuntary"], {c.unit_id: c.unit.surface_area for c in residential}
        )
        heating_shares = self.allocation.distribute_with_remainder(
            buckets["heating"], {c.unit_id: c.heating for c in residential}
        )
        cooling_shares = self.allocation.distribute_with_remainder(
            buckets["cooling"], {c.unit_id: c.heating for c in residential}
        )
        hot_water_shares = self.allocation.distribute_with_remainder(
            buckets["hot_water"], {c.unit_id: c.hot_water for c in residential}
        )
        cold_water_shares = self.allocation.distribute_with_remainder(
            buckets["cold_water"], {c.unit_id: c.cold_water for c in inhabited}
        )

        results: dict[int, ElectricityCost] = {}
        for c in consumptions:
            unit = c.unit
            staircase = staircase_fee if c.unit_id in staircase_units else ZERO

            if not unit.is_inhabited:
                results[c.unit_id] = ElectricityCost(fixed=forfaits[c.unit_id])
            elif unit.is_commercial:
                results[c.unit_id] = ElectricityCost(
                    staircase_lights=staircase,
                    commercial_water=commercial_water[c.unit_id],
                    cold_water=cold_water_shares[c.unit_id],
                )
            else:
                results[c.unit_id] = ElectricityCost(
                    staircase_lights=staircase,
                    fixed=involuntary_shares[c.unit_id],
                    heating=heating_shares[c.unit_id],
                    cooling=cooling_shares[c.unit_id],
                    hot_water=hot_water_shares[c.unit_id],
                    cold_water=cold_water_shares[c.unit_id],
                )

        # Internal consistency: deductions plus inhabited shares must rebuild the bill
        inhabited_shares = sum(
            (
                involuntary_shares.get(c.unit_id, ZERO)
                + heating_shares.get(c.unit_id, ZERO)
                + cooling_shares.get(c.unit_id, ZERO)
                + hot_water_shares.get(c.unit_id, ZERO)
                + cold_water_shares.get(c.unit_id, ZERO)
                for c in inhabited
            ),
            ZERO,
        )
        rebuilt = common_areas + staircase_total + commercial_water_total + forfaits_total + inhabited_shares
        difference = abs(rebuilt - total)
        if difference > INTERNAL_TOLERANCE:
            trace.warn(
                f"Electricity split does not rebuild the bill: {rebuilt} EUR allocated "
                f"vs {total} EUR billed (difference {difference} EUR)"
            )

        trace.record(
            "electricity.units",
            costs={unit_id: cost._asdict() for unit_id, cost in results.items()},
            rebuilt_total=rebuilt,
            difference=difference,
        )

        logger.info(
            "Electricity split (%s, %d month(s)): total=%s common=%s staircase=%s "
            "commercial_water=%s forfaits=%s distributed=%s",
            season.value,
            months,
            total,
            common_areas,
            staircase_total,
            commercial_water_total,
            forfaits_total,
            cost_to_distribute,
        )
        return results
