"""Orchestration of a full apportionment run for a period.

Loads settings and bill totals, aggregates consumptions, runs the gas and/or
electricity splitters, merges per-unit costs and enforces the conservation
check: the apportioned amounts must add back up to the billed total.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, computed_field

from condosplit.models.bill import BillType
from condosplit.services.allocation_service import ZERO, quantize_cent
from condosplit.services.consumption_service import (
    ReadingsLookup,
    aggregate_consumptions,
    collect_anomalies,
)
from condosplit.services.electricity_service import ElectricitySplitService
from condosplit.services.errors import ConservationViolation, InsufficientDataError
from condosplit.services.gas_service import GasSplitService
from condosplit.services.season import count_months, period_midpoint, resolve_season
from condosplit.services.split_settings import SplitSettings
from condosplit.services.split_types import (
    ElectricityCost,
    GasCost,
    MeterAnomaly,
    Season,
    SplitType,
    UnitConsumption,
    UnitProfile,
)
from condosplit.services.trace import CalculationTrace

logger = logging.getLogger(__name__)

CONSERVATION_TOLERANCE = Decimal("0.02")
DATE_FORMAT = "%Y-%m-%d"


class SplitDataSource(ReadingsLookup, Protocol):
    """Everything the orchestrator reads: settings, bills, units and readings."""

    def load_settings(self) -> dict[str, str]: ...

    def sum_bills(self, bill_type: BillType, date_from: date, date_to: date) -> Decimal: ...

    def list_units(self) -> list[UnitProfile]: ...


class UnitCosts(BaseModel):
    """Named cost sub-totals of one unit."""

    model_config = ConfigDict(frozen=True)

    gas_heating: Decimal = ZERO
    gas_hot_water: Decimal = ZERO
    elec_staircase_lights: Decimal = ZERO
    elec_commercial_water: Decimal = ZERO
    elec_fixed: Decimal = ZERO
    elec_heating: Decimal = ZERO
    elec_cooling: Decimal = ZERO
    elec_hot_water: Decimal = ZERO
    elec_cold_water: Decimal = ZERO

    @classmethod
    def merge(cls, gas: GasCost, elec: ElectricityCost) -> "UnitCosts":
        return cls(
            gas_heating=gas.heating,
            gas_hot_water=gas.hot_water,
            elec_staircase_lights=elec.staircase_lights,
            elec_commercial_water=elec.commercial_water,
            elec_fixed=elec.fixed,
            elec_heating=elec.heating,
            elec_cooling=elec.cooling,
            elec_hot_water=elec.hot_water,
            elec_cold_water=elec.cold_water,
        )

    @property
    def gas_total(self) -> Decimal:
        return self.gas_heating + self.gas_hot_water

    @property
    def elec_total(self) -> Decimal:
        return (
            self.elec_staircase_lights
            + self.elec_commercial_water
            + self.elec_fixed
            + self.elec_heating
            + self.elec_cooling
            + self.elec_hot_water
            + self.elec_cold_water
        )

    @computed_field
    @property
    def total(self) -> Decimal:
        return self.gas_total + self.elec_total


class UnitSplit(BaseModel):
    """Apportionment result for one unit."""

    model_config = ConfigDict(frozen=True)

    consumption: UnitConsumption
    costs: UnitCosts

    @computed_field
    @property
    def unit(self) -> UnitProfile:
        return self.consumption.unit


class Verification(BaseModel):
    """Conservation check outcome."""

    model_config = ConfigDict(frozen=True)

    expected_total: Decimal
    """Sum of the bills apportioned"""

    calculated_total: Decimal
    """Sum of unit totals plus common areas"""

    difference: Decimal
    passed: bool
    """True when the difference is within CONSERVATION_TOLERANCE"""


class SplitResult(BaseModel):
    """Full apportionment of one period.

    Serialized with pydantic: decimals become strings, dates ISO strings and
    enums their values. The trace is left out unless explicitly requested.
    """

    date_from: date
    date_to: date
    months: int
    season: Season
    split_type: SplitType
    total_gas_cost: Decimal
    total_elec_cost: Decimal
    common_areas_gas: Decimal
    common_areas_elec: Decimal
    units: list[UnitSplit]
    verification: Verification
    anomalies: list[MeterAnomaly] = Field(default_factory=list)
    trace: CalculationTrace = Field(default_factory=CalculationTrace)

    @computed_field
    @property
    def total_cost(self) -> Decimal:
        return self.total_gas_cost + self.total_elec_cost

    @computed_field
    @property
    def warnings(self) -> list[str]:
        return list(self.trace.warnings)

    def unit(self, unit_id: int) -> UnitSplit:
        for unit_split in self.units:
            if unit_split.unit.id == unit_id:
                return unit_split
        raise KeyError(unit_id)

    def to_dict(self, include_trace: bool = False) -> dict:
        """JSON-ready dict of the result, with the trace only when include_trace is set."""
        return self.model_dump(mode="json", exclude=None if include_trace else {"trace"})


def parse_date(value: date | str, name: str) -> date:
    """Accept a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {name}: {value!r}. Expected format YYYY-MM-DD") from e


class SplitService:
    """Apportionment orchestrator.

    Holds no state between calls; every calculation builds its own trace.
    """

    def __init__(
        self,
        source: SplitDataSource,
        gas_service: GasSplitService | None = None,
        electricity_service: ElectricitySplitService | None = None,
    ):
        self.source = source
        self.gas_service = gas_service or GasSplitService()
        self.electricity_service = electricity_service or ElectricitySplitService()

    def calculate_monthly_split(
        self,
        date_from: date | str,
        date_to: date | str,
        split_type: SplitType | str = SplitType.BOTH,
    ) -> SplitResult:
        """Apportion the bills of [date_from, date_to] across all units.

        Args:
            date_from: First day of the period (inclusive)
            date_to: Last day of the period (inclusive)
            split_type: gas, electricity or both

        Returns:
            SplitResult with per-unit costs, verification block and trace

        Raises:
            ValueError: If dates are malformed, reversed, or the type is unknown
            InsufficientDataError: If no bills or no units are found
            ConfigurationError: If settings are invalid
            DeductionOverflowError: If a fixed deduction exceeds a bill
            ConservationViolation: If per-unit costs do not add up to the bills
        """
        start = parse_date(date_from, "dateFrom")
        end = parse_date(date_to, "dateTo")
        if start > end:
            raise ValueError(f"dateFrom {start} must be before or equal to dateTo {end}")
        split_type = SplitType(split_type)

        trace = CalculationTrace()

        # 1. Settings
        settings = SplitSettings.from_mapping(self.source.load_settings())

        # 2. Season from the midpoint month, months for the monthly amounts
        midpoint = period_midpoint(start, end)
        season = resolve_season(midpoint.month, settings)
        months = count_months(start, end)
        trace.record(
            "period",
            date_from=start.isoformat(),
            date_to=end.isoformat(),
            midpoint=midpoint.isoformat(),
            season=season,
            months=months,
            split_type=split_type,
        )

        # 3. Bills
        total_gas = ZERO
        total_elec = ZERO
        if split_type.includes_gas:
            total_gas = quantize_cent(self.source.sum_bills(BillType.GAS, start, end))
        if split_type.includes_electricity:
            total_elec = quantize_cent(self.source.sum_bills(BillType.ELECTRICITY, start, end))
        trace.record("bills", gas=total_gas, electricity=total_elec)

        if split_type == SplitType.BOTH:
            if total_gas == 0 and total_elec == 0:
                raise InsufficientDataError(f"No gas or electricity bills found between {start} and {end}")
        elif split_type == SplitType.GAS and total_gas == 0:
            raise InsufficientDataError(f"No gas bills found between {start} and {end}")
        elif split_type == SplitType.ELECTRICITY and total_elec == 0:
            raise InsufficientDataError(f"No electricity bills found between {start} and {end}")

        # 4. Consumptions
        units = self.source.list_units()
        if not units:
            raise InsufficientDataError("No units found: no consumption data to apportion")
        consumptions = aggregate_consumptions(start, end, units, self.source, trace=trace)

        # 5. Splitters
        gas_costs: dict[int, GasCost] = {}
        common_gas = ZERO
        if total_gas > 0:
            gas_costs = self.gas_service.split(total_gas, consumptions, settings, season, months, trace)
            common_gas = self.gas_service.common_areas_cost(settings, months)

        elec_costs: dict[int, ElectricityCost] = {}
        common_elec = ZERO
        if total_elec > 0:
            elec_costs = self.electricity_service.split(
                total_elec, consumptions, settings, midpoint.month, months, trace
            )
            common_elec = self.electricity_service.common_areas_cost(settings, months)

        # 6. Merge
        unit_splits = [
            UnitSplit(
                consumption=c,
                costs=UnitCosts.merge(
                    gas_costs.get(c.unit_id, GasCost()),
                    elec_costs.get(c.unit_id, ElectricityCost()),
                ),
            )
            for c in consumptions
        ]

        # 7. Conservation
        verification = self.verify(unit_splits, common_gas + common_elec, total_gas + total_elec)
        trace.record(
            "verification",
            expected_total=verification.expected_total,
            calculated_total=verification.calculated_total,
            difference=verification.difference,
            passed=verification.passed,
        )
        if not verification.passed:
            raise ConservationViolation(
                f"Apportioned total {verification.calculated_total} EUR differs from billed "
                f"total {verification.expected_total} EUR by {verification.difference} EUR "
                f"(tolerance {CONSERVATION_TOLERANCE} EUR)"
            )

        logger.info(
            "Split %s..%s (%s, %s, %d month(s)) for %d units: gas=%s electricity=%s",
            start,
            end,
            split_type.value,
            season.value,
            months,
            len(unit_splits),
            total_gas,
            total_elec,
        )

        return SplitResult(
            date_from=start,
            date_to=end,
            months=months,
            season=season,
            split_type=split_type,
            total_gas_cost=total_gas,
            total_elec_cost=total_elec,
            common_areas_gas=common_gas,
            common_areas_elec=common_elec,
            units=unit_splits,
            verification=verification,
            anomalies=collect_anomalies(consumptions),
            trace=trace,
        )

    @staticmethod
    def verify(
        unit_splits: list[UnitSplit],
        common_areas: Decimal,
        expected_total: Decimal,
    ) -> Verification:
        """Compare the apportioned total (units plus common areas) with the bills."""
        calculated = sum((u.costs.total for u in unit_splits), ZERO) + common_areas
        difference = abs(calculated - expected_total)
        return Verification(
            expected_total=expected_total,
            calculated_total=calculated,
            difference=difference,
            passed=difference <= CONSERVATION_TOLERANCE,
        )
