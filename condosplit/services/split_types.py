"""Value types exchanged between the apportionment services.

These are constructed fresh for every calculation and never persisted by the
engine. Types that end up in the JSON output are pydantic models; internal
lookups and cost tuples stay NamedTuples.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from condosplit.models.meter import MeterType


class Season(str, Enum):
    """Seasonal rule set selecting the active voluntary categories."""

    SUMMER = "summer"
    WINTER = "winter"


class Fuel(str, Enum):
    """Fuels apportioned by the engine."""

    GAS = "gas"
    ELECTRICITY = "electricity"


class SplitType(str, Enum):
    """Which bills a calculation apportions."""

    GAS = "gas"
    ELECTRICITY = "electricity"
    BOTH = "both"

    @property
    def includes_gas(self) -> bool:
        return self in (SplitType.GAS, SplitType.BOTH)

    @property
    def includes_electricity(self) -> bool:
        return self in (SplitType.ELECTRICITY, SplitType.BOTH)


class MeterRef(NamedTuple):
    """A meter as seen by the aggregator."""

    id: int
    type: MeterType
    code: str | None = None


class ReadingPoint(NamedTuple):
    """A dated meter value."""

    reading_date: date
    value: Decimal


class UnitProfile(BaseModel):
    """Unit attributes needed by the splitters, detached from the database."""

    model_config = ConfigDict(frozen=True)

    id: int
    number: str
    name: str
    surface_area: Decimal
    is_inhabited: bool = True
    is_commercial: bool = False
    has_staircase_lights: bool = False
    monthly_water_fixed: Decimal = Decimal("0")
    monthly_elec_fixed_winter: Decimal = Decimal("0")
    monthly_elec_fixed_summer: Decimal = Decimal("0")
    monthly_gas_fixed_winter: Decimal = Decimal("0")
    monthly_gas_fixed_summer: Decimal = Decimal("0")
    meters: tuple[MeterRef, ...] = Field(default=(), exclude=True)

    @property
    def is_residential_inhabited(self) -> bool:
        return self.is_inhabited and not self.is_commercial

    def gas_forfait(self, season: Season) -> Decimal:
        if season == Season.SUMMER:
            return self.monthly_gas_fixed_summer
        return self.monthly_gas_fixed_winter

    def elec_forfait(self, season: Season) -> Decimal:
        if season == Season.SUMMER:
            return self.monthly_elec_fixed_summer
        return self.monthly_elec_fixed_winter


class ReadingTrace(BaseModel):
    """Audit entry for one meter: the bracketing readings and resulting delta."""

    model_config = ConfigDict(frozen=True)

    meter_id: int
    meter_type: MeterType
    meter_code: str | None
    start_value: Decimal
    start_date: date
    end_value: Decimal
    end_date: date
    raw_delta: Decimal
    consumption: Decimal
    anomaly: bool = False


class MeterAnomaly(BaseModel):
    """Non-fatal warning: a meter went backwards (likely reset or replacement)."""

    model_config = ConfigDict(frozen=True)

    unit_id: int
    meter_id: int
    meter_type: MeterType
    start_value: Decimal
    end_value: Decimal
    raw_delta: Decimal

    def describe(self) -> str:
        return (
            f"Meter {self.meter_id} ({self.meter_type.value}) of unit {self.unit_id} "
            f"went backwards: {self.start_value} -> {self.end_value} "
            f"(delta {self.raw_delta}), consumption clamped to 0"
        )

    @computed_field
    @property
    def description(self) -> str:
        """Human-readable warning, included when serialized."""
        return self.describe()


class UnitConsumption(BaseModel):
    """Per-unit consumption for one period."""

    unit: UnitProfile = Field(exclude=True)
    heating: Decimal = Decimal("0")
    hot_water: Decimal = Decimal("0")
    cold_water: Decimal = Decimal("0")
    readings: list[ReadingTrace] = Field(default_factory=list)

    @property
    def unit_id(self) -> int:
        return self.unit.id

    def amount_for(self, meter_type: MeterType) -> Decimal:
        return getattr(self, meter_type.value)


class GasCost(NamedTuple):
    """Gas cost of one unit, split into display buckets."""

    heating: Decimal = Decimal("0.00")
    hot_water: Decimal = Decimal("0.00")

    @property
    def total(self) -> Decimal:
        return self.heating + self.hot_water


class ElectricityCost(NamedTuple):
    """Electricity cost of one unit by category."""

    staircase_lights: Decimal = Decimal("0.00")
    commercial_water: Decimal = Decimal("0.00")
    fixed: Decimal = Decimal("0.00")
    heating: Decimal = Decimal("0.00")
    cooling: Decimal = Decimal("0.00")
    hot_water: Decimal = Decimal("0.00")
    cold_water: Decimal = Decimal("0.00")

    @property
    def total(self) -> Decimal:
        return sum(self, Decimal("0.00"))
