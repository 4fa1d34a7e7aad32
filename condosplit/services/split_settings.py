"""Typed view over the flat key/value settings table.

Settings are stored as strings and parsed by pydantic. Missing keys fall back
to DEFAULT_SETTINGS, malformed values raise ConfigurationError. The seasonal
percentage models must close to 100% within PERCENTAGE_TOLERANCE.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from condosplit.services.errors import ConfigurationError
from condosplit.services.split_types import Fuel, Season

PERCENTAGE_TOLERANCE = Decimal("1")

# key -> (default value, description)
DEFAULT_SETTINGS: dict[str, tuple[str, str]] = {
    "summer_start_month": ("6", "First summer month (1-12)"),
    "summer_end_month": ("9", "Last summer month (1-12)"),
    "gas_involuntary_pct": ("40", "Gas involuntary quota (%)"),
    "gas_winter_heating_pct": ("40", "Gas heating quota in winter (%)"),
    "gas_winter_hot_water_pct": ("20", "Gas hot water quota in winter (%)"),
    "gas_summer_hot_water_pct": ("60", "Gas hot water quota in summer (%)"),
    "common_areas_gas_monthly": ("0", "Common areas gas cost (EUR/month)"),
    "elec_involuntary_pct": ("40", "Electricity involuntary quota (%)"),
    "winter_heating_pct": ("30", "Electricity heating quota in winter (%)"),
    "winter_hot_water_pct": ("20", "Electricity hot water quota in winter (%)"),
    "winter_cold_water_pct": ("10", "Electricity cold water quota in winter (%)"),
    "summer_cooling_pct": ("20", "Electricity cooling quota in summer (%)"),
    "summer_hot_water_pct": ("20", "Electricity hot water quota in summer (%)"),
    "summer_cold_water_pct": ("20", "Electricity cold water quota in summer (%)"),
    "common_areas_elec_monthly": ("0", "Common areas electricity cost (EUR/month)"),
    "staircase_lights_monthly": ("0", "Staircase lights fee per unit (EUR/month)"),
}


@dataclass(frozen=True)
class PercentageModel:
    """Involuntary and voluntary percentages for one fuel in one season."""

    fuel: Fuel
    season: Season
    involuntary: Decimal
    heating: Decimal = Decimal("0")
    cooling: Decimal = Decimal("0")
    hot_water: Decimal = Decimal("0")
    cold_water: Decimal = Decimal("0")

    @property
    def voluntary(self) -> dict[str, Decimal]:
        return {
            "heating": self.heating,
            "cooling": self.cooling,
            "hot_water": self.hot_water,
            "cold_water": self.cold_water,
        }

    @property
    def total(self) -> Decimal:
        return self.involuntary + sum(self.voluntary.values(), Decimal(0))

    def validate(self) -> "PercentageModel":
        """Raise ConfigurationError unless the percentages sum to 100 (+/- 1)."""
        total = self.total
        if abs(total - Decimal("100")) > PERCENTAGE_TOLERANCE:
            raise ConfigurationError(
                f"{self.fuel.value} percentages for {self.season.value} sum to {total}% "
                f"(involuntary {self.involuntary}% + voluntary "
                + ", ".join(f"{name} {pct}%" for name, pct in self.voluntary.items())
                + "), expected 100%"
            )
        for name, pct in [("involuntary", self.involuntary), *self.voluntary.items()]:
            if pct < 0:
                raise ConfigurationError(
                    f"{self.fuel.value} {name} percentage for {self.season.value} "
                    f"is negative: {pct}%"
                )
        return self


MONTH_KEYS = ("summer_start_month", "summer_end_month")
NON_NEGATIVE_KEYS = ("common_areas_gas_monthly", "common_areas_elec_monthly", "staircase_lights_monthly")


class SplitSettings(BaseModel):
    """Parsed settings used by the season resolver and both splitters."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    summer_start_month: int = 6
    summer_end_month: int = 9
    gas_involuntary_pct: Decimal = Decimal("40")
    gas_winter_heating_pct: Decimal = Decimal("40")
    gas_winter_hot_water_pct: Decimal = Decimal("20")
    gas_summer_hot_water_pct: Decimal = Decimal("60")
    common_areas_gas_monthly: Decimal = Decimal("0")
    elec_involuntary_pct: Decimal = Decimal("40")
    winter_heating_pct: Decimal = Decimal("30")
    winter_hot_water_pct: Decimal = Decimal("20")
    winter_cold_water_pct: Decimal = Decimal("10")
    summer_cooling_pct: Decimal = Decimal("20")
    summer_hot_water_pct: Decimal = Decimal("20")
    summer_cold_water_pct: Decimal = Decimal("20")
    common_areas_elec_monthly: Decimal = Decimal("0")
    staircase_lights_monthly: Decimal = Decimal("0")

    @field_validator(*MONTH_KEYS)
    @classmethod
    def check_month(cls, value: int) -> int:
        if not 1 <= value <= 12:
            raise ValueError(f"must be a month between 1 and 12, got {value}")
        return value

    @field_validator(*NON_NEGATIVE_KEYS)
    @classmethod
    def check_non_negative(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError(f"cannot be negative: {value}")
        return value

    @classmethod
    def from_mapping(cls, raw: Mapping[str, str]) -> "SplitSettings":
        """Build settings from the raw key/value map.

        Values are stripped; missing or blank values fall back to the defaults
        and unknown keys are ignored.

        Raises:
            ConfigurationError: If a value is not a number or out of range
        """
        values = {}
        for key in DEFAULT_SETTINGS:
            value = raw.get(key)
            if value is not None and str(value).strip() != "":
                values[key] = str(value).strip()

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            error = e.errors()[0]
            key = error["loc"][0] if error["loc"] else "?"
            message = error["msg"].removeprefix("Value error, ")
            raise ConfigurationError(f"Setting {key!r} is invalid ({message}): {values.get(key)!r}") from e

    def gas_percentages(self, season: Season) -> PercentageModel:
        """Gas model: heating is forced to 0 in summer."""
        if season == Season.WINTER:
            model = PercentageModel(
                fuel=Fuel.GAS,
                season=season,
                involuntary=self.gas_involuntary_pct,
                heating=self.gas_winter_heating_pct,
                hot_water=self.gas_winter_hot_water_pct,
            )
        else:
            model = PercentageModel(
                fuel=Fuel.GAS,
                season=season,
                involuntary=self.gas_involuntary_pct,
                hot_water=self.gas_summer_hot_water_pct,
            )
        return model.validate()

    def electricity_percentages(self, season: Season) -> PercentageModel:
        """Electricity model: heating in winter, cooling in summer, water all year."""
        if season == Season.WINTER:
            model = PercentageModel(
                fuel=Fuel.ELECTRICITY,
                season=season,
                involuntary=self.elec_involuntary_pct,
                heating=self.winter_heating_pct,
                hot_water=self.winter_hot_water_pct,
                cold_water=self.winter_cold_water_pct,
            )
        else:
            model = PercentageModel(
                fuel=Fuel.ELECTRICITY,
                season=season,
                involuntary=self.elec_involuntary_pct,
                cooling=self.summer_cooling_pct,
                hot_water=self.summer_hot_water_pct,
                cold_water=self.summer_cold_water_pct,
            )
        return model.validate()
