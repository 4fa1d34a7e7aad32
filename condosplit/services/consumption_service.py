"""Consumption aggregation: meter readings to per-unit consumption for a period."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Protocol

from condosplit.services.split_types import (
    MeterAnomaly,
    MeterRef,
    ReadingPoint,
    ReadingTrace,
    UnitConsumption,
    UnitProfile,
)
from condosplit.services.trace import CalculationTrace

logger = logging.getLogger(__name__)


class ReadingsLookup(Protocol):
    """Read interface over meter readings."""

    def latest_before(self, meter_id: int, day: date) -> ReadingPoint | None:
        """Latest reading strictly before day."""
        ...

    def latest_between(self, meter_id: int, start: date, end: date) -> ReadingPoint | None:
        """Latest reading with start <= reading_date <= end."""
        ...

    def latest_on_or_before(self, meter_id: int, day: date) -> ReadingPoint | None:
        """Latest reading with reading_date <= day."""
        ...


class InMemoryReadingsLookup:
    """ReadingsLookup over readings that were already fetched.

    When several readings share a date the one added last wins.
    """

    def __init__(self, readings: Iterable[tuple[int, date, Decimal]] = ()):
        self._by_meter: dict[int, list[ReadingPoint]] = defaultdict(list)
        for meter_id, reading_date, value in readings:
            self.add(meter_id, reading_date, value)

    def add(self, meter_id: int, reading_date: date, value) -> None:
        self._by_meter[meter_id].append(ReadingPoint(reading_date, Decimal(str(value))))

    def _latest(self, meter_id: int, accept) -> ReadingPoint | None:
        latest = None
        for point in self._by_meter.get(meter_id, []):
            if accept(point.reading_date) and (latest is None or point.reading_date >= latest.reading_date):
                latest = point
        return latest

    def latest_before(self, meter_id: int, day: date) -> ReadingPoint | None:
        return self._latest(meter_id, lambda d: d < day)

    def latest_between(self, meter_id: int, start: date, end: date) -> ReadingPoint | None:
        return self._latest(meter_id, lambda d: start <= d <= end)

    def latest_on_or_before(self, meter_id: int, day: date) -> ReadingPoint | None:
        return self._latest(meter_id, lambda d: d <= day)


def resolve_meter_reading(
    meter: MeterRef,
    date_from: date,
    date_to: date,
    readings_lookup: ReadingsLookup,
) -> ReadingTrace | None:
    """Bracket one meter's consumption over [date_from, date_to].

    - start: latest reading strictly before date_from (no synthetic zero baseline)
    - end: latest reading inside the period, else latest reading <= date_to
    - consumption: max(0, end - start); a negative delta is flagged as an anomaly

    Returns:
        ReadingTrace, or None when either bracketing reading is missing
    """
    start = readings_lookup.latest_before(meter.id, date_from)
    if start is None:
        return None

    end = readings_lookup.latest_between(meter.id, date_from, date_to)
    if end is None:
        end = readings_lookup.latest_on_or_before(meter.id, date_to)
    if end is None:
        return None

    raw_delta = Decimal(str(end.value)) - Decimal(str(start.value))
    anomaly = raw_delta < 0

    return ReadingTrace(
        meter_id=meter.id,
        meter_type=meter.type,
        meter_code=meter.code,
        start_value=start.value,
        start_date=start.reading_date,
        end_value=end.value,
        end_date=end.reading_date,
        raw_delta=raw_delta,
        consumption=Decimal(0) if anomaly else raw_delta,
        anomaly=anomaly,
    )


def aggregate_consumptions(
    date_from: date,
    date_to: date,
    units: Iterable[UnitProfile],
    readings_lookup: ReadingsLookup,
    trace: CalculationTrace | None = None,
) -> list[UnitConsumption]:
    """Build one UnitConsumption per unit, in input order.

    Units without meters (or without usable readings) are still returned with
    zero consumption. Negative deltas never raise; they are clamped to zero,
    flagged in the reading trace and reported as warnings.
    """
    consumptions: list[UnitConsumption] = []

    for unit in units:
        consumption = UnitConsumption(unit=unit)

        for meter in unit.meters:
            reading = resolve_meter_reading(meter, date_from, date_to, readings_lookup)
            if reading is None:
                logger.debug(
                    "Unit %s meter %d (%s): no bracketing readings, consumption left at 0",
                    unit.number,
                    meter.id,
                    meter.type.value,
                )
                continue

            if reading.anomaly:
                message = MeterAnomaly(
                    unit_id=unit.id,
                    meter_id=meter.id,
                    meter_type=meter.type,
                    start_value=reading.start_value,
                    end_value=reading.end_value,
                    raw_delta=reading.raw_delta,
                ).describe()
                if trace is not None:
                    trace.warn(message)
                else:
                    logger.warning(message)

            setattr(consumption, meter.type.value, reading.consumption)
            consumption.readings.append(reading)

        consumptions.append(consumption)

    if trace is not None:
        trace.record(
            "consumptions",
            units=len(consumptions),
            by_unit={
                c.unit_id: {
                    "heating": c.heating,
                    "hot_water": c.hot_water,
                    "cold_water": c.cold_water,
                }
                for c in consumptions
            },
        )

    return consumptions


def collect_anomalies(consumptions: Iterable[UnitConsumption]) -> list[MeterAnomaly]:
    """All negative-delta readings across the given consumptions."""
    return [
        MeterAnomaly(
            unit_id=c.unit_id,
            meter_id=r.meter_id,
            meter_type=r.meter_type,
            start_value=r.start_value,
            end_value=r.end_value,
            raw_delta=r.raw_delta,
        )
        for c in consumptions
        for r in c.readings
        if r.anomaly
    ]
