"""Read-only database access feeding the apportionment engine."""

from datetime import date
from decimal import Decimal

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, selectinload

from condosplit.models.bill import Bill, BillType
from condosplit.models.meter import Reading
from condosplit.models.setting import Setting
from condosplit.models.unit import Unit
from condosplit.services.split_types import MeterRef, ReadingPoint, UnitProfile


def _money(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal(0)


class SplitRepository:
    """Queries for settings, bill totals, units with meters and meter readings.

    Implements both the SplitDataSource and the ReadingsLookup interfaces.
    Never writes.
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    def load_settings(self) -> dict[str, str]:
        """Get the raw settings map (key -> string value)."""
        rows = self.db.execute(select(Setting.key, Setting.value)).all()
        return {key: value for key, value in rows}

    def sum_bills(self, bill_type: BillType, date_from: date, date_to: date) -> Decimal:
        """Sum of bill amounts of one type with bill_date in [date_from, date_to].

        Returns:
            Total amount (or 0 if no bills exist)
        """
        result = self.db.execute(
            select(func.sum(Bill.amount)).where(
                (Bill.type == bill_type)
                & (Bill.bill_date >= date_from)
                & (Bill.bill_date <= date_to)
            )
        ).scalar()

        return _money(result)

    def list_units(self) -> list[UnitProfile]:
        """Get all units with their meters, detached into UnitProfile values."""
        stmt = select(Unit).options(selectinload(Unit.meters)).order_by(Unit.number.asc(), Unit.id.asc())
        units = self.db.execute(stmt).scalars().all()

        return [
            UnitProfile(
                id=unit.id,
                number=unit.number,
                name=unit.name,
                surface_area=_money(unit.surface_area),
                is_inhabited=bool(unit.is_inhabited),
                is_commercial=bool(unit.is_commercial),
                has_staircase_lights=bool(unit.has_staircase_lights),
                monthly_water_fixed=_money(unit.monthly_water_fixed),
                monthly_elec_fixed_winter=_money(unit.monthly_elec_fixed_winter),
                monthly_elec_fixed_summer=_money(unit.monthly_elec_fixed_summer),
                monthly_gas_fixed_winter=_money(unit.monthly_gas_fixed_winter),
                monthly_gas_fixed_summer=_money(unit.monthly_gas_fixed_summer),
                meters=tuple(MeterRef(id=m.id, type=m.type, code=m.meter_code) for m in unit.meters),
            )
            for unit in units
        ]

    def _latest(self, meter_id: int, *conditions) -> ReadingPoint | None:
        stmt = (
            select(Reading.reading_date, Reading.value)
            .where(Reading.meter_id == meter_id, *conditions)
            .order_by(desc(Reading.reading_date), desc(Reading.id))
            .limit(1)
        )
        row = self.db.execute(stmt).first()
        if row is None:
            return None
        return ReadingPoint(reading_date=row[0], value=_money(row[1]))

    def latest_before(self, meter_id: int, day: date) -> ReadingPoint | None:
        """Get latest reading strictly before the given date."""
        return self._latest(meter_id, Reading.reading_date < day)

    def latest_between(self, meter_id: int, start: date, end: date) -> ReadingPoint | None:
        """Get latest reading with start <= reading_date <= end."""
        return self._latest(meter_id, Reading.reading_date >= start, Reading.reading_date <= end)

    def latest_on_or_before(self, meter_id: int, day: date) -> ReadingPoint | None:
        """Get latest reading at or before the given date."""
        return self._latest(meter_id, Reading.reading_date <= day)
