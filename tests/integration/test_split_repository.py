"""Integration tests for the database-backed data source."""

from datetime import date
from decimal import Decimal

from condosplit.models import Bill, BillType, Meter, MeterType, Reading, Unit
from condosplit.services.split_repository import SplitRepository
from factories import seed_january_building


class TestSplitRepository:
    """Queries feeding the apportionment engine."""

    def test_load_settings(self, db_session):
        seed_january_building(db_session)

        assert SplitRepository(db_session).load_settings() == {"common_areas_gas_monthly": "50"}

    def test_sum_bills_by_type(self, db_session):
        seed_january_building(db_session)
        repository = SplitRepository(db_session)

        assert repository.sum_bills(BillType.GAS, date(2025, 1, 1), date(2025, 1, 31)) == Decimal("1000.00")
        assert repository.sum_bills(BillType.ELECTRICITY, date(2025, 1, 1), date(2025, 1, 31)) == Decimal(
            "500.00"
        )

    def test_sum_bills_bounds_inclusive(self, db_session):
        seed_january_building(db_session)
        repository = SplitRepository(db_session)

        assert repository.sum_bills(BillType.GAS, date(2025, 1, 20), date(2025, 1, 20)) == Decimal("1000.00")
        assert repository.sum_bills(BillType.GAS, date(2025, 1, 21), date(2025, 1, 31)) == Decimal("0")

    def test_sum_bills_adds_several_bills(self, db_session):
        seed_january_building(db_session)
        db_session.add(Bill(bill_date=date(2025, 1, 28), type=BillType.GAS, amount=Decimal("49.99")))
        db_session.commit()

        total = SplitRepository(db_session).sum_bills(BillType.GAS, date(2025, 1, 1), date(2025, 1, 31))

        assert total == Decimal("1049.99")

    def test_list_units_detached_profiles(self, db_session):
        seed_january_building(db_session)

        units = SplitRepository(db_session).list_units()

        assert [u.number for u in units] == ["A1", "A2", "A3"]
        flat_1, _flat_2, flat_3 = units
        assert flat_1.surface_area == Decimal("100")
        assert flat_1.is_inhabited is True
        assert [m.type for m in flat_1.meters] == [
            MeterType.HEATING,
            MeterType.HOT_WATER,
            MeterType.COLD_WATER,
        ]
        assert flat_1.meters[0].code == "A1-heating"
        assert flat_3.meters == ()
        assert flat_3.is_inhabited is False
        assert flat_3.monthly_gas_fixed_winter == Decimal("20")

    def test_reading_lookups(self, db_session):
        units = seed_january_building(db_session)
        meter_id = units["A1"].meters[0].id
        repository = SplitRepository(db_session)

        assert repository.latest_before(meter_id, date(2025, 1, 1)).value == Decimal("100")
        assert repository.latest_before(meter_id, date(2024, 12, 31)) is None
        end = repository.latest_between(meter_id, date(2025, 1, 1), date(2025, 1, 31))
        assert end.value == Decimal("180")
        assert repository.latest_between(meter_id, date(2025, 1, 1), date(2025, 1, 30)) is None
        point = repository.latest_on_or_before(meter_id, date(2025, 1, 30))
        assert point.reading_date == date(2024, 12, 31)

    def test_same_day_readings_latest_row_wins(self, db_session):
        unit = Unit(number="B1", name="Flat B1", surface_area=Decimal("80"))
        meter = Meter(type=MeterType.COLD_WATER)
        meter.readings = [Reading(reading_date=date(2025, 1, 10), value=Decimal("12"))]
        unit.meters.append(meter)
        db_session.add(unit)
        db_session.commit()
        db_session.add(Reading(meter_id=meter.id, reading_date=date(2025, 1, 10), value=Decimal("15")))
        db_session.commit()

        point = SplitRepository(db_session).latest_on_or_before(meter.id, date(2025, 1, 31))

        assert point.value == Decimal("15")
