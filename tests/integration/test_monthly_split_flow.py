"""Integration tests for a full apportionment run against SQLite."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from condosplit.models import Bill, BillType, Reading, Setting
from condosplit.services.errors import ConfigurationError, InsufficientDataError
from condosplit.services.split_repository import SplitRepository
from condosplit.services.split_service import SplitService
from condosplit.services.split_types import SplitType
from factories import seed_january_building


@pytest.fixture
def building(db_session):
    return seed_january_building(db_session)


class TestMonthlySplitFlow:
    """Repository plus orchestrator over a seeded database."""

    def test_january_split(self, db_session, building):
        result = SplitService(SplitRepository(db_session)).calculate_monthly_split("2025-01-01", "2025-01-31")

        flat_1 = result.unit(building["A1"].id)
        assert flat_1.consumption.heating == Decimal("80")
        assert flat_1.costs.gas_heating == Decimal("396.80")
        assert flat_1.costs.gas_hot_water == Decimal("316.20")
        assert flat_1.costs.total == Decimal("1079.66")
        assert result.unit(building["A2"].id).costs.total == Decimal("350.34")
        assert result.unit(building["A3"].id).costs.total == Decimal("20.00")
        assert result.verification.passed is True
        assert result.verification.calculated_total == Decimal("1500.00")

    def test_split_does_not_write(self, db_session, building):
        def counts():
            return [
                db_session.execute(select(func.count()).select_from(model)).scalar()
                for model in (Bill, Reading, Setting)
            ]

        before = counts()
        SplitService(SplitRepository(db_session)).calculate_monthly_split("2025-01-01", "2025-01-31")

        assert counts() == before
        assert not db_session.new and not db_session.dirty

    def test_repeated_runs_are_identical(self, db_session, building):
        service = SplitService(SplitRepository(db_session))

        first = service.calculate_monthly_split("2025-01-01", "2025-01-31").to_dict(include_trace=True)
        second = service.calculate_monthly_split("2025-01-01", "2025-01-31").to_dict(include_trace=True)

        assert first == second

    def test_two_month_period(self, db_session, building):
        db_session.add(Bill(bill_date=date(2025, 2, 20), type=BillType.GAS, amount=Decimal("900.00")))
        db_session.commit()

        result = SplitService(SplitRepository(db_session)).calculate_monthly_split(
            "2025-01-01", "2025-02-28", SplitType.GAS
        )

        assert result.months == 2
        assert result.total_gas_cost == Decimal("1900.00")
        assert result.common_areas_gas == Decimal("100.00")
        assert result.unit(building["A3"].id).costs.gas_total == Decimal("40.00")
        assert result.verification.passed is True

    def test_both_with_only_electricity_billed(self, db_session, building):
        result = SplitService(SplitRepository(db_session)).calculate_monthly_split(
            "2025-01-21", "2025-01-31"
        )

        assert result.total_gas_cost == Decimal("0.00")
        assert result.total_elec_cost == Decimal("500.00")
        assert result.common_areas_gas == Decimal("0.00")
        assert result.verification.expected_total == Decimal("500.00")

    def test_no_bills_in_period(self, db_session, building):
        with pytest.raises(InsufficientDataError):
            SplitService(SplitRepository(db_session)).calculate_monthly_split("2025-03-01", "2025-03-31")

    def test_malformed_setting_aborts(self, db_session, building):
        db_session.add(Setting(key="elec_involuntary_pct", value="n/a"))
        db_session.commit()

        with pytest.raises(ConfigurationError, match="elec_involuntary_pct"):
            SplitService(SplitRepository(db_session)).calculate_monthly_split("2025-01-01", "2025-01-31")
