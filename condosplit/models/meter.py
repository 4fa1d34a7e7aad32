"""Meter and Reading ORM models for per-unit consumption tracking."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from condosplit.models import Base, BaseModel


class MeterType(str, Enum):
    """Kinds of consumption meters installed in a unit."""

    HEATING = "heating"
    """Heat meter; also used as the cooling proxy in summer"""

    HOT_WATER = "hot_water"
    """Domestic hot water meter"""

    COLD_WATER = "cold_water"
    """Cold water meter"""


class Meter(Base, BaseModel):
    """A meter installed in exactly one unit. At most one meter per (unit, type)."""

    __tablename__ = "meters"

    unit_id: Mapped[int] = mapped_column(
        ForeignKey("units.id"),
        nullable=False,
        index=True,
    )
    type: Mapped[MeterType] = mapped_column(
        SQLEnum(MeterType),
        nullable=False,
    )
    meter_code: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Serial number printed on the device",
    )

    # Relationships
    unit: Mapped["Unit"] = relationship(  # noqa: F821
        "Unit",
        back_populates="meters",
    )
    readings: Mapped[list["Reading"]] = relationship(
        "Reading",
        back_populates="meter",
        cascade="all, delete-orphan",
        order_by="Reading.reading_date",
    )

    __table_args__ = (UniqueConstraint("unit_id", "type", name="uq_meter_unit_type"),)

    def __repr__(self) -> str:
        return (
            f"<Meter(id={self.id}, unit_id={self.unit_id}, type={self.type}, "
            f"meter_code={self.meter_code!r})>"
        )


class Reading(Base, BaseModel):
    """A dated meter reading. Values are cumulative and normally non-decreasing."""

    __tablename__ = "readings"

    meter_id: Mapped[int] = mapped_column(
        ForeignKey("meters.id"),
        nullable=False,
        index=True,
    )
    reading_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    value: Mapped[Decimal] = mapped_column(
        Numeric(12, 3),
        nullable=False,
    )
    meter: Mapped["Meter"] = relationship(
        "Meter",
        back_populates="readings",
    )

    __table_args__ = (Index("idx_reading_meter_date", "meter_id", "reading_date"),)

    def __repr__(self) -> str:
        return (
            f"<Reading(id={self.id}, meter_id={self.meter_id}, "
            f"reading_date={self.reading_date}, value={self.value})>"
        )


__all__ = ["Meter", "MeterType", "Reading"]
