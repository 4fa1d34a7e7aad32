"""Unit ORM model for apartments and shops sharing the condominium utilities."""

from decimal import Decimal

from sqlalchemy import Boolean, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from condosplit.models import Base, BaseModel


class Unit(Base, BaseModel):
    """Model representing a housing unit (apartment or commercial space).

    The surface area drives the involuntary quota. The inhabited and commercial
    flags decide which apportionment rules apply, and the monthly_* columns hold
    the flat forfaits that replace proportional apportionment when a unit is
    uninhabited or commercial.
    """

    __tablename__ = "units"

    number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Cadastral or internal unit number (e.g. 'Sub 1')",
    )
    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    surface_area: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Surface in square meters",
    )

    is_inhabited: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        index=True,
    )
    is_commercial: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
    )
    has_staircase_lights: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Whether the unit pays the flat staircase-light fee",
    )

    # Monthly forfaits
    monthly_water_fixed: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Commercial water forfait per month",
    )
    monthly_elec_fixed_winter: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
    )
    monthly_elec_fixed_summer: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
    )
    monthly_gas_fixed_winter: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
    )
    monthly_gas_fixed_summer: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0"),
        nullable=False,
    )

    # Relationships
    meters: Mapped[list["Meter"]] = relationship(  # noqa: F821
        "Meter",
        back_populates="unit",
        cascade="all, delete-orphan",
        order_by="Meter.id",
    )

    __table_args__ = (Index("idx_unit_inhabited_commercial", "is_inhabited", "is_commercial"),)

    def __repr__(self) -> str:
        return (
            f"<Unit(id={self.id}, number={self.number!r}, name={self.name!r}, "
            f"surface_area={self.surface_area}, is_inhabited={self.is_inhabited}, "
            f"is_commercial={self.is_commercial}, "
            f"has_staircase_lights={self.has_staircase_lights})>"
        )


__all__ = ["Unit"]
