"""Bill ORM model for the building-level utility invoices to apportion."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, Index, Numeric
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from condosplit.models import Base, BaseModel


class BillType(str, Enum):
    """Types of utility bills that are apportioned across units."""

    GAS = "gas"
    ELECTRICITY = "electricity"


class Bill(Base, BaseModel):
    """A single supplier invoice for the whole building.

    Only bills whose bill_date falls inside the requested period are summed.
    """

    __tablename__ = "bills"

    bill_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    type: Mapped[BillType] = mapped_column(
        SQLEnum(BillType),
        nullable=False,
        comment="Type of bill: gas or electricity",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Invoice amount in euros",
    )

    __table_args__ = (Index("idx_bill_type_date", "type", "bill_date"),)

    def __repr__(self) -> str:
        return (
            f"<Bill(id={self.id}, type={self.type}, bill_date={self.bill_date}, "
            f"amount={self.amount})>"
        )


__all__ = ["Bill", "BillType"]
