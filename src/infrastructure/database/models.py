"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Integer, LargeBinary
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class RecordModel(Base):
    """A keyed record allocation.

    Closed records stay as tombstones with their data cleared, so their
    address can never be allocated again.
    """

    __tablename__ = "records"

    address: Mapped[bytes] = mapped_column(LargeBinary(32), primary_key=True)
    payer: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    deposit: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    refunded_to: Mapped[Optional[bytes]] = mapped_column(LargeBinary(32))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        CheckConstraint("size > 0", name="ck_records_size_positive"),
        CheckConstraint("deposit >= 0", name="ck_records_deposit_non_negative"),
    )
