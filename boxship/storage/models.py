"""SQLAlchemy models for Boxship."""

import datetime as dt
import uuid

from sqlalchemy import String, DateTime, Float, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from boxship.storage.db import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _new_box_id() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp stored in UTC.

    SQLite keeps no offset, so values are converted to UTC on the way in
    and read back as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        return value


class Box(Base):
    """A recorded shipping box with its computed cost."""

    __tablename__ = "boxes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_box_id)
    receiver_name: Mapped[str] = mapped_column(String(255), nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    box_color: Mapped[str] = mapped_column(String(255), nullable=False)
    destination_country: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    shipping_cost: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        UTCDateTime(),
        default=utcnow,
        nullable=False
    )

    __table_args__ = (
        Index("ix_boxes_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Box id={self.id} receiver={self.receiver_name!r} "
            f"destination={self.destination_country} cost={self.shipping_cost}>"
        )
