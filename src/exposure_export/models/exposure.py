"""SQLAlchemy model for uploaded exposure keys."""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from exposure_export.db.session import Base
from exposure_export.db.time import utcnow


class Exposure(Base):
    """A temporary exposure key uploaded by a diagnosed user.

    Rows are written by the upload path and only read by the export job,
    which deletes them once they fall outside the retention window.
    """

    __tablename__ = "exposures"

    # Monotonic id, doubles as the export watermark.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    # Base64 text; valid keys decode to exactly 16 bytes.
    key_data: Mapped[str] = mapped_column(Text, nullable=False)
    rolling_period: Mapped[int] = mapped_column(Integer, nullable=False, default=144)
    rolling_start_number: Mapped[int] = mapped_column(Integer, nullable=False)
    transmission_risk_level: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    regions: Mapped[list[str]] = mapped_column(JSON, nullable=False)
