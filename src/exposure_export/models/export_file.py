"""SQLAlchemy model recording generated export bundles."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from exposure_export.db.session import Base
from exposure_export.db.time import utcnow


class ExposureExportFile(Base):
    """Metadata for one bundle written to object storage.

    The ``(since_exposure_id, last_exposure_id, region)`` triple identifies a
    bundle; regenerating the same range for the same region is a no-op.
    """

    __tablename__ = "exposure_export_files"
    __table_args__ = (
        UniqueConstraint(
            "since_exposure_id",
            "last_exposure_id",
            "region",
            name="uq_exposure_export_files_range_region",
        ),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    path: Mapped[str] = mapped_column(Text, nullable=False)
    exposure_count: Mapped[int] = mapped_column(Integer, nullable=False)
    since_exposure_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_exposure_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    first_exposure_created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    region: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
