import datetime as dt

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budgetdash.db.base import Base
from budgetdash.db.models._mixins import TimestampMixin

class ImportRun(Base, TimestampMixin):
    """One uploaded actuals workbook of a division; identical bytes share a run."""
    __tablename__ = "import_run"
    __table_args__ = (UniqueConstraint("division", "file_hash", name="uq_import_division_hash"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    division: Mapped[str] = mapped_column(String(8), index=True)
    kind: Mapped[str] = mapped_column(String(32), default="actual_xlsx")
    file_name: Mapped[str] = mapped_column(String(512))
    file_hash: Mapped[str] = mapped_column(String(64), index=True)
    uploaded_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[str] = mapped_column(String(32), default="queued")  # queued|running|success|success_with_errors|failed
    started_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    finished_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rows_loaded: Mapped[int] = mapped_column(Integer, default=0)
    errors_count: Mapped[int] = mapped_column(Integer, default=0)

    errors: Mapped[list["ImportRowError"]] = relationship(  # noqa: F821
        back_populates="import_run", cascade="all, delete-orphan"
    )
