from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budgetdash.db.base import Base

class ImportRowError(Base):
    """A spreadsheet row an import run skipped, with the offending cell."""
    __tablename__ = "import_row_error"

    id: Mapped[int] = mapped_column(primary_key=True)
    import_run_id: Mapped[int] = mapped_column(ForeignKey("import_run.id", ondelete="CASCADE"), index=True)

    sheet: Mapped[str | None] = mapped_column(String(128), nullable=True)
    row_num: Mapped[int | None] = mapped_column(Integer, nullable=True)
    column: Mapped[str | None] = mapped_column(String(128), nullable=True)
    raw_value: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(Text)

    import_run: Mapped["ImportRun"] = relationship(back_populates="errors")  # noqa: F821
