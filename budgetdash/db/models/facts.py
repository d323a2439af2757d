from sqlalchemy import ForeignKey, Float, Integer, String, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from budgetdash.db.base import Base
from budgetdash.db.models._mixins import TimestampMixin

FACT_KEY_COLUMNS = (
    "division",
    "year",
    "month",
    "sales_rep",
    "customer",
    "country",
    "product_group",
    "value_type",
    "record_type",
)

class SalesFact(Base, TimestampMixin):
    __tablename__ = "sales_fact"
    __table_args__ = (
        UniqueConstraint(*FACT_KEY_COLUMNS, name="uq_sales_fact_tuple"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_sales_fact_month"),
        Index("ix_sales_fact_lookup", "division", "year", "value_type", "record_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    import_run_id: Mapped[int | None] = mapped_column(ForeignKey("import_run.id", ondelete="SET NULL"), nullable=True)

    division: Mapped[str] = mapped_column(String(8), index=True)
    year: Mapped[int] = mapped_column(Integer)
    month: Mapped[int] = mapped_column(Integer)
    record_type: Mapped[str] = mapped_column(String(16))  # BUDGET|ACTUAL|ESTIMATE

    sales_rep: Mapped[str] = mapped_column(String(255), index=True)
    customer: Mapped[str] = mapped_column(String(255))
    country: Mapped[str] = mapped_column(String(255))
    product_group: Mapped[str] = mapped_column(String(255))
    material: Mapped[str] = mapped_column(String(255), default="")
    process: Mapped[str] = mapped_column(String(255), default="")

    value_type: Mapped[str] = mapped_column(String(16))  # KGS|AMOUNT|MORM
    value: Mapped[float] = mapped_column(Float, default=0.0)
    unit: Mapped[str] = mapped_column(String(16))  # kg|currency

    uploaded_filename: Mapped[str | None] = mapped_column(String(500), nullable=True)
