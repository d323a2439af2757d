from sqlalchemy import String, Integer, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from budgetdash.db.base import Base
from budgetdash.db.models._mixins import TimestampMixin

class ProductGroupPricing(Base, TimestampMixin):
    __tablename__ = "product_group_pricing"
    __table_args__ = (
        UniqueConstraint("division", "year", "product_group", name="uq_pricing_division_year_group"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    division: Mapped[str] = mapped_column(String(8), index=True)
    year: Mapped[int] = mapped_column(Integer)
    product_group: Mapped[str] = mapped_column(String(255))
    # per kg, in settings.CURRENCY
    asp: Mapped[float | None] = mapped_column(Float, nullable=True)
    morm: Mapped[float | None] = mapped_column(Float, nullable=True)
