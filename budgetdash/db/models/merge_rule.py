from sqlalchemy import String, Boolean, JSON, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from budgetdash.db.base import Base
from budgetdash.db.models._mixins import TimestampMixin

class CustomerMergeRule(Base, TimestampMixin):
    __tablename__ = "customer_merge_rule"
    __table_args__ = (
        UniqueConstraint("division", "sales_rep", "merged_customer_name", name="uq_merge_rule_scope_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    division: Mapped[str] = mapped_column(String(8), index=True)
    sales_rep: Mapped[str] = mapped_column(String(255), index=True)
    merged_customer_name: Mapped[str] = mapped_column(String(255))
    original_customers: Mapped[list[str]] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
