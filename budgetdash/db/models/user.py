from enum import Enum

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from budgetdash.db.base import Base
from budgetdash.db.models._mixins import TimestampMixin

class Role(str, Enum):
    admin = "Admin"
    manager = "Manager"
    sales_rep = "SalesRep"
    viewer = "Viewer"

class User(Base, TimestampMixin):
    """Dashboard account. SalesRep users are bound to one rep name."""
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    login: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    full_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(256))
    role: Mapped[str] = mapped_column(String(32), default=Role.viewer.value)
    # spelling as it appears in sales data; compared canonically
    sales_rep_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    @property
    def role_value(self) -> str:
        return self.role.value if isinstance(self.role, Enum) else str(self.role)
