from pydantic import BaseModel, Field, field_validator, model_validator

from budgetdash.db.models.user import Role

class UserCreateIn(BaseModel):
    login: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=6, max_length=128)
    role: str = Role.viewer.value
    full_name: str | None = None
    sales_rep_name: str | None = Field(None, max_length=255)

    @field_validator("role")
    @classmethod
    def _known_role(cls, v: str) -> str:
        if v not in {r.value for r in Role}:
            raise ValueError(f"unknown role {v!r}")
        return v

    @model_validator(mode="after")
    def _rep_users_need_a_rep(self):
        if self.role == Role.sales_rep.value and not (self.sales_rep_name or "").strip():
            raise ValueError("sales_rep_name is required for SalesRep users")
        return self

class PasswordIn(BaseModel):
    password: str = Field(..., min_length=6, max_length=128)
