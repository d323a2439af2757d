from pydantic import BaseModel, ConfigDict, Field

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    sales_rep: str | None = None

class LoginIn(BaseModel):
    login: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    login: str
    full_name: str | None = None
    role: str = Field(validation_alias="role_value")
    sales_rep_name: str | None = None
    is_active: bool = True
