from pydantic import BaseModel, ConfigDict, Field

from budgetdash.core.enums import Division

class PricingIn(BaseModel):
    division: Division
    year: int = Field(..., gt=0)
    product_group: str = Field(..., min_length=1)
    asp: float | None = Field(None, ge=0, le=1000)
    morm: float | None = Field(None, ge=0, le=1000)

class PricingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    division: str
    year: int
    product_group: str
    asp: float | None
    morm: float | None
