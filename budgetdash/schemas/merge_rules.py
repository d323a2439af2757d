import datetime as dt
from pydantic import BaseModel, ConfigDict, Field

from budgetdash.core.enums import Division, RecordType, ValueType

class MergeRuleIn(BaseModel):
    division: Division
    sales_rep: str = Field(..., min_length=1, max_length=255)
    merged_customer_name: str = Field(..., min_length=1, max_length=255)
    original_customers: list[str] = Field(..., min_length=1)
    is_active: bool = True
    note: str | None = None

class MergeRuleUpdate(BaseModel):
    merged_customer_name: str | None = Field(None, min_length=1, max_length=255)
    original_customers: list[str] | None = None
    is_active: bool | None = None
    note: str | None = None

class MergeRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    division: str
    sales_rep: str
    merged_customer_name: str
    original_customers: list[str]
    is_active: bool
    note: str | None = None
    created_by: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

class MergePreviewIn(BaseModel):
    division: Division
    sales_rep: str
    year: int = Field(..., gt=0)
    value_type: ValueType = ValueType.AMOUNT
    record_type: RecordType = RecordType.ACTUAL
    months: list[int] = Field(default_factory=list)
    merged_customer_name: str
    original_customers: list[str] = Field(..., min_length=1)

class MergePreviewOut(BaseModel):
    total_originals_value: float
    unique_originals_count: int
    originals_found: list[str]
    merged_exists_in_data: bool
    unit: str
