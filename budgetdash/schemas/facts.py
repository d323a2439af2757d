from pydantic import BaseModel, Field

from budgetdash.core.enums import Division, RecordType, ValueType

class FactIn(BaseModel):
    division: Division
    year: int = Field(..., gt=0)
    month: int = Field(..., ge=1, le=12)
    sales_rep: str = Field(..., min_length=1)
    customer: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    product_group: str = Field(..., min_length=1)
    value_type: ValueType
    record_type: RecordType = RecordType.ACTUAL
    value: float
    material: str = ""
    process: str = ""
