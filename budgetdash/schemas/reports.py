from pydantic import BaseModel

class CustomerRow(BaseModel):
    sales_rep: str
    customer: str
    country: str
    product_group: str
    month: int
    value: float
    unit: str
    is_merged: bool = False

class CustomerReportOut(BaseModel):
    division: str
    year: int
    value_type: str
    record_type: str
    unit: str
    rows: list[CustomerRow]

class MonthlyPointOut(BaseModel):
    month: int
    value: float

class MonthlySeriesOut(BaseModel):
    division: str
    year: int
    unit: str
    series: list[MonthlyPointOut]

class CustomerTotalOut(BaseModel):
    customer: str
    value: float
    is_merged: bool

class BudgetSummaryOut(BaseModel):
    division: str
    year: int
    sales_rep: str | None
    records: int
    totals: dict[str, float]
    customers: list[CustomerTotalOut]

class DivisionOut(BaseModel):
    code: str
    name: str
