from pydantic import BaseModel, Field

class BudgetRecordIn(BaseModel):
    customer: str
    country: str
    productGroup: str
    month: int
    value: float | str | None = None

class BudgetSaveIn(BaseModel):
    division: str
    budgetYear: int
    salesRep: str
    records: list[BudgetRecordIn]

class BudgetSaveOut(BaseModel):
    division: str
    sales_rep: str
    year: int
    records_deleted: int
    records_processed: int
    records_inserted: dict[str, int]
    totals: dict[str, float]
    pricing_year: int
    skipped_records: int
    errors: list[dict] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
