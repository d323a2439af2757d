import datetime as dt
from pydantic import BaseModel, ConfigDict

class ImportRunOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    division: str
    kind: str
    file_name: str
    file_hash: str
    uploaded_by: str | None = None
    status: str
    rows_loaded: int = 0
    errors_count: int = 0
    started_at: dt.datetime | None = None
    finished_at: dt.datetime | None = None
    created_at: dt.datetime | None = None

class ImportErrorOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    row_num: int | None
    sheet: str | None
    column: str | None
    raw_value: str | None = None
    customer: str | None
    message: str
