import openpyxl
import pandas as pd

from budgetdash.core.enums import Division, RecordType, ValueType
from budgetdash.core.errors import ValidationError
from budgetdash.services.etl.utils import clean_name, header_to_index, to_float, to_int, to_month
from budgetdash.services.etl.validators import RecordIssue, raw_text

# canonical column -> accepted header spellings (after header_key)
COLUMNS = {
    "year": ("year",),
    "month": ("month",),
    "type": ("type", "recordtype"),
    "sales_rep": ("salesrepname", "salesrep", "salesperson"),
    "customer": ("customername", "customer"),
    "country": ("countryname", "country"),
    "product_group": ("productgroup", "pgcombine"),
    "value_type": ("valuestype", "valuetype"),
    "value": ("values", "value"),
    "material": ("material",),
    "process": ("process",),
}
REQUIRED = ("year", "month", "type", "sales_rep", "customer", "country", "product_group", "value_type", "value")

FACT_COLUMNS = [
    "year", "month", "record_type", "sales_rep", "customer", "country",
    "product_group", "value_type", "value", "material", "process",
]


def _pick_sheet(wb):
    for name in wb.sheetnames:
        if name.strip().lower() in ("data", "actual", "actuals"):
            return wb[name]
    return wb[wb.sheetnames[0]]


def _find_header(ws, max_rows: int = 20) -> tuple[int, dict[str, int]] | None:
    for r, row in enumerate(ws.iter_rows(min_row=1, max_row=max_rows, values_only=True), start=1):
        idx = header_to_index(list(row))
        cols = {}
        for col, names in COLUMNS.items():
            for n in names:
                if n in idx:
                    cols[col] = idx[n]
                    break
        if all(c in cols for c in REQUIRED):
            return r, cols
    return None


def parse_actuals(path: str, division) -> tuple[pd.DataFrame, list[RecordIssue]]:
    """Flat actuals export -> one DataFrame row per fact.

    The division of the upload applies to the whole file.
    """
    div = Division.parse(division)
    errors: list[RecordIssue] = []
    wb = openpyxl.load_workbook(path, data_only=True, read_only=True)
    try:
        ws = _pick_sheet(wb)
        found = _find_header(ws)
        if not found:
            missing = ", ".join(REQUIRED)
            return pd.DataFrame(columns=FACT_COLUMNS), [
                RecordIssue(f"Header row not found; expected columns: {missing}", sheet=ws.title)
            ]
        header_row, cols = found

        data = []
        for r, row in enumerate(ws.iter_rows(min_row=header_row + 1, values_only=True), start=header_row + 1):
            row = list(row)
            if not any(v not in (None, "") for v in row):
                continue

            def cell(col):
                i = cols.get(col)
                return row[i] if i is not None and i < len(row) else None

            customer = clean_name(cell("customer"))
            year = to_int(cell("year"))
            month = to_month(cell("month"))
            value = to_float(cell("value"))

            if year is None or year <= 0:
                errors.append(RecordIssue("Invalid year", sheet=ws.title, row_num=r, column="year", customer=customer or None, raw_value=raw_text(cell("year"))))
                continue
            if month is None:
                errors.append(RecordIssue("Invalid month (must be 1-12)", sheet=ws.title, row_num=r, column="month", customer=customer or None, raw_value=raw_text(cell("month"))))
                continue
            try:
                record_type = RecordType.parse(cell("type"))
                value_type = ValueType.parse(cell("value_type"))
            except ValidationError as e:
                errors.append(RecordIssue(e.message, sheet=ws.title, row_num=r, customer=customer or None))
                continue
            missing = [c for c in ("sales_rep", "customer", "country", "product_group") if not clean_name(cell(c))]
            if missing:
                errors.append(RecordIssue(f"Missing {', '.join(missing)}", sheet=ws.title, row_num=r, column=missing[0], customer=customer or None))
                continue
            if value is None:
                errors.append(RecordIssue("Invalid value", sheet=ws.title, row_num=r, column="value", customer=customer, raw_value=raw_text(cell("value"))))
                continue

            data.append({
                "year": year,
                "month": month,
                "record_type": record_type.value,
                "sales_rep": clean_name(cell("sales_rep")),
                "customer": customer,
                "country": clean_name(cell("country")),
                "product_group": clean_name(cell("product_group")),
                "value_type": value_type.value,
                "value": value,
                "material": clean_name(cell("material")),
                "process": clean_name(cell("process")),
            })
    finally:
        wb.close()

    df = pd.DataFrame(data, columns=FACT_COLUMNS)
    if not df.empty:
        df["division"] = div.value
    return df, errors
