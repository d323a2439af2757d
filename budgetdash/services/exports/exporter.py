import datetime as dt
from pathlib import Path
from typing import Iterable

import pandas as pd

from budgetdash.core.config import settings
from budgetdash.services.aggregation import AggregatedRow

MONTH_COLS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

def customer_report_frame(rows: Iterable[AggregatedRow]) -> pd.DataFrame:
    """Long rows -> one line per (rep, customer, country, product group), months across."""
    df = pd.DataFrame([r.as_dict() for r in rows])
    index = ["sales_rep", "customer", "country", "product_group"]
    if df.empty:
        return pd.DataFrame(columns=index + MONTH_COLS + ["Total"])
    wide = df.pivot_table(index=index, columns="month", values="value", aggfunc="sum", fill_value=0.0)
    wide = wide.reindex(columns=range(1, 13), fill_value=0.0)
    wide.columns = MONTH_COLS
    wide["Total"] = wide[MONTH_COLS].sum(axis=1)
    return wide.reset_index()

def export_customer_report_xlsx(rows: Iterable[AggregatedRow], out_path: Path, sheet_name: str = "customers") -> Path:
    df = customer_report_frame(rows)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="xlsxwriter") as w:
        df.to_excel(w, index=False, sheet_name=sheet_name)
    return out_path

def default_export_path(prefix: str, ext: str) -> Path:
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S")
    return Path(settings.EXPORT_DIR) / f"{prefix}_{ts}.{ext}"
