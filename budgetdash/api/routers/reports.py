from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_snapshot_db, require_roles, VIEW_ROLES
from budgetdash.core.enums import Division, RecordType, Unit, ValueType
from budgetdash.core.errors import ValidationError
from budgetdash.schemas.reports import CustomerReportOut, MonthlySeriesOut, BudgetSummaryOut
from budgetdash.services.reports.service import customer_report, monthly_series, budget_summary
from budgetdash.services.exports.exporter import export_customer_report_xlsx, default_export_path
from budgetdash.services.units import target_unit

router = APIRouter()

XLSX_MEDIA = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _parse_unit(unit: str | None) -> Unit | None:
    if not unit:
        return None
    try:
        return Unit(unit.strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown unit: {unit}")


def _report_unit(value_type: str, unit: Unit | None) -> str:
    return target_unit(ValueType.parse(value_type).base_unit, unit).value


@router.get("/customers", response_model=CustomerReportOut)
def customers(
    division: str = Query(...),
    year: int = Query(...),
    value_type: str = Query("AMOUNT"),
    record_type: str = Query("ACTUAL"),
    sales_rep: str | None = Query(None),
    unit: str | None = Query(None, description="kg, mt or currency"),
    db: Session = Depends(get_snapshot_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    u = _parse_unit(unit)
    rows = customer_report(db, division, year, value_type, record_type, sales_rep=sales_rep, unit=u)
    return {
        "division": Division.parse(division).value,
        "year": year,
        "value_type": ValueType.parse(value_type).value,
        "record_type": RecordType.parse(record_type).value,
        "unit": _report_unit(value_type, u),
        "rows": [r.as_dict() for r in rows],
    }


@router.get("/monthly", response_model=MonthlySeriesOut)
def monthly(
    division: str = Query(...),
    year: int = Query(...),
    value_type: str = Query("AMOUNT"),
    record_type: str = Query("ACTUAL"),
    sales_rep: str | None = Query(None),
    unit: str | None = Query(None),
    db: Session = Depends(get_snapshot_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    u = _parse_unit(unit)
    series = monthly_series(db, division, year, value_type, record_type, sales_rep=sales_rep, unit=u)
    return {
        "division": Division.parse(division).value,
        "year": year,
        "unit": _report_unit(value_type, u),
        "series": [{"month": p.month, "value": p.value} for p in series],
    }


@router.get("/budget-summary", response_model=BudgetSummaryOut)
def summary(
    division: str = Query(...),
    year: int = Query(...),
    sales_rep: str | None = Query(None),
    db: Session = Depends(get_snapshot_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    return budget_summary(db, division, year, sales_rep=sales_rep)


@router.get("/customers/export")
def export_customers(
    division: str = Query(...),
    year: int = Query(...),
    value_type: str = Query("AMOUNT"),
    record_type: str = Query("ACTUAL"),
    sales_rep: str | None = Query(None),
    unit: str | None = Query(None),
    db: Session = Depends(get_snapshot_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    rows = customer_report(db, division, year, value_type, record_type, sales_rep=sales_rep, unit=_parse_unit(unit))
    div = Division.parse(division)
    out = default_export_path(f"customers_{div.value}_{year}", "xlsx")
    export_customer_report_xlsx(rows, out)
    return FileResponse(str(out), media_type=XLSX_MEDIA, filename=out.name)
