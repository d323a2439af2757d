from dataclasses import asdict

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_db, require_roles, ensure_rep_scope, EDIT_ROLES
from budgetdash.schemas.budgets import BudgetSaveIn, BudgetSaveOut
from budgetdash.services.budget import save_sales_rep_budget
from budgetdash.services.etl.parsers.budget_html import parse_budget_html
from budgetdash.services.files import read_html_upload

router = APIRouter()


@router.post("", response_model=BudgetSaveOut)
def save_budget(data: BudgetSaveIn, db: Session = Depends(get_db), user=Depends(require_roles(*EDIT_ROLES))):
    ensure_rep_scope(user, data.salesRep)
    result = save_sales_rep_budget(
        db,
        data.division,
        data.budgetYear,
        data.salesRep,
        [r.model_dump() for r in data.records],
    )
    return asdict(result)


@router.post("/upload-html", response_model=BudgetSaveOut)
def upload_html(
    division: str | None = Query(None, description="Reject the file if it belongs to another division"),
    sales_rep: str | None = Query(None, description="Reject the file if it belongs to another sales rep"),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user=Depends(require_roles(*EDIT_ROLES)),
):
    html = read_html_upload(file)
    parsed = parse_budget_html(html, expected_division=division, expected_sales_rep=sales_rep)
    ensure_rep_scope(user, parsed.sales_rep)
    result = save_sales_rep_budget(
        db,
        parsed.division,
        parsed.year,
        parsed.sales_rep,
        parsed.records,
        filename=file.filename,
    )
    # records the parser already dropped count as skipped too
    result.skipped_records += len(parsed.issues)
    result.errors = ([e.as_dict() for e in parsed.issues] + result.errors)[:10]
    return asdict(result)
