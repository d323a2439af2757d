from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_db, get_snapshot_db, require_roles, VIEW_ROLES, EDIT_ROLES
from budgetdash.core.enums import Division
from budgetdash.schemas.merge_rules import (
    MergeRuleIn,
    MergeRuleUpdate,
    MergeRuleOut,
    MergePreviewIn,
    MergePreviewOut,
)
from budgetdash.crud.merge_rules import (
    list_rules,
    get_rule,
    create_rule,
    update_rule,
    set_active,
    delete_rule,
)
from budgetdash.services.reports.service import preview_merge_impact

router = APIRouter()


@router.get("", response_model=list[MergeRuleOut])
def get_rules(
    division: str = Query(...),
    sales_rep: str | None = Query(None),
    active: bool | None = Query(None),
    db: Session = Depends(get_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    return list_rules(db, Division.parse(division), sales_rep=sales_rep, active=active)


@router.post("", response_model=MergeRuleOut, status_code=201)
def post_rule(
    data: MergeRuleIn,
    db: Session = Depends(get_db),
    user=Depends(require_roles(*EDIT_ROLES)),
):
    return create_rule(db, data, created_by=user.login)


# registered before /{rule_id} so "preview" is not read as an id
@router.post("/preview", response_model=MergePreviewOut)
def preview(
    data: MergePreviewIn,
    db: Session = Depends(get_snapshot_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    return preview_merge_impact(
        db,
        data.division,
        data.sales_rep,
        data.year,
        data.value_type,
        data.record_type,
        data.merged_customer_name,
        data.original_customers,
        months=data.months,
    )


@router.get("/{rule_id}", response_model=MergeRuleOut)
def get_one(rule_id: int, db: Session = Depends(get_db), _user=Depends(require_roles(*VIEW_ROLES))):
    return get_rule(db, rule_id)


@router.put("/{rule_id}", response_model=MergeRuleOut)
def put_rule(
    rule_id: int,
    data: MergeRuleUpdate,
    db: Session = Depends(get_db),
    _user=Depends(require_roles(*EDIT_ROLES)),
):
    return update_rule(db, get_rule(db, rule_id), data)


@router.post("/{rule_id}/activate", response_model=MergeRuleOut)
def activate(rule_id: int, db: Session = Depends(get_db), _user=Depends(require_roles(*EDIT_ROLES))):
    return set_active(db, get_rule(db, rule_id), True)


@router.post("/{rule_id}/deactivate", response_model=MergeRuleOut)
def deactivate(rule_id: int, db: Session = Depends(get_db), _user=Depends(require_roles(*EDIT_ROLES))):
    return set_active(db, get_rule(db, rule_id), False)


@router.delete("/{rule_id}")
def remove_rule(rule_id: int, db: Session = Depends(get_db), _user=Depends(require_roles(*EDIT_ROLES))):
    delete_rule(db, get_rule(db, rule_id))
    return {"status": "ok"}
