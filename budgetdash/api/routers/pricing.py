from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_db, require_roles, VIEW_ROLES, ADMIN_ROLES
from budgetdash.core.enums import Division
from budgetdash.schemas.pricing import PricingIn, PricingOut
from budgetdash.crud.pricing import list_pricing, upsert_pricing
from budgetdash.services.aggregation import validate_year

router = APIRouter()

@router.get("", response_model=list[PricingOut])
def get_pricing(
    division: str = Query(...),
    year: int = Query(...),
    db: Session = Depends(get_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    return list_pricing(db, Division.parse(division), validate_year(year))

@router.put("", response_model=PricingOut)
def put_pricing(data: PricingIn, db: Session = Depends(get_db), _user=Depends(require_roles(*ADMIN_ROLES))):
    return upsert_pricing(db, data)
