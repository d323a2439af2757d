from fastapi import APIRouter, Depends

from budgetdash.core.deps import VIEW_ROLES, require_roles
from budgetdash.core.enums import Division
from budgetdash.schemas.reports import DivisionOut

router = APIRouter()

@router.get("", response_model=list[DivisionOut])
def divisions(_user=Depends(require_roles(*VIEW_ROLES))):
    return [DivisionOut(code=d.value, name=d.display_name) for d in Division]
