from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_db, require_roles, EDIT_ROLES
from budgetdash.core.logging import logger
from budgetdash.schemas.facts import FactIn
from budgetdash.crud.facts import upsert_fact

router = APIRouter()

@router.post("")
def post_fact(data: FactIn, db: Session = Depends(get_db), user=Depends(require_roles(*EDIT_ROLES))):
    upsert_fact(db, data)
    logger.info(
        "fact_upserted",
        user=user.login,
        division=data.division.value,
        year=data.year,
        month=data.month,
        value_type=data.value_type.value,
        record_type=data.record_type.value,
    )
    return {"status": "ok"}
