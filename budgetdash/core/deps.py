from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from budgetdash.core.config import settings
from budgetdash.db.session import SessionLocal
from budgetdash.core.security import decode_token
from budgetdash.db.models.user import User, Role
from budgetdash.crud.users import get_user_by_login
from budgetdash.services.etl.utils import canonical_name

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

VIEW_ROLES = (Role.admin, Role.manager, Role.sales_rep, Role.viewer)
EDIT_ROLES = (Role.admin, Role.manager, Role.sales_rep)
ADMIN_ROLES = (Role.admin, Role.manager)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_user(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> User:
    try:
        payload = decode_token(token)
        login = payload.get("sub")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = get_user_by_login(db, login)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found/disabled")
    return user

def require_roles(*roles: Role):
    allowed = {r.value for r in roles}
    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role_value not in allowed:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _dep

def get_snapshot_db():
    """Session whose reads all see one snapshot (REPEATABLE READ on PostgreSQL)."""
    db = SessionLocal()
    try:
        if db.get_bind().dialect.name == "postgresql":
            db.connection(execution_options={"isolation_level": settings.REPORT_ISOLATION_LEVEL})
        yield db
    finally:
        db.close()

def ensure_rep_scope(user: User, sales_rep: str) -> None:
    """SalesRep accounts may only write data of their own rep name."""
    if user.role_value != Role.sales_rep.value:
        return
    if canonical_name(user.sales_rep_name) != canonical_name(sales_rep):
        raise HTTPException(status_code=403, detail="Sales reps can only save their own budget")
