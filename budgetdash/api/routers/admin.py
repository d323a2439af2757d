from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_db, require_roles
from budgetdash.db.models.user import Role
from budgetdash.schemas.admin import UserCreateIn, PasswordIn
from budgetdash.schemas.auth import UserOut
from budgetdash.crud.users import create_user, list_users, get_user_by_login, set_password

router = APIRouter()

@router.get("/users", response_model=list[UserOut])
def users(db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    return list_users(db)

@router.post("/users", response_model=UserOut)
def create_user_endpoint(data: UserCreateIn, db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    if get_user_by_login(db, data.login):
        raise HTTPException(status_code=409, detail="Login already exists")
    return create_user(db, data)

@router.put("/users/{login}/password", response_model=UserOut)
def update_password(login: str, data: PasswordIn, db: Session = Depends(get_db), _user=Depends(require_roles(Role.admin))):
    user = get_user_by_login(db, login)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return set_password(db, user, data.password)
