from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from budgetdash.core.deps import get_db, get_current_user
from budgetdash.core.logging import logger
from budgetdash.core.security import create_access_token
from budgetdash.crud.users import authenticate
from budgetdash.schemas.auth import LoginIn, TokenOut, UserOut

router = APIRouter()

def _issue_token(db: Session, login: str, password: str) -> TokenOut:
    user = authenticate(db, login, password)
    if user is None:
        logger.warning("login_failed", login=login)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(sub=user.login, role=user.role_value, sales_rep=user.sales_rep_name)
    logger.info("login_ok", login=user.login, role=user.role_value)
    return TokenOut(access_token=token, role=user.role_value, sales_rep=user.sales_rep_name)

@router.post("/login", response_model=TokenOut)
def login(data: LoginIn, db: Session = Depends(get_db)):
    return _issue_token(db, data.login, data.password)

@router.post("/token", response_model=TokenOut)
def token(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    # OAuth2 form flow for the interactive docs
    return _issue_token(db, form.username, form.password)

@router.get("/me", response_model=UserOut)
def me(user=Depends(get_current_user)):
    return user
