from sqlalchemy.orm import Session

from budgetdash.core.security import hash_password, verify_password
from budgetdash.db.models.user import User
from budgetdash.schemas.admin import UserCreateIn
from budgetdash.services.etl.utils import clean_name

def get_user_by_login(db: Session, login: str) -> User | None:
    return db.query(User).filter(User.login == login).one_or_none()

def authenticate(db: Session, login: str, password: str) -> User | None:
    user = get_user_by_login(db, login)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        return None
    return user

def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.login).all()

def create_user(db: Session, data: UserCreateIn) -> User:
    user = User(
        login=data.login,
        password_hash=hash_password(data.password),
        role=data.role,
        full_name=data.full_name,
        sales_rep_name=clean_name(data.sales_rep_name) or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

def set_password(db: Session, user: User, password: str) -> User:
    user.password_hash = hash_password(password)
    db.commit()
    db.refresh(user)
    return user
