from sqlalchemy.orm import Session
from budgetdash.db.session import SessionLocal
from budgetdash.core.config import settings
from budgetdash.core.logging import logger
from budgetdash.crud.users import get_user_by_login, create_user
from budgetdash.schemas.admin import UserCreateIn
from budgetdash.db.models.user import Role

def seed_admin(db: Session | None = None) -> None:
    """Create the configured admin account if it does not exist yet."""
    own = db is None
    db = db or SessionLocal()
    try:
        if settings.ADMIN_LOGIN and settings.ADMIN_PASSWORD:
            if not get_user_by_login(db, settings.ADMIN_LOGIN):
                create_user(db, UserCreateIn(
                    login=settings.ADMIN_LOGIN,
                    password=settings.ADMIN_PASSWORD,
                    role=Role.admin.value,
                    full_name="Administrator",
                ))
                logger.info("admin_seeded", login=settings.ADMIN_LOGIN)
    finally:
        if own:
            db.close()
