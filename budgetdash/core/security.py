from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from budgetdash.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def create_access_token(sub: str, role: str, sales_rep: str | None = None, expires_min: int | None = None) -> str:
    """Signed bearer token; ``rep`` is set for users tied to one sales rep."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": sub,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=expires_min or settings.JWT_EXPIRES_MIN),
    }
    if sales_rep:
        claims["rep"] = sales_rep
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_token(token: str) -> dict:
    claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    if not claims.get("sub"):
        raise JWTError("token has no subject")
    return claims
