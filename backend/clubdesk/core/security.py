"""
Member passwords and login tokens.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from .config import settings

# Stored hashes are pbkdf2; bcrypt hashes imported from older exports still verify.
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

TOKEN_TYPE = "member"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def generate_initial_password(length: int = 10) -> str:
    """Random password handed to a newly created member once."""
    return secrets.token_urlsafe(length)[:length]


def issue_member_token(member_id: str, role: Optional[str] = None, lifetime: Optional[timedelta] = None) -> str:
    """Sign a bearer token whose subject is the member id."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": member_id,
        "type": TOKEN_TYPE,
        "iat": issued,
        "exp": issued + (lifetime or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    if role:
        claims["role"] = role
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def member_id_from_token(token: str) -> Optional[str]:
    """The member id of a valid, unexpired member token; None otherwise."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if claims.get("type") != TOKEN_TYPE:
        return None
    return claims.get("sub")
