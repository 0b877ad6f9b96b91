from passlib.context import CryptContext
import os
from datetime import datetime, timedelta
from jose import jwt, JWTError
from typing import Optional
from fastapi import HTTPException, status, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from dotenv import load_dotenv

from crewboard.db.database import get_db
from crewboard.db.models.user import User

load_dotenv()

# 1. Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT settings
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-very-secret")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 1 day

# --- Password / token helpers ---

def get_password_hash(password: str) -> str:
    """Hashes a password."""
    return pwd_context.hash(password[:72])

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Checks a plain password against its hash."""
    return pwd_context.verify(plain_password[:72], hashed_password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Creates a JWT access token."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

# --- HTTP API verification ---

# Token endpoint used by the Swagger UI authorize button
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/token")

def verify_token(token: str) -> str:
    """
    Decodes and validates a JWT and returns the user id stored in `sub`.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _credentials_exception()
    user_id = payload.get("sub")
    if not user_id:
        raise _credentials_exception()
    return str(user_id)

async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """
    FastAPI Dependency: extracts the bearer token and returns the user id.
    """
    return verify_token(token)

async def require_admin(
    current_user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> str:
    """
    FastAPI Dependency: the admin role is read from the database on every
    request, never trusted from the client.
    """
    user = await db.get(User, current_user_id)
    if not user or not user.is_active or not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user.id

# --- WebSocket verification ---

def verify_websocket_token(token: Optional[str]) -> Optional[str]:
    """
    Validates the `token` query parameter of a WebSocket connection.
    Returns the user id, or None when the token is missing or invalid.
    """
    if not token:
        return None
    try:
        return verify_token(token.replace("Bearer ", ""))
    except HTTPException:
        return None
