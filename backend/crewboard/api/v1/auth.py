# backend/crewboard/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from crewboard.db.database import get_db
from crewboard.db.models.user import User
from crewboard.services import user_service
from crewboard.schemas.user import UserCreate, UserLogin, Token, UserRead
from crewboard.core.security import get_current_user_id

router = APIRouter()

@router.post("/register", status_code=201)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    """Registration: delegated to the user service"""
    return await user_service.register_user(db, user_in)

@router.post("/login", response_model=Token)
async def login(user_in: UserLogin, db: AsyncSession = Depends(get_db)):
    """Login: returns a bearer token for valid credentials"""
    auth_result = await user_service.authenticate_user(db, user_in)

    if not auth_result:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return auth_result

@router.post("/token", response_model=Token, include_in_schema=False)
async def token(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    """OAuth2 form login used by the Swagger UI; the username field carries the email"""
    auth_result = await user_service.authenticate_user(
        db, UserLogin(email=form_data.username, password=form_data.password)
    )
    if not auth_result:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return auth_result

@router.get("/me", response_model=UserRead)
async def me(current_user_id: str = Depends(get_current_user_id), db: AsyncSession = Depends(get_db)):
    user = await db.get(User, current_user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
