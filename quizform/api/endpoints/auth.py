from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from quizform import models, schemas
from quizform.crud import crud_user
from quizform.database import get_db_session
from quizform.security import create_access_token, get_current_user, verify_password

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
async def register(user_in: schemas.RegisterRequest, db: AsyncSession = Depends(get_db_session)):
    if await crud_user.get_user_by_email(db, user_in.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    db_user = await crud_user.create_user(db, user_in.name, user_in.email, user_in.password)
    print(f"User registered with ID {db_user.id}")
    return schemas.Token(access_token=create_access_token(db_user))


@router.post("/login", response_model=schemas.Token)
async def login(credentials: schemas.LoginRequest, db: AsyncSession = Depends(get_db_session)):
    db_user = await crud_user.get_user_by_email(db, credentials.email)
    if db_user is None or not verify_password(credentials.password, db_user.password_hash):
        print("Failed login attempt.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if db_user.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is blocked.")
    print(f"User {db_user.id} logged in.")
    return schemas.Token(access_token=create_access_token(db_user))


@router.get("/me", response_model=schemas.UserRead)
async def read_me(user: models.User = Depends(get_current_user)):
    return user
