"""User API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserCreate, UserResponse

router = APIRouter()


@router.post(
    "/",
    response_model=UserResponse,
    status_code=201,
    summary="Create user",
    responses={
        409: {"description": "User with this email already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
) -> User:
    """Create a new user."""
    repo = UserRepository(db)
    if repo.get_by_email(data.email):
        raise HTTPException(status_code=409, detail="User with this email already exists")
    return repo.create(data)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    responses={404: {"description": "User not found"}},
)
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
) -> User:
    """Get a user by ID."""
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
