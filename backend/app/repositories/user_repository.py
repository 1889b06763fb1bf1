"""User repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from app.models.user import User
from app.schemas.user import UserCreate


class UserRepository:
    """Repository for User model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID."""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        return self.db.query(User).filter(User.email == email).first()

    def create(self, data: UserCreate) -> User:
        """Create a new user."""
        user = User(name=data.name, email=data.email, is_admin=data.is_admin)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
