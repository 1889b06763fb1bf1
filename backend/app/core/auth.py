from uuid import UUID

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.repositories.user_repository import UserRepository


def get_current_user(
    x_user_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the requesting user from the ``X-User-Id`` header.

    Session handling lives in front of this service; by the time a request
    arrives the caller's identity has already been established.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")

    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid X-User-Id header") from None

    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """Require the requesting user to be an administrator."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
