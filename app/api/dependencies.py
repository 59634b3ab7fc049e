from __future__ import annotations

from typing import Annotated, Callable, List

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core import messages
from app.core.database import get_db
from app.core.security import get_token_subject
from app.models.user import User


# Login is handled by the external identity provider
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")


def get_active_user(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Session = Depends(get_db),
) -> User:
    try:
        user_id = get_token_subject(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=messages.AUTH_CREDENTIALS_INVALID,
        )

    user = get_active_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=messages.AUTH_USER_NOT_FOUND_OR_INACTIVE,
        )
    return user


def require_roles(allowed_roles: List[str]) -> Callable[[User], User]:
    def dependency(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=messages.AUTH_ACCESS_DENIED,
            )
        return current_user

    return dependency
