import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.session_service import SessionTokenService


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the storefront user from the session token in the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Authentication required")

    token = auth_header[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        user_id = SessionTokenService.verify_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session has expired") from None
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid session token") from None

    user = UserRepository(db).get_by_id(user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid session token")
    return user


def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """Require an authenticated administrator."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
