"""
Authentication dependencies: bearer token -> User -> role gate.
"""
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from admissions.core.config import SECRET_KEY, ALGORITHM
from admissions.db.session import get_db
from admissions.db.models.user import User, UserRole

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

ACCOUNT_DEACTIVATED = "Account is deactivated"


def _invalid_token() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme)) -> str:
    """Email (the `sub` claim) of the caller's access token."""
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _invalid_token()

    email = claims.get("sub")
    if not email:
        raise _invalid_token()
    return email


def get_current_user_obj(
    email: str = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCOUNT_DEACTIVATED)
    return user


def require_role(role: UserRole, detail: str):
    """
    Build a dependency that only lets users with `role` through.

    The role is read from the database, not from the token, so a demoted
    admin loses access immediately.
    """
    def dependency(user: User = Depends(get_current_user_obj)) -> User:
        if user.role != role.value:
            logger.warning(f"Role check failed: user_id={user.id}, role={user.role}, required={role.value}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return user

    return dependency


require_student = require_role(UserRole.STUDENT, "Only students can manage their own applications")
require_admin = require_role(UserRole.ADMIN, "Admin access required")
