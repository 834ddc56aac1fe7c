import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from admissions.db.session import get_db
from admissions.db.models.user import User, UserRole
from admissions.core.auth_dependency import ACCOUNT_DEACTIVATED
from admissions.core.logging_config import sanitize_log_data
from admissions.core.security import hash_password, verify_password, create_access_token
from admissions.schemas.auth import SignupRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


# ✅ STUDENT SIGNUP
@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()
    logger.info(f"Signup requested: {sanitize_log_data(payload.model_dump())}")

    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        full_name=payload.full_name,
        email=email,
        password_hash=hash_password(payload.password),
        role=UserRole.STUDENT.value,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Student account created: user_id={user.id}")

    return {
        "message": "User created successfully",
        "user_id": user.id
    }


# ✅ OAUTH2 LOGIN (Swagger sends "username", we treat it as email)
@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.email == form_data.username.lower()).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning("Login failed: invalid credentials")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_active:
        logger.warning(f"Login refused for deactivated account: user_id={user.id}")
        raise HTTPException(status_code=403, detail=ACCOUNT_DEACTIVATED)

    token = create_access_token({"sub": user.email, "role": user.role})

    return TokenResponse(access_token=token)
