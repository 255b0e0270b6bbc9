import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_erp.api.deps import Principal, get_db, get_identity_provider, get_principal
from campus_erp.core.config import get_settings
from campus_erp.core.security import create_access_token
from campus_erp.models.faculty import Faculty
from campus_erp.models.student import Student
from campus_erp.models.user import User, UserRole
from campus_erp.schemas.user import ProfileOut, Token, UserLogin, UserOut
from campus_erp.services.directory import faculty_outs, student_outs
from campus_erp.services.identity import IdentityProvider
from campus_erp.services.rate_limit import enforce_rate_limit

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=Token)
def login(
    payload: UserLogin,
    request: Request,
    identities: IdentityProvider = Depends(get_identity_provider),
) -> Token:
    enforce_rate_limit(
        request=request,
        scope="auth.login",
        identity=payload.email,
        limit=settings.auth_rate_limit_login_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
    )
    user = identities.authenticate(payload.email, payload.password)
    if user is None:
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    access_token = create_access_token(
        user.id,
        role=user.role.value,
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    return Token(access_token=access_token, token_type="bearer", user=UserOut.model_validate(user))


@router.post("/logout")
def logout(principal: Principal = Depends(get_principal)) -> dict:
    # Tokens are stateless; the client simply drops it.
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=ProfileOut)
def me(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)) -> ProfileOut:
    user = db.get(User, principal.id)
    profile = ProfileOut(id=user.id, email=user.email, role=user.role)
    if user.role == UserRole.student:
        student = db.execute(select(Student).where(Student.user_id == user.id)).scalar_one_or_none()
        if student is not None:
            profile.student = student_outs(db, [student])[0]
    elif user.role == UserRole.faculty:
        member = db.execute(select(Faculty).where(Faculty.user_id == user.id)).scalar_one_or_none()
        if member is not None:
            profile.faculty = faculty_outs(db, [member])[0]
    return profile
