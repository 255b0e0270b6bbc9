from collections.abc import Callable, Generator, Iterable
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from campus_erp.core.exceptions import Forbidden, Unauthenticated
from campus_erp.core.security import decode_token
from campus_erp.db.session import SessionLocal
from campus_erp.models.user import User, UserRole
from campus_erp.services.identity import IdentityProvider

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: str
    role: UserRole
    email: str


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_identity_provider(db: Session = Depends(get_db)) -> IdentityProvider:
    return IdentityProvider(db)


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("No token provided")
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as exc:
        raise Unauthenticated("Invalid token") from exc

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise Unauthenticated("Invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("Invalid token")
    if not user.is_active:
        raise Forbidden("User account is inactive")
    return Principal(id=user.id, role=user.role, email=user.email)


def require_roles(*roles: UserRole) -> Callable[[Principal], Principal]:
    allowed_roles: Iterable[UserRole] = set(roles)

    def role_checker(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed_roles:
            raise Forbidden("Forbidden: Insufficient permissions")
        return principal

    return role_checker
