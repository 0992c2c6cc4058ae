from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import crud, models, schemas
from .config import Settings
from .database import get_db
from .errors import AuthenticationError, AuthorizationError

SESSION_USER_KEY = "user_id"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

_contexts: dict[int, CryptContext] = {}


def _pwd_context(rounds: int) -> CryptContext:
    if rounds not in _contexts:
        _contexts[rounds] = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
    return _contexts[rounds]


def get_password_hash(password: str, rounds: int = 10) -> str:
    return _pwd_context(rounds).hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return _pwd_context(10).verify(plain_password, hashed_password)
    except ValueError:
        # not a bcrypt hash
        return False


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    """Return the user for a valid email/password pair, None otherwise."""
    user = crud.get_user_by_email(db, email=email)
    if not user or not verify_password(password, user.password):
        return None
    return user


def create_access_token(user: models.User, settings: Settings) -> str:
    expire = datetime.now(timezone.utc) + settings.token_lifetime
    claims = {
        "sub": str(user.id),
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> schemas.TokenData:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return schemas.TokenData(
            id=payload["id"],
            email=payload.get("email"),
            role=payload.get("role") or models.ROLE_USER,
        )
    except (JWTError, KeyError, ValueError):
        raise AuthenticationError("Invalid or expired token")


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> schemas.TokenData:
    if token:
        return decode_access_token(token, settings)

    user_id = request.session.get(SESSION_USER_KEY) if "session" in request.scope else None
    if user_id is not None:
        user = crud.get_user(db, user_id=user_id)
        if user:
            return schemas.TokenData(id=user.id, email=user.email, role=user.role or models.ROLE_USER)

    raise AuthenticationError("Token not provided")


def require_roles(*roles: str):
    def checker(current_user: schemas.TokenData = Depends(get_current_user)) -> schemas.TokenData:
        if current_user.role not in roles:
            raise AuthorizationError()
        return current_user

    return checker
