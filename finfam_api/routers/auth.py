import structlog
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .. import auth, crud, schemas
from ..config import Settings
from ..database import get_db
from ..errors import AuthenticationError

logger = structlog.get_logger(__name__)

router = APIRouter()


def auth_rate_limit(request: Request):
    request.app.state.auth_limiter(request)


def _auth_response(message: str, user, settings: Settings) -> dict:
    return {
        "message": message,
        "user": schemas.User.model_validate(user),
        "token": auth.create_access_token(user, settings),
    }


@router.post(
    "/register",
    response_model=schemas.AuthResponse,
    status_code=201,
    dependencies=[Depends(auth_rate_limit)],
)
def register(
    request: Request,
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(auth.get_settings_dep),
):
    if crud.get_user_by_email(db, email=user.email):
        raise AuthenticationError("Email already in use")
    hashed_password = auth.get_password_hash(user.password, rounds=settings.bcrypt_rounds)
    db_user = crud.create_user(db=db, user=user, hashed_password=hashed_password)
    request.session[auth.SESSION_USER_KEY] = db_user.id
    logger.info("user_registered", user_id=db_user.id, role=db_user.role)
    return _auth_response("User registered successfully", db_user, settings)


@router.post("/login", response_model=schemas.AuthResponse, dependencies=[Depends(auth_rate_limit)])
def login(
    request: Request,
    credentials: schemas.UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(auth.get_settings_dep),
):
    user = auth.authenticate_user(db, credentials.email, credentials.password)
    if user is None:
        logger.info("login_failed")
        raise AuthenticationError("Invalid email or password")
    request.session[auth.SESSION_USER_KEY] = user.id
    logger.info("user_logged_in", user_id=user.id)
    return _auth_response("Login successful", user, settings)


@router.post("/logout", response_model=schemas.Message)
def logout(request: Request):
    request.session.clear()
    return {"message": "Logout successful"}


@router.get("/me", response_model=schemas.UserResponse)
def read_me(
    db: Session = Depends(get_db),
    current_user: schemas.TokenData = Depends(auth.get_current_user),
):
    user = crud.get_user(db, user_id=current_user.id)
    if user is None:
        raise AuthenticationError()
    return {"user": schemas.User.model_validate(user)}


@router.get("/admin", response_model=schemas.Message)
def admin_only(current_user: schemas.TokenData = Depends(auth.require_roles("admin"))):
    return {"message": "Admin access granted"}


@router.get("/user", response_model=schemas.Message)
def user_only(current_user: schemas.TokenData = Depends(auth.require_roles("user", "admin"))):
    return {"message": "User access granted"}
