import logging
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import APIKeyHeader
from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from pydantic import ValidationError

from .schemas.user import SignupRequest, LoginRequest, UserResponse, AuthResponse, MeResponse, TokenData
from ..models.db_models import User
from ..services.auth_service import AuthService
from ..services.exceptions import ServiceError
from ..config.config import settings
from .dependencies import get_auth_service
from .utilities.limiter import limiter, TOKEN_HEADER

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)
# The client sends the raw JWT in a custom `token` header, not as a Bearer credential.
token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Signs a JWT for `data` that expires after `expires_delta` (TOKEN_EXPIRE_DAYS by default)."""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.TOKEN_EXPIRE_DAYS)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def issue_token(user: User) -> str:
    return create_access_token({"userId": str(user.id)})


async def get_current_user(
    token: Optional[str] = Depends(token_header),
    service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Decodes the `token` header, validates its payload and loads the user it
    belongs to. Any failure is a 401.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authorized, please log in again",
    )
    if not token:
        raise credentials_exception

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData.model_validate(payload)
    except (jwt.PyJWTError, ValidationError) as e:
        logger.warning(f"Token validation error: {e}")
        raise credentials_exception

    if token_data.user_id is None:
        logger.warning(f"Token is valid but missing 'userId': {payload}")
        raise credentials_exception

    user = await service.get_user(token_data.user_id)
    if user is None:
        logger.warning(f"Token for unknown user {token_data.user_id}.")
        raise credentials_exception
    return user


# --- Endpoints ---

@router.post("/signup", response_model=AuthResponse)
@limiter.limit("20/minute")
async def signup(
    request: Request,
    signup_request: SignupRequest,
    service: AuthService = Depends(get_auth_service)
):
    try:
        user = await service.signup(signup_request.full_name, signup_request.email, signup_request.password)
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return AuthResponse(token=issue_token(user), user=UserResponse.from_user(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit("30/minute")
async def login(
    request: Request,
    login_request: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    try:
        user = await service.login(login_request.email, login_request.password)
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return AuthResponse(token=issue_token(user), user=UserResponse.from_user(user))


@router.get("/me", response_model=MeResponse)
@limiter.limit("120/minute")
async def me(request: Request, current_user: User = Depends(get_current_user)):
    return MeResponse(user=UserResponse.from_user(current_user))
