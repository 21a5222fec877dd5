# studysync/api/utilities/limiter.py

from fastapi import Request
import jwt

from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config.config import settings

TOKEN_HEADER = "token"


def get_limiter_key(request: Request) -> str:
    """
    Returns the rate limit key for a request.
    Authenticated requests are limited per user id taken from the `token`
    header; everything else falls back to the client IP.
    """
    token = request.headers.get(TOKEN_HEADER)
    if token and settings.SECRET_KEY:
        try:
            # Expiry does not matter here, only the identity.
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"verify_exp": False}
            )
            user_id = payload.get("userId")
            if user_id:
                return str(user_id)
        except jwt.PyJWTError:
            pass

    return get_remote_address(request)

# memory:// by default; point RATE_LIMITER_STORAGE_URI at Redis to share limits between workers.
limiter = Limiter(key_func=get_limiter_key, storage_uri=settings.RATE_LIMITER_STORAGE_URI)
