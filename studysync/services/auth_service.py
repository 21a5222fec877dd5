import asyncio
import logging
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import bcrypt

from ..config.config import settings
from ..db.db_client import AsyncPostgresClient
from ..models.db_models import User, Role
from .exceptions import ServiceError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hashes a password with a fresh salt. bcrypt only looks at the first 72 bytes."""
    password_bytes = password.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed.")
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """
    Signup and login logic. Token issuing lives with the HTTP layer.
    """
    def __init__(self, db_client: AsyncPostgresClient):
        self.db_client = db_client

    async def signup(self, full_name: str, email: str, password: str) -> User:
        if not full_name or not full_name.strip():
            raise ServiceError("Full name is required")

        email = normalize_email(email)
        existing_user = await self.db_client.get_user_by_email(email)
        if existing_user:
            logger.info(f"Signup rejected, '{email}' is already registered.")
            raise ServiceError("User already exists")

        # bcrypt blocks; hash in the default executor
        password_hash = await asyncio.get_running_loop().run_in_executor(None, hash_password, password)
        new_user = User(
            id=uuid4(),
            full_name=full_name.strip(),
            email=email,
            password_hash=password_hash,
            role=Role.USER  # admins are promoted out-of-band
        )
        try:
            await self.db_client.add_user(new_user)
        except asyncpg.UniqueViolationError as e:
            # a concurrent signup took the email after the lookup
            logger.info(f"Signup rejected, '{email}' was registered concurrently.")
            raise ServiceError("User already exists") from e
        logger.info(f"User '{email}' registered with id {new_user.id}.")
        return new_user

    async def login(self, email: str, password: str) -> User:
        email = normalize_email(email)
        user = await self.db_client.get_user_by_email(email)
        if not user:
            logger.info(f"Login failed, no account for '{email}'.")
            raise ServiceError("Invalid email")

        password_ok = await asyncio.get_running_loop().run_in_executor(None, verify_password, password, user.password_hash)
        if not password_ok:
            logger.info(f"Login failed, wrong password for '{email}'.")
            raise ServiceError("Wrong password")

        logger.info(f"User '{email}' logged in.")
        return user

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.db_client.get_user_by_id(user_id)
