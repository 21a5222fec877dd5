import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """
    Holds every runtime setting read from the environment (or a local .env file).
    """
    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("DB_POOL_MIN_SIZE", 1))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("DB_POOL_MAX_SIZE", 10))

    # Rate limiter storage: "memory://" or a Redis URL such as redis://localhost:6379/1 (install the [redis] extra)
    RATE_LIMITER_STORAGE_URI: str = os.environ.get("RATE_LIMITER_STORAGE_URI", "memory://")

    # JWT and password hashing
    SECRET_KEY: str = os.environ.get("SECRET_KEY")
    ALGORITHM: str = os.environ.get("ALGORITHM", "HS256")
    TOKEN_EXPIRE_DAYS: int = int(os.environ.get("TOKEN_EXPIRE_DAYS", 7))
    BCRYPT_ROUNDS: int = int(os.environ.get("BCRYPT_ROUNDS", 10))

    # Uploaded attachments and papers
    UPLOAD_DIR: str = os.environ.get("UPLOAD_DIR", "uploads")
    PUBLIC_BASE_URL: str = os.environ.get("PUBLIC_BASE_URL", "").rstrip("/")

    CORS_ORIGINS: list = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.environ.get("LOG_DIR", "logs")

    # Used by studysync.client when no base URL is passed explicitly
    BACKEND_URL: str = os.environ.get("STUDYSYNC_BACKEND_URL", "http://localhost:8000")

# Single importable settings instance
settings = Config()
