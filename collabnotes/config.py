import os
import secrets


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    DATABASE_URL = os.environ.get("DATABASE_URL", "postgresql://localhost/notes")
    SECRET_KEY = os.environ.get("SECRET_KEY", secrets.token_hex(32))
    # "postgres" or "memory"
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "postgres")
    POOL_MIN_SIZE = int(os.environ.get("POOL_MIN_SIZE", "2"))
    POOL_MAX_SIZE = int(os.environ.get("POOL_MAX_SIZE", "10"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    # Token sizes
    INVITATION_HASH_LENGTH = int(os.environ.get("INVITATION_HASH_LENGTH", "10"))
    PUBLIC_ID_LENGTH = int(os.environ.get("PUBLIC_ID_LENGTH", "10"))
    NOTES_PUBLIC_BY_DEFAULT = _env_bool("NOTES_PUBLIC_BY_DEFAULT", "true")
