# shopfront/config.py
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from a local .env, if any
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    mongo_uri: str = "mongodb://localhost:27017/shop"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origin: str = "http://localhost:3000"
    store_backend: str = "mongo"  # "mongo" or "memory"
    seed_users: bool = True
    log_level: str = "INFO"
    # fallback when the connection string carries no database path
    default_database: str = "shop"
    server_selection_timeout_ms: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017/shop"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", 5000)),
            cors_origin=os.getenv("CORS_ORIGIN", "http://localhost:3000"),
            store_backend=os.getenv("STORE_BACKEND", "mongo").lower(),
            seed_users=_env_bool("SEED_USERS", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
