import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BACKEND_ROOT = Path(__file__).resolve().parents[2]

load_dotenv(BACKEND_ROOT / ".env")


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_env: str
    database_url: str
    jwt_secret_key: str
    jwt_algorithm: str
    jwt_access_expire_minutes: int
    cors_origins: str
    log_level: str
    default_page_size: int
    max_page_size: int
    seed_demo_data: bool

    def parsed_cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_origins.split(",") if item.strip()]


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "TaskHub API"),
        app_env=os.getenv("APP_ENV", "dev"),
        database_url=os.getenv("DATABASE_URL", f"sqlite:///{BACKEND_ROOT / 'taskhub.db'}"),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", "change_me_in_env"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_access_expire_minutes=int(os.getenv("JWT_ACCESS_EXPIRE_MINUTES", "480")),
        cors_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "10")),
        max_page_size=int(os.getenv("MAX_PAGE_SIZE", "100")),
        seed_demo_data=_as_bool(os.getenv("SEED_DEMO_DATA", "false")),
    )
