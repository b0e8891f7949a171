# Academia - configuration
from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    secret_key: str = "dev-secret-change-in-production"
    database_url: str = "sqlite+aiosqlite:///./academia.db"
    access_expire_minutes: int = 60
    jwt_issuer: str = "academia"
    jwt_audience: str = "academia-clients"
    # Bootstrap admin, created on startup when missing
    admin_username: str = "admin"
    admin_password: str = "admin123"
    admin_email: str = "admin@academia.local"
    log_level: str = "INFO"
    audit_log_path: Path | None = None
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    class Config:
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
