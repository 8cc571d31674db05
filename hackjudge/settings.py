from typing import List, Literal, Optional
from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 12
    bcrypt_rounds: int = 12

    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"
    postgres_db: str = "hackjudge"
    database_url_override: Optional[str] = None
    sql_echo: bool = False

    upload_dir: Path = BASE_DIR / "uploads"
    max_upload_size: int = 20 * 1024 * 1024

    # Judging policy
    phase_window_fail_open: bool = True
    enforce_score_window: bool = False
    score_resubmission_policy: Literal["upsert", "reject"] = "upsert"
    deliverable_grace_minutes: int = 0

    cors_origins: List[str] = ["http://localhost:5173"]
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[str] = None
    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    class Config:
        env_file = BASE_DIR / ".env"


settings = Settings()
