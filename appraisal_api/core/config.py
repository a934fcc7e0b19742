import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Development and deployment hosts that are always allowed alongside FRONTEND_URL.
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


class Config(BaseModel):
    app_name: str = "Appraisal API"
    version: str = "1.0.0"
    environment: str = Field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    api_prefix: str = "/api"
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Server
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "3405")))

    # Database
    db_host: str = Field(default_factory=lambda: os.getenv("DB_HOST", "postgres"))
    db_user: str = Field(default_factory=lambda: os.getenv("DB_USER", "postgres"))
    db_password: str = Field(default_factory=lambda: os.getenv("DB_PASSWORD", "admin123"))
    db_name: str = Field(default_factory=lambda: os.getenv("DB_NAME", "new_employee_db"))
    db_port: int = Field(default_factory=lambda: int(os.getenv("DB_PORT", "5432")))
    # Full URL override, e.g. sqlite:///./appraisals.db for local development
    database_url_override: Optional[str] = Field(default_factory=lambda: os.getenv("DATABASE_URL") or None)

    # Startup connectivity
    db_connect_attempts: int = Field(default_factory=lambda: int(os.getenv("DB_CONNECT_ATTEMPTS", "5")))
    db_connect_delay: float = Field(default_factory=lambda: float(os.getenv("DB_CONNECT_DELAY", "5.0")))

    # CORS
    frontend_url: str = Field(default_factory=lambda: os.getenv("FRONTEND_URL", "http://localhost:3000"))
    extra_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def cors_origins(self) -> List[str]:
        origins = [self.frontend_url] if self.frontend_url else []
        for origin in self.extra_origins:
            if origin not in origins:
                origins.append(origin)
        return origins


def get_settings() -> Config:
    """Read the environment into a fresh settings object."""
    return Config()
