from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./shopapp.db"
    log_level: str = "INFO"
    environment: str = "local"
    api_prefix: str = "/api/v1"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_schema: str = "public"

    # Product uploads
    upload_dir: str = "uploads"

    # None keeps page size unbounded
    max_page_limit: Optional[int] = None

    # When False every non-upload failure is reported as 400
    distinct_error_statuses: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = f"config/{os.getenv('ENV', 'local')}.env"
        case_sensitive = False


settings = Settings()
