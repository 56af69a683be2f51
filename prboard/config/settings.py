"""Application settings and configuration"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "PR Approval Board"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database (document store backend)
    DATABASE_URL: str = "sqlite:///./prboard.db"

    # GitHub API
    GITHUB_ORG: Optional[str] = None
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_API_BASE_URL: str = "https://api.github.com"
    GITHUB_TIMEOUT_SECONDS: Optional[float] = None  # None disables the client timeout

    USER_AGENT: str = "PRApprovalBoard/1.0"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
