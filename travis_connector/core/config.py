from pydantic_settings import BaseSettings
from typing import List
import os

class Settings(BaseSettings):
    """Application settings"""

    # Travis CI API settings
    TRAVIS_ORG_API_URL: str = os.getenv("TRAVIS_ORG_API_URL", "https://api.travis-ci.org")
    TRAVIS_COM_API_URL: str = os.getenv("TRAVIS_COM_API_URL", "https://api.travis-ci.com")
    TRAVIS_ACCEPT_HEADER: str = "application/vnd.travis-ci.2+json"
    USER_AGENT: str = "TableauTravisWebDataConnector/1.0.0"

    # Sync settings
    DEFAULT_ROW_LIMIT: int = 2500
    ITEMS_PER_PAGE: int = 25  # fixed page size of the builds endpoint
    MAX_RETRIES: int = 5
    RETRY_WAIT_SECONDS: float = 0.0
    REQUEST_TIMEOUT_SECONDS: int = 30

    # GitHub OAuth settings
    GITHUB_CLIENT_ID: str = os.getenv("GITHUB_CLIENT_ID", "")
    GITHUB_CLIENT_SECRET: str = os.getenv("GITHUB_CLIENT_SECRET", "")
    GITHUB_OAUTH_SCOPE: str = "user:email,read:org,repo_deployment,repo:status,write:repo_hook"
    GITHUB_AUTHORIZE_URL: str = "https://github.com/login/oauth/authorize"
    GITHUB_TOKEN_URL: str = "https://github.com/login/oauth/access_token"
    OAUTH_STATE_TTL_SECONDS: int = 600  # 10 minutes

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Travis CI Connector"

    # CORS settings
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:9001",
        "https://localhost:9001",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True

# Global settings instance
settings = Settings()
