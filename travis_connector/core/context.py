from pydantic import BaseModel
from typing import Optional

from travis_connector.core.config import settings

class SyncContext(BaseModel):
    """Per-refresh request context threaded through every fetch"""
    repo_slug: str
    is_private: bool = False
    limit: int = settings.DEFAULT_ROW_LIMIT
    token: Optional[str] = None
    items_per_page: int = settings.ITEMS_PER_PAGE
    max_retries: int = settings.MAX_RETRIES
    retry_wait_seconds: float = settings.RETRY_WAIT_SECONDS
    timeout: int = settings.REQUEST_TIMEOUT_SECONDS

    @property
    def api_root(self) -> str:
        return settings.TRAVIS_COM_API_URL if self.is_private else settings.TRAVIS_ORG_API_URL

    @property
    def builds_path(self) -> str:
        return f"repos/{self.repo_slug}/builds"
