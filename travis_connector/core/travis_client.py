import requests
from typing import Dict, Optional
from pydantic import ValidationError
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)
import logging

from travis_connector.core.config import settings
from travis_connector.core.context import SyncContext
from travis_connector.core.exceptions import (
    ExhaustedRetries,
    MalformedResponse,
    TransientFetchFailure,
)
from travis_connector.models.builds import BuildsPage, JobEnvelope, JobRecord, PageRequest

logger = logging.getLogger(__name__)

class TravisClient:
    """Travis CI API client for fetching build, commit and job data"""

    def __init__(self, context: SyncContext):
        self.context = context
        self.base_url = context.api_root
        self.headers = {
            "Accept": settings.TRAVIS_ACCEPT_HEADER,
            "User-Agent": settings.USER_AGENT,
        }
        # Public repositories need no credential
        if context.is_private and context.token:
            self.headers["Authorization"] = f"token {context.token}"

    def build_api_from(self, path: str, after_number: Optional[int] = None) -> str:
        """Build a full endpoint URL, optionally paged after a build number"""
        url = f"{self.base_url}/{path}"
        if after_number:
            url = f"{url}?after_number={after_number}"
        return url

    def _request_once(self, url: str) -> Dict:
        try:
            response = requests.get(url, headers=self.headers, timeout=self.context.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Travis API request failed: {e}")
            raise TransientFetchFailure(url, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(url, str(e)) from e

    def _make_request(self, url: str) -> Dict:
        """Make a request to the Travis API with its own retry budget"""
        retrying = Retrying(
            stop=stop_after_attempt(self.context.max_retries + 1),
            wait=wait_fixed(self.context.retry_wait_seconds),
            retry=retry_if_exception_type(TransientFetchFailure),
        )
        try:
            for attempt in retrying:
                with attempt:
                    return self._request_once(url)
        except RetryError as e:
            attempts = e.last_attempt.attempt_number
            logger.error(f"Giving up on {url} after {attempts} attempts")
            raise ExhaustedRetries(url, attempts) from e.last_attempt.exception()

    def get_page(self, page_request: PageRequest) -> BuildsPage:
        """Fetch and validate one page of builds"""
        url = self.build_api_from(page_request.path, page_request.after_number)
        payload = self._make_request(url)
        try:
            return BuildsPage.model_validate(payload)
        except ValidationError as e:
            raise MalformedResponse(url, str(e)) from e

    def get_builds(self, after_number: Optional[int] = None) -> BuildsPage:
        """Get one page of repository builds, older than after_number when given"""
        return self.get_page(PageRequest(path=self.context.builds_path, after_number=after_number))

    def get_job(self, job_id: int) -> JobRecord:
        """Get specific job details"""
        url = self.build_api_from(f"jobs/{job_id}")
        payload = self._make_request(url)
        try:
            return JobEnvelope.model_validate(payload).job
        except ValidationError as e:
            raise MalformedResponse(url, str(e)) from e
