import requests
import secrets
import threading
import time
from typing import Dict, Optional
from urllib.parse import urlencode
import logging

from travis_connector.core.config import settings
from travis_connector.core.exceptions import OAuthException

logger = logging.getLogger(__name__)

class OAuthStateStore:
    """Issued OAuth states, each valid once until it expires"""

    def __init__(self, ttl_seconds: int = settings.OAUTH_STATE_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._states: Dict[str, float] = {}
        self._lock = threading.Lock()

    def issue(self) -> str:
        state = secrets.token_urlsafe(24)
        now = time.monotonic()
        with self._lock:
            # Drop expired states so abandoned flows do not pile up
            self._states = {s: exp for s, exp in self._states.items() if exp > now}
            self._states[state] = now + self.ttl_seconds
        return state

    def consume(self, state: Optional[str]) -> bool:
        if not state:
            return False
        with self._lock:
            expires_at = self._states.pop(state, None)
        return expires_at is not None and expires_at > time.monotonic()

def authorize_url(state: str) -> str:
    """GitHub authorize URL the browser is redirected to"""
    params = {
        "client_id": settings.GITHUB_CLIENT_ID,
        "scope": settings.GITHUB_OAUTH_SCOPE,
        "state": state,
    }
    return f"{settings.GITHUB_AUTHORIZE_URL}?{urlencode(params)}"

def exchange_code_for_github_token(code: str) -> str:
    """Trade the OAuth code GitHub handed the browser for a GitHub token"""
    try:
        response = requests.post(
            settings.GITHUB_TOKEN_URL,
            data={
                "client_id": settings.GITHUB_CLIENT_ID,
                "client_secret": settings.GITHUB_CLIENT_SECRET,
                "code": code,
            },
            headers={"Accept": "application/json"},
            timeout=settings.REQUEST_TIMEOUT_SECONDS
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"GitHub token exchange failed: {e}")
        raise OAuthException(f"GitHub token exchange failed: {e}") from e

    token = payload.get("access_token")
    if not token:
        reason = payload.get("error_description") or payload.get("error") or "no access token returned"
        raise OAuthException(f"GitHub token exchange failed: {reason}", 400)
    return token

def exchange_github_token_for_travis_token(github_token: str, is_private: bool) -> str:
    """Trade a GitHub token for a Travis CI API token"""
    root = settings.TRAVIS_COM_API_URL if is_private else settings.TRAVIS_ORG_API_URL
    try:
        response = requests.post(
            f"{root}/auth/github",
            json={"github_token": github_token},
            headers={
                "Accept": settings.TRAVIS_ACCEPT_HEADER,
                "User-Agent": settings.USER_AGENT,
            },
            timeout=settings.REQUEST_TIMEOUT_SECONDS
        )
        response.raise_for_status()
        payload = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Travis token exchange failed: {e}")
        raise OAuthException(f"Travis token exchange failed: {e}") from e

    token = payload.get("access_token")
    if not token:
        raise OAuthException("Travis token exchange failed: no access token returned")
    return token

# Global state store instance
state_store = OAuthStateStore()
