from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse
import logging

from travis_connector.core.exceptions import ValidationException
from travis_connector.core.oauth import (
    authorize_url,
    exchange_code_for_github_token,
    exchange_github_token_for_travis_token,
    state_store,
)

logger = logging.getLogger(__name__)
router = APIRouter()

TRUTHY = {"yes", "true", "1", "on"}

@router.get("/authorize")
async def authorize():
    """Send the browser to GitHub to start the OAuth flow"""
    return RedirectResponse(authorize_url(state_store.issue()), status_code=302)

@router.get("/validate_state")
async def validate_state(
    state: str = Query(default="", description="State returned by GitHub")
):
    """Check that GitHub echoed back a state we issued"""
    if not state_store.consume(state):
        raise ValidationException("Invalid or expired OAuth state", details={"state": state})
    return {"valid": True}

@router.post("/travis_token")
def travis_token(
    code: str = Query(..., description="OAuth code returned by GitHub"),
    isPrivate: str = Query(default="yes", description="Whether the token targets private repositories")
):
    """Exchange a GitHub OAuth code for a Travis CI token"""
    is_private = isPrivate.lower() in TRUTHY
    github_token = exchange_code_for_github_token(code)
    access_token = exchange_github_token_for_travis_token(github_token, is_private)
    logger.info(f"Issued Travis token (private={is_private})")
    return {"access_token": access_token}
