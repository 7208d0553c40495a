"""HTTP routes: login pages, OAuth callback and health."""

import logging
from datetime import datetime
from typing import Dict, Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from subscriber_watcher.exceptions import (
    CredentialStoreError,
    ExchangeFailedError,
    InvalidStateError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

HOME_PAGE = '<html><body><a href="/login">Login with YouTube</a></body></html>'
SUCCESS_PAGE = "<html><body>Login successful! Subscriber polling is authorized.</body></html>"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    timestamp: str
    has_credential: bool
    credential_expiry: Optional[str]
    last_count: Optional[int]
    last_observed_at: Optional[str]
    notifications: Dict[str, int]


@router.get("/", response_class=HTMLResponse)
async def home():
    """Static page linking to the login endpoint."""
    return HOME_PAGE


@router.get("/login")
async def login(request: Request):
    """Redirect to the provider's consent page."""
    url = request.app.state.auth_flow.login_url()
    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/oauth2callback", response_class=HTMLResponse)
async def oauth2_callback(
    request: Request, state: Optional[str] = None, code: Optional[str] = None
):
    """Exchange the authorization code and install the credential.

    Raises:
        HTTPException: 400 on state mismatch, 500 if the exchange or the
            credential write fails.
    """
    try:
        await request.app.state.auth_flow.complete(state, code)
    except InvalidStateError as e:
        logger.warning(f"Rejected OAuth callback: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ExchangeFailedError as e:
        logger.error(f"Failed to exchange token: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to exchange token: {e}",
        )
    except CredentialStoreError as e:
        logger.error(f"Failed to store token: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store token",
        )

    return SUCCESS_PAGE


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Report credential state, last observed count and delivery counters."""
    credential = await request.app.state.guard.snapshot()
    tracker = request.app.state.tracker

    healthy = credential["has_credential"] and tracker.last_count is not None

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        service="subscriber-watcher",
        timestamp=datetime.now().isoformat(),
        has_credential=credential["has_credential"],
        credential_expiry=credential["expiry"],
        last_count=tracker.last_count,
        last_observed_at=tracker.observed_at.isoformat() if tracker.observed_at else None,
        notifications=request.app.state.notifier.get_stats(),
    )
