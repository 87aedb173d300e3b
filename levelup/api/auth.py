"""
levelup.api.auth — Whop OAuth2 + JWT issuance
================================================
"""

from __future__ import annotations

import logging
import os
import secrets
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy import Engine, delete

from levelup.api.deps import create_access_token, get_config, get_engine
from levelup.config import LevelUpConfig
from levelup.database.engine import get_session, run_db
from levelup.database.models import OAuthState
from levelup.services import user_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

WHOP_AUTHORIZE_URL = "https://whop.com/oauth"
OAUTH_STATE_TTL_SECONDS = 600


class WhopAuthError(Exception):
    """The Whop identity provider rejected or failed an OAuth exchange."""


def _oauth_env() -> tuple[str, str, str, str]:
    """Return required OAuth env vars or raise a clear 500."""
    client_id = os.getenv("WHOP_CLIENT_ID", "").strip()
    client_secret = os.getenv("WHOP_CLIENT_SECRET", "").strip()
    redirect_uri = os.getenv("WHOP_REDIRECT_URI", "").strip()
    frontend_url = os.getenv("FRONTEND_URL", "").strip()

    missing = []
    if not client_id:
        missing.append("WHOP_CLIENT_ID")
    if not client_secret:
        missing.append("WHOP_CLIENT_SECRET")
    if not redirect_uri:
        missing.append("WHOP_REDIRECT_URI")
    if not frontend_url:
        missing.append("FRONTEND_URL")

    if missing:
        raise HTTPException(
            status_code=500,
            detail="Whop OAuth is not configured: missing " + ", ".join(missing),
        )

    return client_id, client_secret, redirect_uri, frontend_url.rstrip("/")


# ---------------------------------------------------------------------------
# One-time state tokens
# ---------------------------------------------------------------------------
def _store_oauth_state(engine: Engine, state: str) -> None:
    """Persist an OAuth state token and prune stale entries."""
    cutoff = datetime.now(UTC) - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    with get_session(engine) as session:
        session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        session.add(OAuthState(state=state))


def _consume_oauth_state(engine: Engine, state: str) -> bool:
    """Consume a one-time OAuth state token if valid and unexpired."""
    cutoff = datetime.now(UTC) - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    with get_session(engine) as session:
        session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        row = session.get(OAuthState, state)
        if row is None:
            return False
        session.delete(row)
        return True


# ---------------------------------------------------------------------------
# Whop identity exchange
# ---------------------------------------------------------------------------
async def fetch_whop_identity(
    code: str,
    *,
    api_url: str,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
) -> tuple[dict, str, str | None]:
    """Exchange *code* for tokens and fetch the Whop profile.

    Returns (whop_user, access_token, refresh_token).
    """
    transport = httpx.AsyncHTTPTransport(retries=1)
    async with httpx.AsyncClient(timeout=10, transport=transport) as client:
        token_resp = await client.post(
            f"{api_url}/oauth/token",
            json={
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": redirect_uri,
            },
        )
        if token_resp.status_code != 200:
            raise WhopAuthError(f"token exchange returned {token_resp.status_code}")

        tokens = token_resp.json()
        if not isinstance(tokens, dict):
            raise WhopAuthError("token response is not a JSON object")
        access_token = tokens.get("access_token")
        if not access_token:
            raise WhopAuthError("no access token returned")

        user_resp = await client.get(
            f"{api_url}/me",
            headers={"Authorization": f"Bearer {access_token}"},
        )

    if user_resp.status_code != 200:
        raise WhopAuthError(f"profile lookup returned {user_resp.status_code}")

    whop_user = user_resp.json()
    if not isinstance(whop_user, dict):
        raise WhopAuthError("profile response is not a JSON object")
    if not whop_user.get("id"):
        raise WhopAuthError("profile has no id")
    return whop_user, access_token, tokens.get("refresh_token")


def _login_whop_user(
    engine: Engine,
    whop_user: dict,
    access_token: str,
    refresh_token: str | None,
) -> tuple[int, str]:
    with get_session(engine) as session:
        user, _created = user_service.upsert_whop_user(
            session,
            whop_user,
            access_token=access_token,
            refresh_token=refresh_token,
        )
        return user.id, user.whop_user_id


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/login")
async def login(engine=Depends(get_engine)):
    """Redirect to the Whop OAuth2 consent screen."""
    client_id, _, redirect_uri, _ = _oauth_env()

    state = secrets.token_urlsafe(32)
    await run_db(_store_oauth_state, engine, state)

    query = urlencode(
        {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "state": state,
        }
    )
    return RedirectResponse(f"{WHOP_AUTHORIZE_URL}?{query}")


@router.get("/callback")
async def callback(
    code: str | None = None,
    state: str | None = None,
    cfg: LevelUpConfig = Depends(get_config),
    engine=Depends(get_engine),
):
    """Exchange an OAuth code for a LevelUp bearer token."""
    if not code:
        raise HTTPException(400, "Authorization code missing")

    client_id, client_secret, redirect_uri, frontend_url = _oauth_env()

    if state is not None and not await run_db(_consume_oauth_state, engine, state):
        raise HTTPException(400, "Invalid or expired OAuth state")

    try:
        whop_user, access_token, refresh_token = await fetch_whop_identity(
            code,
            api_url=cfg.whop_api_url,
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
        )
    except (WhopAuthError, httpx.HTTPError, ValueError) as exc:
        logger.error("OAuth error: %s", exc)
        raise HTTPException(500, "Authentication failed")

    user_id, whop_user_id = await run_db(
        _login_whop_user, engine, whop_user, access_token, refresh_token
    )

    token = create_access_token(user_id, whop_user_id, ttl_days=cfg.token_ttl_days)
    return RedirectResponse(f"{frontend_url}?{urlencode({'token': token})}")
