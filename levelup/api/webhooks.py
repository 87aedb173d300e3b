"""
levelup.api.webhooks — Whop webhook receiver
==============================================

Unauthenticated by bearer token; authenticated by HMAC signature instead.
Whop retries failed deliveries, so any processing failure rolls back the
whole event and answers 500.
"""

from __future__ import annotations

import json
import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from levelup.api.deps import get_engine
from levelup.database.engine import get_session, run_db
from levelup.engine.events import WebhookEvent
from levelup.services import webhook_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _process_event(engine: Engine, event: WebhookEvent) -> bool:
    with get_session(engine) as session:
        return webhook_service.dispatch(session, event)


@router.post("/whop")
async def whop_webhook(request: Request, engine=Depends(get_engine)):
    """Verify, parse and dispatch one Whop webhook delivery."""
    secret = os.getenv("WHOP_WEBHOOK_SECRET", "").strip()
    if not secret:
        logger.error("WHOP_WEBHOOK_SECRET is not set, rejecting webhook")
        raise HTTPException(500, "Webhook verification is not configured")

    body = await request.body()
    signature = request.headers.get(webhook_service.SIGNATURE_HEADER)
    if not webhook_service.verify_signature(secret, body, signature):
        raise HTTPException(401, "Invalid signature")

    try:
        event = WebhookEvent.from_payload(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(400, "Webhook body is not valid JSON")
    except ValueError as exc:
        raise HTTPException(400, str(exc))

    try:
        await run_db(_process_event, engine, event)
    except Exception:
        logger.exception("Webhook error while processing %s", event.raw_type)
        return JSONResponse(status_code=500, content={"error": "Webhook processing failed"})

    return {"success": True}
