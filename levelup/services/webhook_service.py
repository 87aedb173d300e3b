"""
levelup.services.webhook_service — Whop Webhook Verification & Dispatch
=========================================================================

Deliveries are authenticated with an HMAC-SHA256 signature of the raw body
(``X-Whop-Signature``) before they reach :func:`dispatch`.  Dispatch is a
registry lookup: every :class:`WebhookEventType` variant, including
``UNKNOWN``, maps to exactly one handler.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from levelup.constants import MESSAGE_XP, POST_XP, REACTION_XP
from levelup.database.models import ActivityType, User
from levelup.engine.events import WebhookEvent, WebhookEventType
from levelup.services.achievement_service import (
    check_message_achievements,
    check_post_achievements,
)
from levelup.services.progression_service import award_xp, log_activity
from levelup.services.user_service import get_user_by_whop_id

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Whop-Signature"


# ---------------------------------------------------------------------------
# Signature verification
# ---------------------------------------------------------------------------
def compute_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """Check *signature* (hex, optionally ``sha256=``-prefixed) against *body*."""
    if not secret or not signature:
        return False
    provided = signature.strip()
    if provided.startswith("sha256="):
        provided = provided[len("sha256="):]
    return hmac.compare_digest(compute_signature(secret, body), provided.lower())


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------
def _resolve_user(session: Session, event: WebhookEvent) -> User | None:
    whop_user_id = event.whop_user_id
    if whop_user_id is None:
        logger.warning("%s event without data.user_id, ignoring", event.raw_type)
        return None
    user = get_user_by_whop_id(session, whop_user_id)
    if user is None:
        logger.warning("%s for unknown Whop user %s, ignoring", event.raw_type, whop_user_id)
    return user


def _credit(session: Session, user: User, activity_type: ActivityType, amount: int, text: str) -> None:
    log_activity(session, user.id, activity_type, text, amount)
    award_xp(session, user, amount)


def handle_message_created(session: Session, event: WebhookEvent) -> None:
    user = _resolve_user(session, event)
    if user is None:
        return
    _credit(session, user, ActivityType.MESSAGE, MESSAGE_XP, "Sent a message")
    check_message_achievements(session, user)


def handle_post_created(session: Session, event: WebhookEvent) -> None:
    user = _resolve_user(session, event)
    if user is None:
        return
    _credit(session, user, ActivityType.POST, POST_XP, "Created a post")
    check_post_achievements(session, user)


def handle_reaction_added(session: Session, event: WebhookEvent) -> None:
    user = _resolve_user(session, event)
    if user is None:
        return
    _credit(session, user, ActivityType.REACTION, REACTION_XP, "Reacted to a post")


def handle_member_joined(session: Session, event: WebhookEvent) -> None:
    # Membership is created at OAuth login.
    logger.debug("member.joined for %s: nothing to do", event.whop_user_id)


def handle_unknown(session: Session, event: WebhookEvent) -> None:
    logger.info("Unhandled webhook event: %s", event.raw_type)


# ---------------------------------------------------------------------------
# Handler registry
# ---------------------------------------------------------------------------
HANDLERS: dict[WebhookEventType, Callable[[Session, WebhookEvent], None]] = {
    WebhookEventType.MESSAGE_CREATED: handle_message_created,
    WebhookEventType.POST_CREATED: handle_post_created,
    WebhookEventType.REACTION_ADDED: handle_reaction_added,
    WebhookEventType.MEMBER_JOINED: handle_member_joined,
    WebhookEventType.UNKNOWN: handle_unknown,
}

_missing = set(WebhookEventType) - HANDLERS.keys()
if _missing:
    raise RuntimeError(f"No webhook handler registered for: {sorted(_missing)}")


def dispatch(session: Session, event: WebhookEvent) -> bool:
    """Run the handler for *event*.

    Returns False for event types we don't model, True otherwise.
    """
    HANDLERS[event.type](session, event)
    return event.type is not WebhookEventType.UNKNOWN
