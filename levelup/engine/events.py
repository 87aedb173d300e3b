"""
levelup.engine.events — Whop Webhook Envelope
===============================================

Every inbound webhook body is normalized into a :class:`WebhookEvent`
before dispatch.  The set of event kinds is closed: anything Whop sends that
we don't model becomes :attr:`WebhookEventType.UNKNOWN`, with the original
string kept on the event for logging.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

__all__ = ["WebhookEvent", "WebhookEventType"]


class WebhookEventType(enum.StrEnum):
    """Webhook event kinds with a dedicated handler."""
    MESSAGE_CREATED = "message.created"
    POST_CREATED = "post.created"
    REACTION_ADDED = "reaction.added"
    MEMBER_JOINED = "member.joined"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str) -> WebhookEventType:
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class WebhookEvent:
    """Normalized Whop webhook delivery."""

    type: WebhookEventType
    raw_type: str
    data: dict = field(default_factory=dict)

    @property
    def whop_user_id(self) -> str | None:
        """Whop id of the member who triggered the event."""
        user_id = self.data.get("user_id")
        return str(user_id) if user_id is not None else None

    @classmethod
    def from_payload(cls, payload: object) -> WebhookEvent:
        """Build an event from a decoded JSON body.

        Raises
        ------
        ValueError
            If the body is not an object or has no string ``type``.
        """
        if not isinstance(payload, dict):
            raise ValueError("Webhook body must be a JSON object")
        raw_type = payload.get("type")
        if not isinstance(raw_type, str) or not raw_type:
            raise ValueError("Webhook body is missing 'type'")
        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}
        return cls(type=WebhookEventType.parse(raw_type), raw_type=raw_type, data=data)
