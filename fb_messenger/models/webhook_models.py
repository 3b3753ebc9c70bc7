"""Incoming Facebook Messenger webhook models.

A messaging event carries exactly one kind of payload (message, postback,
reaction, ...). On the wire that is one populated key out of many; here it
becomes `EntryMessage.event`, a union discriminated by `kind`.
"""

import logging
from enum import Enum
from typing import Annotated, Any, Iterator, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class AccountLinkingStatus(str, Enum):
    LINKED = "linked"
    UNLINKED = "unlinked"


class PolicyEnforcementAction(str, Enum):
    WARNING = "warning"
    BLOCK = "block"
    UNBLOCK = "unblock"


class ReferralSource(str, Enum):
    MESSENGER_CODE = "MESSENGER_CODE"
    DISCOVER_TAB = "DISCOVER_TAB"
    ADS = "ADS"
    SHORTLINK = "SHORTLINK"
    CUSTOMER_CHAT_PLUGIN = "CUSTOMER_CHAT_PLUGIN"


class ReactionAction(str, Enum):
    REACT = "react"
    UNREACT = "unreact"


class Participant(BaseModel):
    """Sender or recipient of a messaging event."""

    id: str


class Coordinates(BaseModel):
    lat: float
    long: float


class InboundAttachmentPayload(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    sticker_id: Optional[int] = None
    coordinates: Optional[Coordinates] = None


class InboundAttachment(BaseModel):
    """Attachment received from a user (media, file, location, fallback)."""

    type: str
    payload: Optional[InboundAttachmentPayload] = None


class QuickReplyPayload(BaseModel):
    payload: str


class ReplyTo(BaseModel):
    mid: Optional[str] = None


class WebhookMessage(BaseModel):
    """Body of `messages` and `message_echoes` events."""

    mid: Optional[str] = None
    is_echo: bool = False
    app_id: Optional[int | str] = None
    metadata: Optional[str] = None
    text: Optional[str] = None
    attachments: list[InboundAttachment] = Field(default_factory=list)
    quick_reply: Optional[QuickReplyPayload] = None
    reply_to: Optional[ReplyTo] = None


class Referral(BaseModel):
    # unknown sources are kept as plain strings
    source: Optional[Union[ReferralSource, str]] = Field(default=None, union_mode="left_to_right")
    type: Optional[str] = None
    ref: Optional[str] = None
    referer_uri: Optional[str] = None
    ad_id: Optional[str] = None


class Postback(BaseModel):
    mid: Optional[str] = None
    title: Optional[str] = None
    payload: Optional[str] = None
    referral: Optional[Referral] = None


class Reaction(BaseModel):
    reaction: Optional[str] = None
    emoji: Optional[str] = None
    action: Optional[ReactionAction] = None
    mid: Optional[str] = None


class MessageDelivery(BaseModel):
    mids: list[str] = Field(default_factory=list)
    watermark: Optional[int] = None


class MessageRead(BaseModel):
    watermark: Optional[int] = None


class Handover(BaseModel):
    """Thread control handover between apps."""

    metadata: Optional[str] = None
    new_owner_app_id: Optional[int | str] = None
    previous_owner_app_id: Optional[int | str] = None
    requested_owner_app_id: Optional[int | str] = None


class PolicyEnforcement(BaseModel):
    action: PolicyEnforcementAction
    # absent when action is unblock
    reason: Optional[str] = None


class AccountLinking(BaseModel):
    status: Optional[AccountLinkingStatus] = None
    authorization_code: Optional[str] = None


class GamePlay(BaseModel):
    game_id: Optional[str] = None
    player_id: Optional[str] = None
    context_type: Optional[str] = None
    context_id: Optional[str] = None
    score: Optional[int] = None
    payload: Optional[str] = None


class Optin(BaseModel):
    ref: Optional[str] = None
    user_ref: Optional[str] = None


class MessageEvent(BaseModel):
    kind: Literal["message"] = "message"
    message: WebhookMessage


class PostbackEvent(BaseModel):
    kind: Literal["postback"] = "postback"
    postback: Postback


class ReactionEvent(BaseModel):
    kind: Literal["reaction"] = "reaction"
    reaction: Reaction


class DeliveryEvent(BaseModel):
    kind: Literal["delivery"] = "delivery"
    delivery: MessageDelivery


class ReadEvent(BaseModel):
    kind: Literal["read"] = "read"
    read: MessageRead


class ReferralEvent(BaseModel):
    kind: Literal["referral"] = "referral"
    referral: Referral


class PassThreadControlEvent(BaseModel):
    kind: Literal["pass_thread_control"] = "pass_thread_control"
    pass_thread_control: Handover


class TakeThreadControlEvent(BaseModel):
    kind: Literal["take_thread_control"] = "take_thread_control"
    take_thread_control: Handover


class RequestThreadControlEvent(BaseModel):
    kind: Literal["request_thread_control"] = "request_thread_control"
    request_thread_control: Handover


class PolicyEnforcementEvent(BaseModel):
    kind: Literal["policy_enforcement"] = "policy_enforcement"
    policy_enforcement: PolicyEnforcement


class AccountLinkingEvent(BaseModel):
    kind: Literal["account_linking"] = "account_linking"
    account_linking: AccountLinking


class GamePlayEvent(BaseModel):
    kind: Literal["game_play"] = "game_play"
    game_play: GamePlay


class OptinEvent(BaseModel):
    kind: Literal["optin"] = "optin"
    optin: Optin


MessagingEvent = Annotated[
    Union[
        MessageEvent,
        PostbackEvent,
        ReactionEvent,
        DeliveryEvent,
        ReadEvent,
        ReferralEvent,
        PassThreadControlEvent,
        TakeThreadControlEvent,
        RequestThreadControlEvent,
        PolicyEnforcementEvent,
        AccountLinkingEvent,
        GamePlayEvent,
        OptinEvent,
    ],
    Field(discriminator="kind"),
]

# Wire key -> event kind. Older payloads use message_delivery/message_read.
EVENT_KEYS: dict[str, str] = {
    "message": "message",
    "postback": "postback",
    "reaction": "reaction",
    "delivery": "delivery",
    "message_delivery": "delivery",
    "read": "read",
    "message_read": "read",
    "referral": "referral",
    "pass_thread_control": "pass_thread_control",
    "take_thread_control": "take_thread_control",
    "request_thread_control": "request_thread_control",
    "policy_enforcement": "policy_enforcement",
    "account_linking": "account_linking",
    "game_play": "game_play",
    "optin": "optin",
}


class EntryMessage(BaseModel):
    """One messaging event delivered inside a webhook entry."""

    # absent on some policy_enforcement events
    sender: Optional[Participant] = None
    recipient: Participant
    timestamp: Optional[int] = None
    event: MessagingEvent

    @model_validator(mode="before")
    @classmethod
    def _lift_event(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or "event" in data:
            return data

        present = [key for key in EVENT_KEYS if data.get(key) is not None]
        kinds = {EVENT_KEYS[key] for key in present}
        if not kinds:
            raise ValueError("messaging event carries no known event kind")
        if len(kinds) > 1:
            raise ValueError(f"messaging event carries several kinds: {', '.join(sorted(kinds))}")

        kind = kinds.pop()
        lifted = {key: value for key, value in data.items() if key not in present}
        lifted["event"] = {"kind": kind, kind: data[present[0]]}
        return lifted

    @property
    def kind(self) -> str:
        return self.event.kind

    @property
    def payload(self) -> BaseModel:
        """The populated event body, e.g. the Postback of a postback event."""
        return getattr(self.event, self.event.kind)

    @property
    def is_echo(self) -> bool:
        return isinstance(self.event, MessageEvent) and self.event.message.is_echo


class Entry(BaseModel):
    """Facebook webhook entry."""

    id: str
    time: int
    messaging: list[EntryMessage] = Field(default_factory=list)
    standby: list[EntryMessage] = Field(default_factory=list)

    @field_validator("messaging", "standby", mode="before")
    @classmethod
    def _drop_unknown_kinds(cls, value: Any) -> Any:
        # app_roles-only events carry none of the modelled kinds
        if not isinstance(value, list):
            return value
        kept = []
        for item in value:
            if isinstance(item, Mapping) and "event" not in item and not any(
                item.get(key) is not None for key in EVENT_KEYS
            ):
                logger.warning(
                    "Skipping messaging event with no known kind: %s",
                    sorted(k for k in item if k not in ("sender", "recipient", "timestamp")),
                )
                continue
            kept.append(item)
        return kept


class WebhookEvent(BaseModel):
    """Facebook webhook payload."""

    object: str
    entry: list[Entry] = Field(default_factory=list)

    def iter_messages(self) -> Iterator[EntryMessage]:
        """Yield every event across entries, messaging before standby."""
        for entry in self.entry:
            yield from entry.messaging
            yield from entry.standby


def parse_webhook(body: bytes | str | Mapping[str, Any]) -> WebhookEvent:
    """Parse a webhook request body; raises pydantic.ValidationError if malformed."""
    if isinstance(body, (bytes, str)):
        return WebhookEvent.model_validate_json(body)
    return WebhookEvent.model_validate(body)
