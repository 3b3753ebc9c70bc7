"""Wire models for the Send API, the Messenger Profile API and webhooks."""

from fb_messenger.models.payload_models import (
    GetStarted,
    MessageRequest,
    Payload,
    PersistentMenu,
    ProfileDeleteRequest,
    ProfileUpdateRequest,
    SenderActionRequest,
)
from fb_messenger.models.send_models import (
    AttachmentType,
    Button,
    ButtonType,
    DefaultAction,
    Element,
    Message,
    NotificationType,
    QuickReply,
    QuickReplyType,
    Recipient,
    SenderAction,
    TemplateType,
)
from fb_messenger.models.user_models import FacebookUserInfo
from fb_messenger.models.webhook_models import (
    Entry,
    EntryMessage,
    WebhookEvent,
    parse_webhook,
)

__all__ = [
    "AttachmentType",
    "Button",
    "ButtonType",
    "DefaultAction",
    "Element",
    "Entry",
    "EntryMessage",
    "FacebookUserInfo",
    "GetStarted",
    "Message",
    "MessageRequest",
    "NotificationType",
    "Payload",
    "PersistentMenu",
    "ProfileDeleteRequest",
    "ProfileUpdateRequest",
    "QuickReply",
    "QuickReplyType",
    "Recipient",
    "SenderAction",
    "SenderActionRequest",
    "TemplateType",
    "WebhookEvent",
    "parse_webhook",
]
