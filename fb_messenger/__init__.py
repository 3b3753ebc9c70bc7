"""
fb-messenger: Facebook Messenger Platform client.

Builds Send API and Messenger Profile API requests, sends them with a page
access token, and parses webhook deliveries into typed events.
"""

from fb_messenger.errors import (
    GraphAPIError,
    MessengerError,
    PayloadEncodingError,
    TransportError,
    raise_for_api_error,
)
from fb_messenger.models.webhook_models import EntryMessage, WebhookEvent, parse_webhook
from fb_messenger.services.facebook_service import MessengerBot

__version__ = "0.1.0"
__all__ = [
    "MessengerBot",
    "MessengerError",
    "PayloadEncodingError",
    "TransportError",
    "GraphAPIError",
    "raise_for_api_error",
    "EntryMessage",
    "WebhookEvent",
    "parse_webhook",
]
