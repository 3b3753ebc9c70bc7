"""Facebook webhook endpoints.

The router answers the subscription handshake and turns delivery bodies into
typed EntryMessage events. What to do with each event is left to the handler
passed to create_webhook_router(); it runs as a background task so the
platform gets its 200 without waiting on the handler.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from fb_messenger.config import get_settings
from fb_messenger.models.webhook_models import EntryMessage, parse_webhook

logger = logging.getLogger(__name__)

EventHandler = Callable[[EntryMessage], Optional[Awaitable[None]]]


async def dispatch_event(handler: EventHandler, event: EntryMessage) -> None:
    """Run the handler for one event, logging instead of raising on failure."""
    try:
        result = handler(event)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error(
            "Error handling %s event from %s: %s",
            event.kind,
            event.sender.id if event.sender else "unknown sender",
            e,
            exc_info=True,
        )


def create_webhook_router(
    handler: EventHandler,
    verify_token: Optional[str] = None,
) -> APIRouter:
    """Build the webhook router.

    Args:
        handler: Called once per messaging event, sync or async
        verify_token: Token expected in hub.verify_token; defaults to
            FACEBOOK_VERIFY_TOKEN from settings, read at request time
    """
    router = APIRouter()

    @router.get("")
    async def verify_webhook(request: Request):
        """Facebook webhook verification endpoint."""
        expected = verify_token or get_settings().facebook_verify_token

        mode = request.query_params.get("hub.mode")
        token = request.query_params.get("hub.verify_token")
        challenge = request.query_params.get("hub.challenge")

        if expected and mode == "subscribe" and token == expected:
            logger.info("Webhook verified successfully")
            return PlainTextResponse(challenge or "")

        logger.warning("Webhook verification failed")
        return Response(status_code=403)

    @router.post("")
    async def handle_webhook(request: Request, background_tasks: BackgroundTasks):
        """Handle incoming Facebook Messenger webhook events."""
        body = await request.body()
        try:
            payload = parse_webhook(body)
        except ValidationError as e:
            logger.warning("Rejected malformed webhook body: %d errors", e.error_count())
            return JSONResponse({"status": "invalid"}, status_code=400)

        if payload.object != "page":
            return {"status": "ignored"}

        count = 0
        for event in payload.iter_messages():
            background_tasks.add_task(dispatch_event, handler, event)
            count += 1

        logger.info("Accepted webhook delivery with %d events", count)
        return {"status": "ok"}

    return router
