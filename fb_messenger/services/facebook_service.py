"""Send messages and profile settings through the Facebook Graph API."""

import json
import time
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import httpx
import logfire
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from fb_messenger.config import Settings, get_settings
from fb_messenger.constants import (
    ACCESS_TOKEN_PARAM,
    DEFAULT_API_VERSION,
    DEFAULT_USER_PROFILE_FIELDS,
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_URL,
    LOGGED_RESPONSE_BODY_CHARS,
    MESSAGES_PATH,
    MESSENGER_PROFILE_PATH,
)
from fb_messenger.errors import PayloadEncodingError, TransportError
from fb_messenger.logging_config import redact_tokens, redact_url
from fb_messenger.models.payload_models import AddressedRequest, Payload, PersistentMenu
from fb_messenger.models.send_models import (
    AttachmentType,
    Button,
    Element,
    Message,
    NotificationType,
    QuickReply,
    SenderAction,
    TemplateAttachment,
    UrlAttachment,
)
from fb_messenger.models.user_models import FacebookUserInfo
from fb_messenger.services import payload_builder

JSON_HEADERS = {"Content-Type": "application/json"}


def encode_payload(payload: Payload | BaseModel | Mapping[str, Any]) -> bytes:
    """Serialize a request body to compact JSON, omitting unset optional fields.

    Raises:
        PayloadEncodingError: if the payload cannot be represented as JSON
    """
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(exclude_none=True).encode("utf-8")
        return json.dumps(dict(payload), separators=(",", ":")).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise PayloadEncodingError(
            f"Could not encode {type(payload).__name__} as JSON: {e}",
            details={"payload_type": type(payload).__name__},
        ) from e


class MessengerBot:
    """Facebook Messenger Platform client bound to one page access token.

    Holds only immutable configuration, so one instance can serve concurrent
    coroutines. Every send returns the raw httpx.Response: non-2xx answers are
    logged and handed back unmodified for the caller to inspect.

    Example:
        >>> bot = MessengerBot(access_token="...", api_version="18.0")
        >>> response = await bot.send_text_message("user123", "Hello!")
        >>> response.status_code
        200
    """

    def __init__(
        self,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        *,
        graph_url: str = FACEBOOK_GRAPH_URL,
        timeout_seconds: float = FACEBOOK_API_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize with a page access token.

        Args:
            access_token: Facebook Page access token for API calls
            api_version: Graph API version, e.g. "2.6" or "v18.0"
            graph_url: Graph API base URL without the version segment
            timeout_seconds: Per-request timeout
            client: Optional shared AsyncClient; its lifecycle stays with the caller
        """
        if not access_token:
            raise ValueError("access_token is required")
        self._access_token = access_token
        self._api_version = (api_version or DEFAULT_API_VERSION).lstrip("vV")
        self._graph_url = f"{graph_url.rstrip('/')}/v{self._api_version}"
        self._timeout_seconds = timeout_seconds
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "MessengerBot":
        """Build a client from environment configuration."""
        settings = settings or get_settings()
        if not settings.facebook_page_access_token:
            raise ValueError("FACEBOOK_PAGE_ACCESS_TOKEN is not configured")
        return cls(
            access_token=settings.facebook_page_access_token,
            api_version=settings.facebook_api_version,
            graph_url=settings.facebook_graph_url,
            timeout_seconds=settings.facebook_api_timeout_seconds,
            client=client,
        )

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def api_version(self) -> str:
        return self._api_version

    @property
    def graph_url(self) -> str:
        return self._graph_url

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    # ------------------------------------------------------------------
    # Raw transport
    # ------------------------------------------------------------------

    async def send_raw(
        self,
        sub_path: str,
        method: str,
        payload: Payload | BaseModel | Mapping[str, Any] | None = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """
        Send one request to the Graph API.

        Args:
            sub_path: Endpoint path below the versioned graph URL, e.g. "/me/messages"
            method: HTTP method
            payload: Request body, serialized as JSON
            params: Extra query parameters; the access token is always added

        Returns:
            The raw response, whatever its status code

        Raises:
            PayloadEncodingError: payload could not be serialized
            TransportError: network failure or timeout
        """
        method = method.upper()
        url = f"{self._graph_url}{sub_path}"
        content = encode_payload(payload) if payload is not None else None
        query = {**(params or {}), ACCESS_TOKEN_PARAM: self._access_token}

        start_time = time.time()
        logfire.info(
            "Sending Graph API request",
            method=method,
            path=sub_path,
            params=redact_tokens(query),
            api_version=self._api_version,
            body_size=len(content) if content else 0,
        )

        try:
            response = await self._request(method, url, query, content)
        except httpx.RequestError as e:
            elapsed = time.time() - start_time
            logfire.error(
                "Facebook API request error",
                method=method,
                path=sub_path,
                error=redact_url(str(e), self._access_token),
                error_type=type(e).__name__,
                response_time_ms=elapsed * 1000,
            )
            raise TransportError(
                f"{method} {sub_path} failed: {type(e).__name__}",
                details={"method": method, "path": sub_path},
            ) from e

        elapsed = time.time() - start_time
        if response.is_success:
            logfire.info(
                "Graph API request succeeded",
                method=method,
                path=sub_path,
                status_code=response.status_code,
                response_time_ms=elapsed * 1000,
            )
        else:
            logfire.error(
                "Graph API request failed",
                method=method,
                path=sub_path,
                status_code=response.status_code,
                response_body=response.text[:LOGGED_RESPONSE_BODY_CHARS],
                response_time_ms=elapsed * 1000,
            )
        return response

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str],
        content: Optional[bytes],
    ) -> httpx.Response:
        headers = JSON_HEADERS if content is not None else None
        if self._client is not None:
            return await self._client.request(
                method,
                url,
                params=params,
                content=content,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await client.request(
                method, url, params=params, content=content, headers=headers
            )

    # ------------------------------------------------------------------
    # Send API
    # ------------------------------------------------------------------

    async def send_raw_message(self, payload: Payload | Mapping[str, Any]) -> httpx.Response:
        """POST a prepared payload to /me/messages."""
        return await self.send_raw(MESSAGES_PATH, "POST", payload)

    async def send_recipient(
        self,
        recipient_id: str,
        payload: AddressedRequest,
        notification_type: Optional[NotificationType] = None,
    ) -> httpx.Response:
        """Send a message or sender-action request to another recipient."""
        request = payload_builder.readdress(payload, recipient_id, notification_type)
        return await self.send_raw_message(request)

    async def send_action(
        self,
        recipient_id: str,
        action: SenderAction,
        notification_type: Optional[NotificationType] = None,
    ) -> httpx.Response:
        """Send a typing indicator or read receipt."""
        request = payload_builder.sender_action_request(recipient_id, action, notification_type)
        return await self.send_raw_message(request)

    async def mark_seen(self, recipient_id: str) -> httpx.Response:
        return await self.send_action(recipient_id, SenderAction.MARK_SEEN)

    async def typing_on(self, recipient_id: str) -> httpx.Response:
        return await self.send_action(recipient_id, SenderAction.TYPING_ON)

    async def typing_off(self, recipient_id: str) -> httpx.Response:
        return await self.send_action(recipient_id, SenderAction.TYPING_OFF)

    async def send_message(
        self,
        recipient_id: str,
        message: Message,
        notification_type: Optional[NotificationType] = None,
    ) -> httpx.Response:
        request = payload_builder.message_request(recipient_id, message, notification_type)
        return await self.send_raw_message(request)

    async def send_text_message(self, recipient_id: str, text: str) -> httpx.Response:
        return await self.send_raw_message(payload_builder.text_message(recipient_id, text))

    async def send_quick_replies(
        self,
        recipient_id: str,
        text: str,
        quick_replies: Sequence[QuickReply],
    ) -> httpx.Response:
        request = payload_builder.quick_replies_message(recipient_id, text, quick_replies)
        return await self.send_raw_message(request)

    async def send_attachment_message(
        self,
        recipient_id: str,
        attachment: UrlAttachment | TemplateAttachment,
    ) -> httpx.Response:
        request = payload_builder.attachment_message(recipient_id, attachment)
        return await self.send_raw_message(request)

    async def send_attachment_url(
        self,
        recipient_id: str,
        attachment_type: AttachmentType | str,
        url: str,
    ) -> httpx.Response:
        request = payload_builder.attachment_url_message(recipient_id, attachment_type, url)
        return await self.send_raw_message(request)

    async def send_image_url(self, recipient_id: str, image_url: str) -> httpx.Response:
        return await self.send_attachment_url(recipient_id, AttachmentType.IMAGE, image_url)

    async def send_audio_url(self, recipient_id: str, audio_url: str) -> httpx.Response:
        return await self.send_attachment_url(recipient_id, AttachmentType.AUDIO, audio_url)

    async def send_video_url(self, recipient_id: str, video_url: str) -> httpx.Response:
        return await self.send_attachment_url(recipient_id, AttachmentType.VIDEO, video_url)

    async def send_file_url(self, recipient_id: str, file_url: str) -> httpx.Response:
        return await self.send_attachment_url(recipient_id, AttachmentType.FILE, file_url)

    async def send_generic_message(
        self,
        recipient_id: str,
        elements: Sequence[Element],
    ) -> httpx.Response:
        """Send a generic template (carousel) of up to 10 elements."""
        request = payload_builder.generic_message(recipient_id, elements)
        return await self.send_raw_message(request)

    async def send_button_message(
        self,
        recipient_id: str,
        text: str,
        buttons: Sequence[Button],
    ) -> httpx.Response:
        """Send a button template: text with up to 3 buttons."""
        request = payload_builder.button_message(recipient_id, text, buttons)
        return await self.send_raw_message(request)

    # ------------------------------------------------------------------
    # Messenger Profile API
    # ------------------------------------------------------------------

    async def set_get_started(self, payload: str) -> httpx.Response:
        """Show a get started button on the welcome screen; taps send `payload` as a postback."""
        request = payload_builder.get_started_request(payload)
        return await self.send_raw(MESSENGER_PROFILE_PATH, "POST", request)

    async def remove_get_started(self) -> httpx.Response:
        request = payload_builder.remove_get_started_request()
        return await self.send_raw(MESSENGER_PROFILE_PATH, "DELETE", request)

    async def set_persistent_menu(self, menus: Sequence[PersistentMenu]) -> httpx.Response:
        """Set the persistent menu. The page needs a get started button first."""
        request = payload_builder.persistent_menu_request(menus)
        return await self.send_raw(MESSENGER_PROFILE_PATH, "POST", request)

    async def remove_persistent_menu(self) -> httpx.Response:
        request = payload_builder.remove_persistent_menu_request()
        return await self.send_raw(MESSENGER_PROFILE_PATH, "DELETE", request)

    # ------------------------------------------------------------------
    # User Profile API
    # ------------------------------------------------------------------

    async def get_user_profile(
        self,
        user_id: str,
        fields: Sequence[str] = DEFAULT_USER_PROFILE_FIELDS,
    ) -> FacebookUserInfo | None:
        """
        Get basic user info for a PSID (no consent required).

        Returns:
            FacebookUserInfo, or None when the call fails or the body is not JSON
        """
        try:
            response = await self.send_raw(
                f"/{user_id}", "GET", params={"fields": ",".join(fields)}
            )
        except TransportError:
            return None

        if response.status_code != 200:
            return None

        try:
            data = response.json()
        except ValueError as e:
            logfire.error(
                "Invalid user info response",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if not isinstance(data, dict):
            return None

        user_info = FacebookUserInfo.from_graph(data, user_id)
        logfire.info(
            "User info fetched successfully",
            user_id=user_id,
            has_name=bool(user_info.first_name),
            locale=user_info.locale,
        )
        return user_info
