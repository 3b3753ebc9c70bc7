"""Request envelopes for the Send API and the Messenger Profile API.

Each intent has its own model, so a sender action can never travel with a
message and profile settings can never be addressed to a recipient.
"""

from typing import Annotated, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fb_messenger.models.send_models import (
    Button,
    Message,
    NotificationType,
    Recipient,
    SenderAction,
)


class GetStarted(BaseModel):
    """Get started button shown on the welcome screen."""

    payload: str = Field(..., min_length=1, description="Postback payload sent on tap")


class PersistentMenu(BaseModel):
    """Persistent menu for one locale."""

    locale: str = "default"
    composer_input_disabled: bool = False
    call_to_actions: list[Button] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_actions(self) -> "PersistentMenu":
        if not self.composer_input_disabled and not self.call_to_actions:
            raise ValueError("a menu with the composer enabled needs call_to_actions")
        return self


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class MessageRequest(_Request):
    """POST /me/messages carrying a message."""

    recipient: Recipient
    message: Message
    notification_type: Optional[NotificationType] = None


class SenderActionRequest(_Request):
    """POST /me/messages carrying a typing or seen indicator."""

    recipient: Recipient
    sender_action: SenderAction
    notification_type: Optional[NotificationType] = None


class ProfileUpdateRequest(_Request):
    """POST /me/messenger_profile."""

    get_started: Optional[GetStarted] = None
    persistent_menu: Optional[Annotated[list[PersistentMenu], Field(min_length=1)]] = None

    @model_validator(mode="after")
    def _check_not_empty(self) -> "ProfileUpdateRequest":
        if self.get_started is None and self.persistent_menu is None:
            raise ValueError("a profile update needs get_started or persistent_menu")
        return self


class ProfileDeleteRequest(_Request):
    """DELETE /me/messenger_profile."""

    fields: list[str] = Field(..., min_length=1)


Payload = Union[MessageRequest, SenderActionRequest, ProfileUpdateRequest, ProfileDeleteRequest]

AddressedRequest = Union[MessageRequest, SenderActionRequest]
