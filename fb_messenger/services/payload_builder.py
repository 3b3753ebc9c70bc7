"""Pure constructors for Send API and Messenger Profile API requests.

Every function returns one request variant and performs no I/O, so the
resulting payloads can be inspected or serialized without a client.
"""

from collections.abc import Sequence
from typing import Optional

from fb_messenger.constants import PROFILE_FIELD_GET_STARTED, PROFILE_FIELD_PERSISTENT_MENU
from fb_messenger.models.payload_models import (
    AddressedRequest,
    GetStarted,
    MessageRequest,
    PersistentMenu,
    ProfileDeleteRequest,
    ProfileUpdateRequest,
    SenderActionRequest,
)
from fb_messenger.models.send_models import (
    AttachmentType,
    Button,
    ButtonTemplatePayload,
    Element,
    GenericTemplatePayload,
    Message,
    NotificationType,
    QuickReply,
    Recipient,
    SenderAction,
    TemplateAttachment,
    UrlAttachment,
    UrlPayload,
)


def message_request(
    recipient_id: str,
    message: Message,
    notification_type: Optional[NotificationType] = None,
) -> MessageRequest:
    return MessageRequest(
        recipient=Recipient(id=recipient_id),
        message=message,
        notification_type=notification_type,
    )


def sender_action_request(
    recipient_id: str,
    action: SenderAction,
    notification_type: Optional[NotificationType] = None,
) -> SenderActionRequest:
    return SenderActionRequest(
        recipient=Recipient(id=recipient_id),
        sender_action=SenderAction(action),
        notification_type=notification_type,
    )


def readdress(
    request: AddressedRequest,
    recipient_id: str,
    notification_type: Optional[NotificationType] = None,
) -> AddressedRequest:
    """Copy a message or sender-action request with a new recipient and notification type.

    The copy is validated again, so a profile request or a bad notification
    type raises pydantic.ValidationError.
    """
    return type(request).model_validate(
        {
            **request.model_dump(),
            "recipient": {"id": recipient_id},
            "notification_type": notification_type,
        }
    )


def text_message(recipient_id: str, text: str) -> MessageRequest:
    return message_request(recipient_id, Message(text=text))


def quick_replies_message(
    recipient_id: str,
    text: str,
    quick_replies: Sequence[QuickReply],
) -> MessageRequest:
    """Text message followed by up to 13 quick replies, order preserved."""
    return message_request(
        recipient_id,
        Message(text=text, quick_replies=list(quick_replies)),
    )


def attachment_message(
    recipient_id: str,
    attachment: UrlAttachment | TemplateAttachment,
) -> MessageRequest:
    return message_request(recipient_id, Message(attachment=attachment))


def url_attachment(attachment_type: AttachmentType | str, url: str) -> UrlAttachment:
    """Media attachment referenced by URL; templates are not URL attachments."""
    attachment_type = AttachmentType(attachment_type)
    if attachment_type == AttachmentType.TEMPLATE:
        raise ValueError("template attachments cannot be sent by url")
    return UrlAttachment(type=attachment_type.value, payload=UrlPayload(url=url))


def attachment_url_message(
    recipient_id: str,
    attachment_type: AttachmentType | str,
    url: str,
) -> MessageRequest:
    return attachment_message(recipient_id, url_attachment(attachment_type, url))


def generic_message(recipient_id: str, elements: Sequence[Element]) -> MessageRequest:
    """Generic template with up to 10 elements, order preserved."""
    attachment = TemplateAttachment(payload=GenericTemplatePayload(elements=list(elements)))
    return attachment_message(recipient_id, attachment)


def button_message(recipient_id: str, text: str, buttons: Sequence[Button]) -> MessageRequest:
    """Button template: text with up to 3 buttons."""
    attachment = TemplateAttachment(
        payload=ButtonTemplatePayload(text=text, buttons=list(buttons))
    )
    return attachment_message(recipient_id, attachment)


def get_started_request(payload: str) -> ProfileUpdateRequest:
    return ProfileUpdateRequest(get_started=GetStarted(payload=payload))


def persistent_menu_request(menus: Sequence[PersistentMenu]) -> ProfileUpdateRequest:
    return ProfileUpdateRequest(persistent_menu=list(menus))


def delete_profile_fields_request(*fields: str) -> ProfileDeleteRequest:
    return ProfileDeleteRequest(fields=list(fields))


def remove_get_started_request() -> ProfileDeleteRequest:
    return delete_profile_fields_request(PROFILE_FIELD_GET_STARTED)


def remove_persistent_menu_request() -> ProfileDeleteRequest:
    return delete_profile_fields_request(PROFILE_FIELD_PERSISTENT_MENU)
