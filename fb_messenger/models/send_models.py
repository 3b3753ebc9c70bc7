"""Outgoing Facebook Messenger Send API models."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from fb_messenger.constants import MAX_BUTTONS, MAX_GENERIC_ELEMENTS, MAX_QUICK_REPLIES


class NotificationType(str, Enum):
    REGULAR = "REGULAR"
    SILENT_PUSH = "SILENT_PUSH"
    NO_PUSH = "NO_PUSH"


class SenderAction(str, Enum):
    MARK_SEEN = "mark_seen"
    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"


class AttachmentType(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"
    FILE = "file"
    TEMPLATE = "template"


class TemplateType(str, Enum):
    GENERIC = "generic"
    BUTTON = "button"
    RECEIPT = "receipt"
    AIRLINE = "airline_boardingpass"
    MEDIA = "media"


class QuickReplyType(str, Enum):
    TEXT = "text"
    USER_PHONE_NUMBER = "user_phone_number"
    USER_EMAIL = "user_email"


class ButtonType(str, Enum):
    POSTBACK = "postback"
    WEB_URL = "web_url"
    PHONE_NUMBER = "phone_number"


class WebviewHeightRatio(str, Enum):
    COMPACT = "compact"
    TALL = "tall"
    FULL = "full"


class Recipient(BaseModel):
    """Message recipient (page-scoped user id)."""

    id: str = Field(..., min_length=1, description="Facebook user ID (PSID)")


class Button(BaseModel):
    """Button used by templates and persistent menus.

    postback and phone_number buttons carry `payload`, web_url buttons carry `url`.
    """

    type: ButtonType
    title: str = Field(..., min_length=1)
    payload: Optional[str] = None
    url: Optional[str] = None
    webview_height_ratio: Optional[WebviewHeightRatio] = None

    @model_validator(mode="after")
    def _check_action_field(self) -> "Button":
        if self.type == ButtonType.WEB_URL:
            if not self.url:
                raise ValueError("web_url buttons require a url")
            if self.payload is not None:
                raise ValueError("web_url buttons cannot carry a payload")
        else:
            if not self.payload:
                raise ValueError(f"{self.type.value} buttons require a payload")
            if self.url is not None or self.webview_height_ratio is not None:
                raise ValueError(f"{self.type.value} buttons cannot carry a url")
        return self

    @classmethod
    def postback(cls, title: str, payload: str) -> "Button":
        return cls(type=ButtonType.POSTBACK, title=title, payload=payload)

    @classmethod
    def web_url(
        cls,
        title: str,
        url: str,
        webview_height_ratio: Optional[WebviewHeightRatio] = None,
    ) -> "Button":
        return cls(
            type=ButtonType.WEB_URL,
            title=title,
            url=url,
            webview_height_ratio=webview_height_ratio,
        )

    @classmethod
    def phone_number(cls, title: str, phone_number: str) -> "Button":
        return cls(type=ButtonType.PHONE_NUMBER, title=title, payload=phone_number)


class DefaultAction(BaseModel):
    """Action run when a generic template element is tapped."""

    type: Literal["web_url"] = "web_url"
    url: str
    webview_height_ratio: Optional[WebviewHeightRatio] = None


class QuickReply(BaseModel):
    """Quick reply chip shown above the composer."""

    content_type: QuickReplyType = QuickReplyType.TEXT
    title: Optional[str] = None
    payload: Optional[str] = None
    image_url: Optional[str] = None

    @model_validator(mode="after")
    def _check_text_fields(self) -> "QuickReply":
        if self.content_type == QuickReplyType.TEXT and not (self.title and self.payload):
            raise ValueError("text quick replies require a title and a payload")
        return self

    @classmethod
    def text(cls, title: str, payload: str, image_url: Optional[str] = None) -> "QuickReply":
        return cls(content_type=QuickReplyType.TEXT, title=title, payload=payload, image_url=image_url)

    @classmethod
    def user_email(cls) -> "QuickReply":
        return cls(content_type=QuickReplyType.USER_EMAIL)

    @classmethod
    def user_phone_number(cls) -> "QuickReply":
        return cls(content_type=QuickReplyType.USER_PHONE_NUMBER)


class Element(BaseModel):
    """Generic template element."""

    title: str = Field(..., min_length=1)
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    default_action: Optional[DefaultAction] = None
    buttons: Optional[Annotated[list[Button], Field(max_length=MAX_BUTTONS)]] = None


class UrlPayload(BaseModel):
    url: str = Field(..., min_length=1)
    is_reusable: Optional[bool] = None


class GenericTemplatePayload(BaseModel):
    template_type: Literal["generic"] = "generic"
    elements: list[Element] = Field(..., min_length=1, max_length=MAX_GENERIC_ELEMENTS)


class ButtonTemplatePayload(BaseModel):
    template_type: Literal["button"] = "button"
    text: str = Field(..., min_length=1)
    buttons: list[Button] = Field(..., min_length=1, max_length=MAX_BUTTONS)


TemplatePayload = Annotated[
    Union[GenericTemplatePayload, ButtonTemplatePayload],
    Field(discriminator="template_type"),
]


class UrlAttachment(BaseModel):
    """Media attachment sent by URL."""

    type: Literal["image", "audio", "video", "file"]
    payload: UrlPayload


class TemplateAttachment(BaseModel):
    """Structured template attachment."""

    type: Literal["template"] = "template"
    payload: TemplatePayload


Attachment = Annotated[
    Union[UrlAttachment, TemplateAttachment],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """Outgoing message: text or a single attachment, plus optional quick replies."""

    text: Optional[Annotated[str, Field(min_length=1)]] = None
    attachment: Optional[Attachment] = None
    quick_replies: Optional[
        Annotated[list[QuickReply], Field(min_length=1, max_length=MAX_QUICK_REPLIES)]
    ] = None

    @model_validator(mode="after")
    def _check_content(self) -> "Message":
        if self.text is None and self.attachment is None:
            raise ValueError("a message needs text or an attachment")
        if self.text is not None and self.attachment is not None:
            raise ValueError("text and attachment are mutually exclusive")
        return self
