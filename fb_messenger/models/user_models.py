"""Pydantic models for Graph API user profiles (no consent required)."""

from typing import Any, Optional

from pydantic import BaseModel


class FacebookUserInfo(BaseModel):
    """User info from Facebook Graph API (public profile fields only)."""

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_pic: Optional[str] = None
    locale: Optional[str] = None
    timezone: Optional[float] = None

    @classmethod
    def from_graph(cls, data: dict[str, Any], user_id: str) -> "FacebookUserInfo":
        """Build from a Graph API user response, flattening the picture field."""
        return cls(
            id=data.get("id", user_id),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            profile_pic=_parse_profile_pic(data),
            locale=data.get("locale"),
            timezone=data.get("timezone"),
        )


def _parse_profile_pic(data: dict[str, Any]) -> str | None:
    """Extract profile picture URL from Graph API picture response."""
    # legacy profile_pic field
    if isinstance(data.get("profile_pic"), str):
        return data["profile_pic"]
    pic = data.get("picture")
    if not isinstance(pic, dict):
        return None
    inner = pic.get("data")
    if not isinstance(inner, dict):
        return None
    url = inner.get("url")
    return str(url) if isinstance(url, str) else None
