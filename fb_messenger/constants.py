"""Library-wide constants.

This module centralizes Graph API endpoints, defaults and the documented
Messenger Platform limits so they have a single source of truth.
"""

# =============================================================================
# Facebook Graph API
# =============================================================================

# Base URL of the Graph API (the version segment is appended per client)
FACEBOOK_GRAPH_URL = "https://graph.facebook.com"

# Graph API version used when none is configured
DEFAULT_API_VERSION = "2.6"

# Send API endpoint (messages and sender actions)
MESSAGES_PATH = "/me/messages"

# Messenger Profile API endpoint (get started button, persistent menu)
MESSENGER_PROFILE_PATH = "/me/messenger_profile"

# Query parameter carrying the page access token
ACCESS_TOKEN_PARAM = "access_token"

# =============================================================================
# HTTP Timeout Configuration
# =============================================================================

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# Maximum response body length written to logs (chars)
LOGGED_RESPONSE_BODY_CHARS = 500

# =============================================================================
# Messenger Platform limits
# =============================================================================

# Quick replies per message
MAX_QUICK_REPLIES = 13

# Elements per generic template
MAX_GENERIC_ELEMENTS = 10

# Buttons per button template, generic element or persistent menu
MAX_BUTTONS = 3

# =============================================================================
# Messenger Profile fields
# =============================================================================

PROFILE_FIELD_GET_STARTED = "get_started"
PROFILE_FIELD_PERSISTENT_MENU = "persistent_menu"

# Public profile fields fetched for a PSID (no consent required)
DEFAULT_USER_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "picture.type(large)",
    "locale",
    "timezone",
)
