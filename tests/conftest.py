"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Clients: bot, respx_mock
2. Webhook bodies: postback_and_message_body
3. Infrastructure: mock_settings, clear_settings_cache, logfire_capture
"""

import os
from unittest.mock import patch

import pytest

# Logfire logs are emitted without configure() during tests
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import logfire  # noqa: E402
import respx  # noqa: E402

from fb_messenger.config import Settings, get_settings  # noqa: E402
from fb_messenger.services.facebook_service import MessengerBot  # noqa: E402


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock:
        yield respx


@pytest.fixture
def bot():
    """Client with the default API version and a recognisable token."""
    return MessengerBot(access_token="test-page-token")


@pytest.fixture
def clear_settings_cache():
    """Drop cached settings so env changes made by a test are visible."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_settings():
    """Settings with explicit values, independent of the environment."""
    return Settings(
        facebook_page_access_token="settings-token",
        facebook_verify_token="verify-token-123",
        facebook_api_version="v18.0",
        facebook_graph_url="https://graph.example.test",
        facebook_api_timeout_seconds=5.0,
    )


@pytest.fixture
def postback_and_message_body():
    """Webhook body with one postback event and one message event."""
    return {
        "object": "page",
        "entry": [
            {
                "id": "page-123",
                "time": 1700000000000,
                "messaging": [
                    {
                        "sender": {"id": "user-1"},
                        "recipient": {"id": "page-123"},
                        "timestamp": 1700000000001,
                        "postback": {
                            "mid": "m_postback",
                            "title": "Get Started",
                            "payload": "GET_STARTED",
                        },
                    },
                    {
                        "sender": {"id": "user-2"},
                        "recipient": {"id": "page-123"},
                        "timestamp": 1700000000002,
                        "message": {"mid": "m_message", "text": "hello"},
                    },
                ],
            }
        ],
    }


@pytest.fixture
def logfire_capture():
    """
    Capture Logfire logs for testing.

    This fixture patches Logfire to capture log calls for assertion.
    """
    captured_logs = []

    original_info = logfire.info
    original_error = logfire.error

    def capture_info(*args, **kwargs):
        captured_logs.append(("info", args, kwargs))
        return original_info(*args, **kwargs)

    def capture_error(*args, **kwargs):
        captured_logs.append(("error", args, kwargs))
        return original_error(*args, **kwargs)

    with (
        patch("fb_messenger.services.facebook_service.logfire.info", side_effect=capture_info),
        patch("fb_messenger.services.facebook_service.logfire.error", side_effect=capture_error),
    ):
        yield captured_logs
