"""Tests for parsing webhook deliveries into typed events."""

import json

import pytest
from pydantic import ValidationError

from fb_messenger.models.webhook_models import (
    AccountLinkingStatus,
    DeliveryEvent,
    EntryMessage,
    MessageEvent,
    PolicyEnforcementAction,
    PostbackEvent,
    ReactionAction,
    ReadEvent,
    ReferralSource,
    WebhookEvent,
    parse_webhook,
)


def event(**fields) -> dict:
    return {"sender": {"id": "user-1"}, "recipient": {"id": "page-1"}, "timestamp": 1, **fields}


class TestParseWebhook:
    """Test parse_webhook() on whole delivery bodies."""

    def test_postback_and_message(self, postback_and_message_body):
        """Two events keep their order and carry only their own kind."""
        parsed = parse_webhook(postback_and_message_body)
        messages = list(parsed.iter_messages())

        assert len(messages) == 2
        first, second = messages

        assert first.kind == "postback"
        assert isinstance(first.event, PostbackEvent)
        assert first.payload.payload == "GET_STARTED"
        assert not hasattr(first.event, "message")

        assert second.kind == "message"
        assert isinstance(second.event, MessageEvent)
        assert second.payload.text == "hello"
        assert not hasattr(second.event, "postback")

    @pytest.mark.parametrize("encode", [json.dumps, lambda b: json.dumps(b).encode()])
    def test_accepts_raw_bodies(self, postback_and_message_body, encode):
        parsed = parse_webhook(encode(postback_and_message_body))

        assert parsed.object == "page"
        assert parsed.entry[0].id == "page-123"

    def test_standby_events_follow_messaging(self):
        body = {
            "object": "page",
            "entry": [
                {
                    "id": "p",
                    "time": 1,
                    "messaging": [event(message={"mid": "a", "text": "one"})],
                    "standby": [event(message={"mid": "b", "text": "two"})],
                },
                {"id": "p", "time": 2, "standby": [event(read={"watermark": 5})]},
            ],
        }

        kinds = [m.kind for m in parse_webhook(body).iter_messages()]

        assert kinds == ["message", "message", "read"]

    def test_entry_without_events(self):
        parsed = parse_webhook({"object": "page", "entry": [{"id": "p", "time": 1}]})

        assert parsed.entry[0].messaging == []
        assert parsed.entry[0].standby == []
        assert list(parsed.iter_messages()) == []

    def test_unknown_fields_are_ignored(self):
        parsed = parse_webhook(
            {
                "object": "page",
                "brand_new": True,
                "entry": [
                    {
                        "id": "p",
                        "time": 1,
                        "messaging": [event(message={"text": "hi", "nlp": {"x": 1}})],
                    }
                ],
            }
        )

        assert parsed.entry[0].messaging[0].payload.text == "hi"

    def test_type_mismatch_fails(self):
        with pytest.raises(ValidationError):
            parse_webhook({"object": "page", "entry": [{"id": "p", "time": "yesterday"}]})

    def test_malformed_json_fails(self):
        with pytest.raises(ValidationError):
            parse_webhook(b"{not json")

    def test_events_without_known_kind_are_skipped(self):
        parsed = parse_webhook(
            {
                "object": "page",
                "entry": [
                    {
                        "id": "p",
                        "time": 1,
                        "messaging": [
                            event(message={"text": "hi"}),
                            {"recipient": {"id": "page-1"}, "app_roles": {"123": ["primary_receiver"]}},
                        ],
                        "standby": [event()],
                    }
                ],
            }
        )

        assert [m.kind for m in parsed.iter_messages()] == ["message"]

    def test_sender_less_policy_enforcement_alongside_message(self):
        parsed = parse_webhook(
            {
                "object": "page",
                "entry": [
                    {
                        "id": "p",
                        "time": 1,
                        "messaging": [
                            event(message={"text": "hi"}),
                            {
                                "recipient": {"id": "page-1"},
                                "timestamp": 2,
                                "policy_enforcement": {"action": "warning", "reason": "spam"},
                            },
                        ],
                    }
                ],
            }
        )

        kinds = [m.kind for m in parsed.iter_messages()]
        assert kinds == ["message", "policy_enforcement"]
        assert parsed.entry[0].messaging[1].sender is None

    def test_event_with_several_kinds_still_fails(self):
        with pytest.raises(ValidationError):
            parse_webhook(
                {
                    "object": "page",
                    "entry": [
                        {
                            "id": "p",
                            "time": 1,
                            "messaging": [event(message={"text": "hi"}, read={"watermark": 1})],
                        }
                    ],
                }
            )


class TestEventKinds:
    """Every event kind is recognised from its wire key."""

    @pytest.mark.parametrize(
        "key, body, kind",
        [
            ("message", {"mid": "m1", "text": "hi"}, "message"),
            ("postback", {"title": "T", "payload": "P"}, "postback"),
            ("reaction", {"reaction": "love", "emoji": "❤", "action": "react", "mid": "m1"}, "reaction"),
            ("delivery", {"mids": ["m1"], "watermark": 10}, "delivery"),
            ("message_delivery", {"mids": ["m1"], "watermark": 10}, "delivery"),
            ("read", {"watermark": 10}, "read"),
            ("message_read", {"watermark": 10}, "read"),
            ("referral", {"source": "SHORTLINK", "type": "OPEN_THREAD", "ref": "promo"}, "referral"),
            ("pass_thread_control", {"new_owner_app_id": "123", "metadata": "m"}, "pass_thread_control"),
            ("take_thread_control", {"previous_owner_app_id": "123"}, "take_thread_control"),
            ("request_thread_control", {"requested_owner_app_id": 123}, "request_thread_control"),
            ("policy_enforcement", {"action": "block", "reason": "spam"}, "policy_enforcement"),
            ("account_linking", {"status": "linked", "authorization_code": "code"}, "account_linking"),
            ("game_play", {"game_id": "g", "player_id": "p", "context_type": "SOLO", "score": 3}, "game_play"),
            ("optin", {"ref": "r", "user_ref": "u"}, "optin"),
        ],
    )
    def test_kind_inferred_from_key(self, key, body, kind):
        message = EntryMessage.model_validate(event(**{key: body}))

        assert message.kind == kind
        assert message.payload is getattr(message.event, kind)

    @pytest.mark.parametrize(
        "key, kind",
        [
            ("message", "message"),
            ("postback", "postback"),
            ("reaction", "reaction"),
            ("delivery", "delivery"),
            ("read", "read"),
            ("referral", "referral"),
            ("pass_thread_control", "pass_thread_control"),
            ("take_thread_control", "take_thread_control"),
            ("request_thread_control", "request_thread_control"),
            ("account_linking", "account_linking"),
            ("game_play", "game_play"),
            ("optin", "optin"),
        ],
    )
    def test_minimal_bodies_parse(self, key, kind):
        """Bodies missing every optional field still parse."""
        message = EntryMessage.model_validate(event(**{key: {}}))

        assert message.kind == kind

    def test_policy_enforcement_requires_action(self):
        with pytest.raises(ValidationError):
            EntryMessage.model_validate(event(policy_enforcement={"reason": "spam"}))

    def test_legacy_delivery_key(self):
        message = EntryMessage.model_validate(event(message_delivery={"mids": ["a", "b"], "watermark": 7}))

        assert isinstance(message.event, DeliveryEvent)
        assert message.payload.mids == ["a", "b"]

    def test_read_watermark(self):
        message = EntryMessage.model_validate(event(read={"watermark": 42}))

        assert isinstance(message.event, ReadEvent)
        assert message.payload.watermark == 42

    def test_enum_fields(self):
        reaction = EntryMessage.model_validate(
            event(reaction={"action": "unreact", "mid": "m1"})
        )
        policy = EntryMessage.model_validate(event(policy_enforcement={"action": "unblock"}))
        linking = EntryMessage.model_validate(event(account_linking={"status": "unlinked"}))
        referral = EntryMessage.model_validate(
            event(referral={"source": "ADS", "type": "OPEN_THREAD", "ad_id": "ad-1"})
        )

        assert reaction.payload.action is ReactionAction.UNREACT
        assert policy.payload.action is PolicyEnforcementAction.UNBLOCK
        assert policy.payload.reason is None
        assert linking.payload.status is AccountLinkingStatus.UNLINKED
        assert referral.payload.source is ReferralSource.ADS

    def test_message_echo_and_attachments(self):
        message = EntryMessage.model_validate(
            event(
                message={
                    "mid": "m1",
                    "is_echo": True,
                    "app_id": 1517776481860111,
                    "metadata": "from-bot",
                    "attachments": [
                        {"type": "image", "payload": {"url": "https://cdn.example/a.png"}},
                        {
                            "type": "location",
                            "payload": {"coordinates": {"lat": 52.5, "long": 13.4}},
                        },
                    ],
                    "quick_reply": {"payload": "PICK_RED"},
                    "reply_to": {"mid": "m0"},
                }
            )
        )

        assert message.is_echo
        body = message.payload
        assert body.attachments[0].payload.url == "https://cdn.example/a.png"
        assert body.attachments[1].payload.coordinates.lat == 52.5
        assert body.quick_reply.payload == "PICK_RED"
        assert body.reply_to.mid == "m0"

    def test_postback_with_referral(self):
        message = EntryMessage.model_validate(
            event(
                postback={
                    "payload": "GET_STARTED",
                    "referral": {"source": "MESSENGER_CODE", "type": "OPEN_THREAD", "ref": "qr"},
                }
            )
        )

        assert message.payload.referral.ref == "qr"


class TestEventInvariants:
    """Exactly one event kind per messaging event."""

    def test_no_kind_fails(self):
        with pytest.raises(ValidationError):
            EntryMessage.model_validate(event())

    def test_two_kinds_fail(self):
        with pytest.raises(ValidationError):
            EntryMessage.model_validate(
                event(message={"text": "hi"}, postback={"payload": "P"})
            )

    def test_null_kinds_are_absent(self):
        message = EntryMessage.model_validate(event(message={"text": "hi"}, postback=None))

        assert message.kind == "message"

    def test_missing_sender_tolerated(self):
        message = EntryMessage.model_validate(
            {"recipient": {"id": "p"}, "policy_enforcement": {"action": "block", "reason": "spam"}}
        )

        assert message.sender is None
        assert message.kind == "policy_enforcement"

    def test_missing_recipient_fails(self):
        with pytest.raises(ValidationError):
            EntryMessage.model_validate({"sender": {"id": "u"}, "message": {"text": "hi"}})

    def test_model_round_trip(self, postback_and_message_body):
        """Dumped events validate back into the same structure."""
        parsed = parse_webhook(postback_and_message_body)

        again = WebhookEvent.model_validate(parsed.model_dump())

        assert again == parsed
