import base64
import json
from unittest.mock import MagicMock

import pytest

from springout.app.message_router import MessageRouter
from springout.domain import models
from springout.presentation.pubsub_codec import MessageDecodeError, decode_message, encode_message


def _b64(payload) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


EVENT_CALLBACK = {
    "type": "event_callback",
    "team_id": "T1",
    "api_app_id": "A1",
    "event": {"type": "app_home_opened", "user": "U1", "tab": "home"},
    "event_id": "Ev1",
    "event_time": 1700000000,
}


def test_route_decodes_event_callback_and_dispatches():
    dispatcher = MagicMock()
    router = MessageRouter(dispatcher)

    router.route(_b64({"callback": EVENT_CALLBACK}), {"type": models.HANDLE_SLACK_EVENT_CALLBACK})

    message, message_type = dispatcher.dispatch.call_args.args
    assert message_type == models.HANDLE_SLACK_EVENT_CALLBACK
    assert isinstance(message, models.HandleSlackEventCallback)
    assert message.callback.team_id == "T1"
    assert message.callback.event.type == "app_home_opened"
    assert message.callback.event.user == "U1"


def test_route_decodes_run_interaction():
    dispatcher = MagicMock()
    router = MessageRouter(dispatcher)
    payload = {"teamId": "T1", "userId": "U1", "action": "offer_help", "category": "cooking"}

    router.route(_b64(payload), {"type": models.RUN_SLACK_INTERACTION})

    message, _ = dispatcher.dispatch.call_args.args
    assert message == models.RunSlackInteraction(team_id="T1", user_id="U1", action="offer_help", category="cooking")


def test_unknown_type_is_passed_through_as_is():
    dispatcher = MagicMock()
    router = MessageRouter(dispatcher)

    router.route(_b64({"anything": 1}), {"type": "SomethingElse"})

    dispatcher.dispatch.assert_called_once_with({"anything": 1}, "SomethingElse")


def test_missing_type_is_passed_through_as_none():
    dispatcher = MagicMock()
    router = MessageRouter(dispatcher)

    router.route(_b64([1, 2]), None)

    dispatcher.dispatch.assert_called_once_with([1, 2], None)


@pytest.mark.parametrize(
    "data, attributes",
    [
        ("not base64!!", {"type": models.RUN_SLACK_INTERACTION}),
        (base64.b64encode(b"{broken").decode(), {"type": "whatever"}),
        ("", {"type": models.RUN_SLACK_INTERACTION}),
        (_b64({"teamId": "T1"}), {"type": models.RUN_SLACK_INTERACTION}),
        (_b64({"callback": "nope"}), {"type": models.HANDLE_SLACK_EVENT_CALLBACK}),
        (_b64({"other": 1}), {"type": models.HANDLE_SLACK_EVENT_CALLBACK}),
    ],
)
def test_decode_errors_propagate_without_dispatch(data, attributes):
    dispatcher = MagicMock()
    router = MessageRouter(dispatcher)

    with pytest.raises(MessageDecodeError):
        router.route(data, attributes)

    dispatcher.dispatch.assert_not_called()


def test_encoded_run_interaction_uses_wire_keys():
    run = models.RunSlackInteraction(team_id="T1", user_id="U1", action="ask_for_help", category="gardening")

    body = json.loads(encode_message(run))

    assert body["teamId"] == "T1"
    assert body["category"] == "gardening"
    decoded, _ = decode_message(base64.b64encode(encode_message(run)).decode(), {"type": models.RUN_SLACK_INTERACTION})
    assert decoded == run


def test_callback_without_event_is_decoded():
    dispatcher = MagicMock()
    router = MessageRouter(dispatcher)
    body = {"type": "app_rate_limited", "team_id": "T1", "minute_rate_limited": 1518467820, "api_app_id": "A1"}

    router.route(_b64({"callback": body}), {"type": models.HANDLE_SLACK_EVENT_CALLBACK})

    message, _ = dispatcher.dispatch.call_args.args
    assert message.callback.type == "app_rate_limited"
    assert message.callback.team_id == "T1"
    assert message.callback.event is None
    assert message.callback.raw == body
