from __future__ import annotations

import base64
import binascii
import json
from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..domain import models


class MessageDecodeError(ValueError):
    pass


def encode_message(message: Any) -> bytes:
    if isinstance(message, models.HandleSlackEventCallback):
        body: Any = {"callback": message.callback.raw}
    elif isinstance(message, models.RunSlackInteraction):
        run = asdict(message)
        body = {
            "teamId": run["team_id"],
            "userId": run["user_id"],
            "action": run["action"],
            "category": run["category"],
            "userName": run["user_name"],
            "channelId": run["channel_id"],
        }
    else:
        body = message
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


def decode_message(data: Optional[str], attributes: Optional[Mapping[str, str]]) -> Tuple[Any, Optional[str]]:
    """Pub/Sub の配信内容を (message, type) に戻す。既知の type は形を検証する。"""

    message_type = (attributes or {}).get("type")
    payload = _load_json(data)
    decoder = _DECODERS.get(message_type or "")
    if decoder is None:
        return payload, message_type
    return decoder(payload), message_type


def parse_event_callback(body: Mapping[str, Any]) -> models.SlackEventCallbackBody:
    if not isinstance(body, Mapping):
        raise MessageDecodeError("event callback body must be an object")
    team_id = body.get("team_id")
    return models.SlackEventCallbackBody(
        type=str(body.get("type", "")),
        team_id=team_id if isinstance(team_id, str) and team_id else None,
        event=_parse_event(body.get("event")),
        api_app_id=body.get("api_app_id"),
        event_id=body.get("event_id"),
        event_time=body.get("event_time"),
        raw=dict(body),
    )


def _parse_event(event: Any) -> Optional[models.SlackEvent]:
    if not isinstance(event, Mapping) or not isinstance(event.get("type"), str):
        return None
    return models.SlackEvent(
        type=event["type"],
        user=event.get("user"),
        channel=event.get("channel"),
        tab=event.get("tab"),
        raw=dict(event),
    )


def _load_json(data: Optional[str]) -> Any:
    if not data:
        raise MessageDecodeError("empty message body")
    try:
        raw = base64.b64decode(data, validate=True)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MessageDecodeError("Invalid message body") from exc


def _decode_handle_event_callback(payload: Any) -> models.HandleSlackEventCallback:
    if not isinstance(payload, Mapping) or "callback" not in payload:
        raise MessageDecodeError("HandleSlackEventCallback requires callback")
    return models.HandleSlackEventCallback(callback=parse_event_callback(payload["callback"]))


def _decode_run_interaction(payload: Any) -> models.RunSlackInteraction:
    if not isinstance(payload, Mapping):
        raise MessageDecodeError("RunSlackInteraction must be an object")
    missing = [key for key in ("teamId", "userId", "action", "category") if not payload.get(key)]
    if missing:
        raise MessageDecodeError(f"RunSlackInteraction is missing {', '.join(missing)}")
    return models.RunSlackInteraction(
        team_id=payload["teamId"],
        user_id=payload["userId"],
        action=payload["action"],
        category=payload["category"],
        user_name=payload.get("userName") or "",
        channel_id=payload.get("channelId"),
    )


_DECODERS: Dict[str, Callable[[Any], Any]] = {
    models.HANDLE_SLACK_EVENT_CALLBACK: _decode_handle_event_callback,
    models.RUN_SLACK_INTERACTION: _decode_run_interaction,
}
