from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

# === Bus messages ===
HANDLE_SLACK_EVENT_CALLBACK = "HandleSlackEventCallback"
RUN_SLACK_INTERACTION = "RunSlackInteraction"

MESSAGE_TYPES = (HANDLE_SLACK_EVENT_CALLBACK, RUN_SLACK_INTERACTION)

# サービスごとの Pub/Sub トピック名
SLACK_SERVICE = "slack"

HELP_CATEGORIES = ("cooking", "gardening", "cleaning")
OFFER_HELP = "offer_help"
ASK_FOR_HELP = "ask_for_help"
HELP_ACTIONS = (OFFER_HELP, ASK_FOR_HELP)


@dataclass(frozen=True)
class SlackEvent:
    type: str
    user: Optional[str] = None
    channel: Optional[str] = None
    tab: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SlackEventCallbackBody:
    type: str
    # app_rate_limited など event を持たないコールバックもある
    team_id: Optional[str] = None
    event: Optional[SlackEvent] = None
    api_app_id: Optional[str] = None
    event_id: Optional[str] = None
    event_time: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class HandleSlackEventCallback:
    callback: SlackEventCallbackBody


@dataclass(frozen=True)
class RunSlackInteraction:
    team_id: str
    user_id: str
    action: str  # offer_help | ask_for_help
    category: str
    user_name: str = ""
    channel_id: Optional[str] = None


SpringOutMessage = Union[HandleSlackEventCallback, RunSlackInteraction]


# === Storage / image index ===
@dataclass(frozen=True)
class StorageObject:
    name: Optional[str] = None
    bucket: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class StorageObjectRef:
    category_id: str
    file_name: str


# === Slack installation / users ===
@dataclass(frozen=True)
class SlackInstallation:
    team_id: str
    team_name: str
    bot_user_id: str
    access_token: str
    scope: str
    installed_at: Optional[datetime] = None


@dataclass(frozen=True)
class SlackUserLink:
    uid: str
    team_id: str
    slack_user_id: str
