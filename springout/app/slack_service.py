from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..domain import models
from ..domain.ports import (
    InstallationRepositoryPort,
    SlackPort,
    SlackUserRepositoryPort,
    UserDirectoryPort,
)
from ..domain.services.image_index_service import ImageIndexService
from ..presentation.slack_views import build_confirmation_text, build_home_view

logger = logging.getLogger(__name__)

UNINSTALL_EVENTS = ("app_uninstalled", "tokens_revoked")


class InstallationNotFoundError(RuntimeError):
    pass


def slack_uid(team_id: str, user_id: str) -> str:
    return f"slack:{team_id}:{user_id}"


class SlackService:
    """Slack 関連メッセージのハンドラ。Dispatcher に登録して使う。"""

    def __init__(
        self,
        slack: SlackPort,
        installations: InstallationRepositoryPort,
        slack_users: SlackUserRepositoryPort,
        users: UserDirectoryPort,
        image_index: ImageIndexService,
        site_url: str,
    ) -> None:
        self._slack = slack
        self._installations = installations
        self._slack_users = slack_users
        self._users = users
        self._image_index = image_index
        self._site_url = site_url.rstrip("/")

    def handle(self, message: Any, message_type: Optional[str]) -> None:
        if message_type == models.HANDLE_SLACK_EVENT_CALLBACK:
            self._handle_event_callback(message.callback)
        elif message_type == models.RUN_SLACK_INTERACTION:
            self._run_interaction(message)

    def parse_interaction(self, payload: Mapping[str, Any]) -> Optional[models.RunSlackInteraction]:
        if payload.get("type") != "block_actions":
            return None
        actions = payload.get("actions")
        if not isinstance(actions, list) or not actions or not isinstance(actions[0], Mapping):
            return None
        action = actions[0]
        action_id = action.get("action_id")
        category = action.get("value")
        if action_id not in models.HELP_ACTIONS or category not in models.HELP_CATEGORIES:
            logger.info("Ignoring unknown Slack interaction", extra={"action_id": action_id})
            return None

        team = payload.get("team")
        user = payload.get("user")
        channel = payload.get("channel") or {}
        if not isinstance(team, Mapping) or not isinstance(user, Mapping) or not isinstance(channel, Mapping):
            return None
        team_id = team.get("id")
        user_id = user.get("id")
        if not isinstance(team_id, str) or not team_id or not isinstance(user_id, str) or not user_id:
            return None
        return models.RunSlackInteraction(
            team_id=team_id,
            user_id=user_id,
            action=action_id,
            category=category,
            user_name=user.get("name") or user.get("username") or "",
            channel_id=channel.get("id"),
        )

    def delete_user(self, uid: str) -> None:
        link = self._slack_users.fetch_link(uid)
        if not link:
            logger.info("No Slack link to clean up", extra={"uid": uid})
            return
        self._slack_users.delete_link(uid)
        logger.info("Deleted Slack link for removed user", extra={"uid": uid, "team_id": link.team_id})

    def _handle_event_callback(self, callback: models.SlackEventCallbackBody) -> None:
        if callback.event is None or not callback.team_id:
            logger.debug("No action for Slack callback type %s", callback.type)
            return
        event_type = callback.event.type
        if event_type == "app_home_opened":
            self._publish_home(callback.team_id, callback.event)
        elif event_type in UNINSTALL_EVENTS:
            self._installations.delete_installation(callback.team_id)
            logger.info("Removed Slack installation", extra={"team_id": callback.team_id, "reason": event_type})
        else:
            logger.debug("No action for Slack event type %s", event_type)

    def _publish_home(self, team_id: str, event: models.SlackEvent) -> None:
        if not event.user:
            return
        installation = self._require_installation(team_id)
        images: Dict[str, Optional[str]] = {
            category: self._image_index.first_image(category) for category in models.HELP_CATEGORIES
        }
        self._slack.publish_home_view(installation.access_token, event.user, build_home_view(images))

    def _run_interaction(self, run: models.RunSlackInteraction) -> None:
        installation = self._require_installation(run.team_id)
        uid = slack_uid(run.team_id, run.user_id)
        self._users.ensure_user(uid, run.user_name)
        self._slack_users.save_link(models.SlackUserLink(uid=uid, team_id=run.team_id, slack_user_id=run.user_id))

        text = build_confirmation_text(run.action, run.category, self._site_url)
        self._slack.post_message(installation.access_token, run.user_id, text)
        logger.info(
            "Ran Slack interaction",
            extra={"team_id": run.team_id, "action": run.action, "category": run.category},
        )

    def _require_installation(self, team_id: str) -> models.SlackInstallation:
        installation = self._installations.fetch_installation(team_id)
        if not installation:
            raise InstallationNotFoundError(f"No Slack installation for team {team_id}")
        return installation
