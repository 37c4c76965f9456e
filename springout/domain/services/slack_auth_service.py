from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..models import SlackInstallation
from ..ports import InstallationRepositoryPort, SlackPort

logger = logging.getLogger(__name__)


class SlackAuthService:
    """OAuth コードをアクセストークンへ交換し、ワークスペース情報を保存する。"""

    def __init__(self, slack: SlackPort, installations: InstallationRepositoryPort) -> None:
        self._slack = slack
        self._installations = installations

    def authorize_url(self) -> str:
        return self._slack.build_authorize_url()

    def exchange_code_for_token(self, code: str) -> SlackInstallation:
        response = self._slack.oauth_access(code)
        team = response.get("team") or {}
        if not team.get("id") or not response.get("access_token"):
            raise ValueError("oauth.v2.access response is missing team id or access token")
        installation = SlackInstallation(
            team_id=team.get("id", ""),
            team_name=team.get("name", ""),
            bot_user_id=response.get("bot_user_id", ""),
            access_token=response.get("access_token", ""),
            scope=response.get("scope", ""),
            installed_at=datetime.now(timezone.utc),
        )
        self._installations.save_installation(installation)
        logger.info(
            "Slack workspace installed",
            extra={"team_id": installation.team_id, "team_name": installation.team_name},
        )
        return installation
