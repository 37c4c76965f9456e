from __future__ import annotations

import logging
from typing import Dict, Optional

from firebase_admin import firestore

from ..domain.models import SlackInstallation, SlackUserLink
from ..domain.ports import ImageIndexPort, InstallationRepositoryPort, SlackUserRepositoryPort

logger = logging.getLogger(__name__)

INSTALLATIONS_COLLECTION = "slackInstallations"
SLACK_USERS_COLLECTION = "slackUsers"


class FirestoreImageIndex(ImageIndexPort):
    """categoryId ごとのドキュメントに fileName -> URL を保持する。"""

    def __init__(self, db, collection: str = "images") -> None:
        self._collection = db.collection(collection)

    def set_image(self, category_id: str, file_name: str, url: Optional[str]) -> None:
        # merge なので同じカテゴリの他のファイルには触れない
        self._collection.document(category_id).set({file_name: url}, merge=True)

    def fetch_images(self, category_id: str) -> Dict[str, Optional[str]]:
        snapshot = self._collection.document(category_id).get()
        if not snapshot.exists:
            return {}
        return dict(snapshot.to_dict() or {})


class FirestoreInstallationRepository(InstallationRepositoryPort):
    def __init__(self, db) -> None:
        self._collection = db.collection(INSTALLATIONS_COLLECTION)

    def save_installation(self, installation: SlackInstallation) -> None:
        self._collection.document(installation.team_id).set(
            {
                "teamId": installation.team_id,
                "teamName": installation.team_name,
                "botUserId": installation.bot_user_id,
                "accessToken": installation.access_token,
                "scope": installation.scope,
                "installedAt": installation.installed_at or firestore.SERVER_TIMESTAMP,
            }
        )

    def fetch_installation(self, team_id: str) -> Optional[SlackInstallation]:
        snapshot = self._collection.document(team_id).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        return SlackInstallation(
            team_id=data.get("teamId", team_id),
            team_name=data.get("teamName", ""),
            bot_user_id=data.get("botUserId", ""),
            access_token=data.get("accessToken", ""),
            scope=data.get("scope", ""),
            installed_at=data.get("installedAt"),
        )

    def delete_installation(self, team_id: str) -> None:
        self._collection.document(team_id).delete()


class FirestoreSlackUserRepository(SlackUserRepositoryPort):
    """Firebase uid をドキュメント ID にして Slack ユーザーとの紐付けを保持する。"""

    def __init__(self, db) -> None:
        self._collection = db.collection(SLACK_USERS_COLLECTION)

    def save_link(self, link: SlackUserLink) -> None:
        self._collection.document(link.uid).set(
            {
                "teamId": link.team_id,
                "slackUserId": link.slack_user_id,
                "createdAt": firestore.SERVER_TIMESTAMP,
            },
            merge=True,
        )

    def fetch_link(self, uid: str) -> Optional[SlackUserLink]:
        snapshot = self._collection.document(uid).get()
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        return SlackUserLink(uid=uid, team_id=data.get("teamId", ""), slack_user_id=data.get("slackUserId", ""))

    def delete_link(self, uid: str) -> None:
        self._collection.document(uid).delete()
