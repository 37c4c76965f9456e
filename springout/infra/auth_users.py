from __future__ import annotations

import logging

from firebase_admin import auth

from ..domain.ports import UserDirectoryPort

logger = logging.getLogger(__name__)


class FirebaseUserDirectory(UserDirectoryPort):
    def __init__(self, app=None) -> None:
        self._app = app

    def ensure_user(self, uid: str, display_name: str = "") -> str:
        try:
            user = auth.get_user(uid, app=self._app)
            return user.uid
        except auth.UserNotFoundError:
            pass

        kwargs = {"uid": uid, "app": self._app}
        if display_name:
            kwargs["display_name"] = display_name
        try:
            user = auth.create_user(**kwargs)
        except auth.UidAlreadyExistsError:
            # 同時実行で先に作られた場合
            return uid
        logger.info("Created Firebase user", extra={"uid": user.uid})
        return user.uid
