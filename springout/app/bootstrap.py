from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import firebase_admin
from dotenv import load_dotenv
from firebase_admin import firestore

from ..config import Settings, get_settings
from ..domain.ports import PublisherPort
from ..domain.services.image_index_service import ImageIndexService
from ..domain.services.slack_auth_service import SlackAuthService
from ..infra.auth_users import FirebaseUserDirectory
from ..infra.firestore_repositories import (
    FirestoreImageIndex,
    FirestoreInstallationRepository,
    FirestoreSlackUserRepository,
)
from ..infra.pubsub_bus import PubSubPublisher
from ..infra.slack_api import SlackApiAdapter
from .dispatcher import Dispatcher, log_handler
from .message_router import MessageRouter
from .slack_service import SlackService


@dataclass(frozen=True)
class AppContext:
    """プロセス内で一度だけ作るクライアントとサービスの束。各エントリポイントへ明示的に渡す。"""

    settings: Settings
    publisher: PublisherPort
    dispatcher: Dispatcher
    router: MessageRouter
    slack_auth: SlackAuthService
    slack_service: SlackService
    image_index: ImageIndexService


def build_context(settings: Optional[Settings] = None) -> AppContext:
    settings = settings or get_settings()

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, force=True)

    app = _firebase_app()
    db = firestore.client(app)

    slack_api = SlackApiAdapter(
        client_id=settings.slack_client_id,
        client_secret=settings.slack_client_secret,
        scopes=settings.slack_scopes,
        redirect_uri=settings.slack_redirect_uri,
        timeout_seconds=settings.slack_timeout_seconds,
    )
    installations = FirestoreInstallationRepository(db)
    image_index = ImageIndexService(FirestoreImageIndex(db, settings.images_collection))
    slack_service = SlackService(
        slack_api,
        installations,
        FirestoreSlackUserRepository(db),
        FirebaseUserDirectory(app),
        image_index,
        site_url=settings.site_url,
    )

    # 登録順がそのまま実行順になる
    dispatcher = Dispatcher(
        [
            log_handler,
            slack_service.handle,
        ]
    )
    return AppContext(
        settings=settings,
        publisher=PubSubPublisher(settings.gcp_project or app.project_id),
        dispatcher=dispatcher,
        router=MessageRouter(dispatcher),
        slack_auth=SlackAuthService(slack_api, installations),
        slack_service=slack_service,
        image_index=image_index,
    )


@lru_cache(maxsize=1)
def get_context() -> AppContext:
    load_dotenv()
    return build_context()


def _firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        return firebase_admin.initialize_app()
