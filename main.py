# Cloud Functions のエントリポイント。Firebase CLI はこのファイルから関数を探す。
from __future__ import annotations

import functions_framework
from firebase_functions import https_fn, pubsub_fn, storage_fn

from springout.app import event_handlers, http_handlers
from springout.app.bootstrap import get_context
from springout.domain.models import SLACK_SERVICE


@https_fn.on_request()
def hello_world(req: https_fn.Request) -> https_fn.Response:
    return http_handlers.hello_world(get_context(), req)


# Slack App Directory からインストールされたとき
@https_fn.on_request()
def slack_direct_install(req: https_fn.Request) -> https_fn.Response:
    return http_handlers.slack_direct_install(get_context(), req)


# ワークスペースへのインストールで権限が承認されたとき
@https_fn.on_request()
def slack_auth_callback(req: https_fn.Request) -> https_fn.Response:
    return http_handlers.slack_auth_callback(get_context(), req)


# https://api.slack.com/apps で購読しているイベント
@https_fn.on_request()
def slack_event(req: https_fn.Request) -> https_fn.Response:
    return http_handlers.slack_event(get_context(), req)


@https_fn.on_request()
def slack_interaction(req: https_fn.Request) -> https_fn.Response:
    return http_handlers.slack_interaction(get_context(), req)


@pubsub_fn.on_message_published(topic=SLACK_SERVICE)
def on_slack_message(event: pubsub_fn.CloudEvent[pubsub_fn.MessagePublishedData]) -> None:
    message = event.data.message
    event_handlers.on_bus_message(get_context(), message.data, message.attributes)


@storage_fn.on_object_finalized()
def on_storage_finalize(event: storage_fn.CloudEvent[storage_fn.StorageObjectData]) -> None:
    event_handlers.on_storage_finalize(get_context(), event.data)


@storage_fn.on_object_deleted()
def on_storage_delete(event: storage_fn.CloudEvent[storage_fn.StorageObjectData]) -> None:
    event_handlers.on_storage_delete(get_context(), event.data)


# firebase-functions (Python) には Auth の削除トリガーがないため gcloud で
# providers/firebase.auth/eventTypes/user.delete に紐付けてデプロイする
@functions_framework.cloud_event
def on_user_deleted(cloud_event) -> None:
    data = cloud_event.data or {}
    event_handlers.on_user_deleted(get_context(), data.get("uid"))
