from __future__ import annotations

import json
import logging
from typing import Any, Dict

from firebase_functions import https_fn

from ..domain import models
from ..presentation.pubsub_codec import parse_event_callback
from ..presentation.slack_request import (
    SignatureVerificationError,
    parse_interaction_payload,
    verify_signature,
)
from .bootstrap import AppContext

logger = logging.getLogger(__name__)

INTERACTION_FALLBACK_TEXT = "Oops, something went wrong."


def hello_world(_ctx: AppContext, _request: https_fn.Request) -> https_fn.Response:
    return https_fn.Response("Hello from Spring Out!", status=200)


def slack_direct_install(ctx: AppContext, request: https_fn.Request) -> https_fn.Response:
    """Slack App Directory からのインストール。認可画面へそのまま飛ばす。"""

    logger.info("Slack direct install | args=%s", dict(request.args))
    return _redirect(ctx.slack_auth.authorize_url())


def slack_auth_callback(ctx: AppContext, request: https_fn.Request) -> https_fn.Response:
    logger.info("Slack auth callback | args=%s", {key: value for key, value in request.args.items() if key != "code"})
    error = request.args.get("error")
    code = request.args.get("code")
    if error or not code:
        logger.warning("Slack authorization was not completed: %s", error or "missing code")
        return _redirect(ctx.settings.site_url)

    ctx.slack_auth.exchange_code_for_token(code)
    return _redirect(f"{ctx.settings.site_url}/slack/linked")


def slack_event(ctx: AppContext, request: https_fn.Request) -> https_fn.Response:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        logger.warning("Slack event body is not a JSON object")
        return https_fn.Response(status=400)

    if body.get("type") == "url_verification":
        logger.info("Slack event challenge")
        return _json({"challenge": body.get("challenge")})

    callback = parse_event_callback(body)

    # 処理は Pub/Sub 側で行い、Slack にはすぐ 200 を返す
    logger.info(
        "Slack event | team_id=%s callback_type=%s event_type=%s event_id=%s",
        callback.team_id,
        callback.type,
        callback.event.type if callback.event else None,
        callback.event_id,
    )
    ctx.publisher.publish(
        models.SLACK_SERVICE,
        models.HandleSlackEventCallback(callback=callback),
        models.HANDLE_SLACK_EVENT_CALLBACK,
    )
    return https_fn.Response(status=200)


def slack_interaction(ctx: AppContext, request: https_fn.Request) -> https_fn.Response:
    body = request.get_data(as_text=True)
    try:
        verify_signature(
            ctx.settings.slack_signing_secret,
            body,
            request.headers.get("X-Slack-Request-Timestamp"),
            request.headers.get("X-Slack-Signature"),
        )
    except SignatureVerificationError as exc:
        logger.warning("Slack signature verification failed: %s", exc)
        return https_fn.Response(status=400)

    payload = parse_interaction_payload(request.form.get("payload"))
    logger.info("Slack interaction | type=%s", (payload or {}).get("type"))

    # Slack は 3 秒以内の応答を要求するので実処理はキューへ回す
    run = ctx.slack_service.parse_interaction(payload) if payload else None
    if not run:
        return https_fn.Response(INTERACTION_FALLBACK_TEXT, status=200)

    ctx.publisher.publish(models.SLACK_SERVICE, run, models.RUN_SLACK_INTERACTION)
    return https_fn.Response(status=200)


def _redirect(location: str) -> https_fn.Response:
    return https_fn.Response(status=302, headers={"Location": location})


def _json(payload: Dict[str, Any]) -> https_fn.Response:
    return https_fn.Response(json.dumps(payload), status=200, mimetype="application/json")
