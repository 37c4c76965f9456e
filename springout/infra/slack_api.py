from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import urlencode

import requests

from ..domain.ports import SlackPort

logger = logging.getLogger(__name__)


class SlackApiError(RuntimeError):
    pass


class SlackApiAdapter(SlackPort):
    BASE_URL = "https://slack.com"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        scopes: Sequence[str],
        redirect_uri: str = "",
        timeout_seconds: int = 5,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._scopes = tuple(scopes)
        self._redirect_uri = redirect_uri
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    def build_authorize_url(self) -> str:
        params = {"client_id": self._client_id, "scope": ",".join(self._scopes)}
        if self._redirect_uri:
            params["redirect_uri"] = self._redirect_uri
        return f"{self.BASE_URL}/oauth/v2/authorize?{urlencode(params)}"

    def oauth_access(self, code: str) -> Dict[str, Any]:
        data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
        }
        if self._redirect_uri:
            data["redirect_uri"] = self._redirect_uri
        response = self._session.post(f"{self.BASE_URL}/api/oauth.v2.access", data=data, timeout=self._timeout)
        return self._read(response, "oauth.v2.access")

    def publish_home_view(self, token: str, user_id: str, view: Mapping[str, Any]) -> None:
        self._call(token, "views.publish", {"user_id": user_id, "view": dict(view)})

    def post_message(
        self,
        token: str,
        channel: str,
        text: str,
        blocks: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> None:
        payload: Dict[str, Any] = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = [dict(block) for block in blocks]
        self._call(token, "chat.postMessage", payload)

    def _call(self, token: str, method: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        response = self._session.post(
            f"{self.BASE_URL}/api/{method}",
            json=dict(payload),
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json; charset=utf-8",
            },
            timeout=self._timeout,
        )
        return self._read(response, method)

    @staticmethod
    def _read(response: requests.Response, method: str) -> Dict[str, Any]:
        if not response.ok:
            logger.error(
                "Slack API call failed: method=%s status=%s body=%s",
                method,
                response.status_code,
                (response.text or "")[:500],
            )
            raise SlackApiError(f"Slack {method} failed with status {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise SlackApiError(f"Slack {method} returned a non-JSON body") from exc
        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            logger.error("Slack API returned an error: method=%s error=%s", method, error)
            raise SlackApiError(f"Slack {method} failed: {error}")
        return data
