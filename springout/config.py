from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

DEFAULT_SLACK_SCOPES = ("chat:write", "commands", "im:write", "users:read")


@dataclass(frozen=True)
class Settings:
    slack_client_id: str
    slack_client_secret: str
    slack_signing_secret: str
    slack_redirect_uri: str = ""
    slack_scopes: Tuple[str, ...] = DEFAULT_SLACK_SCOPES
    slack_timeout_seconds: int = 5
    site_url: str = "https://springout.org"
    gcp_project: str = ""
    images_collection: str = "images"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """環境変数から設定を読み込む薄いラッパー。"""

    env = os.environ
    required = {
        "SLACK_CLIENT_ID": env.get("SLACK_CLIENT_ID"),
        "SLACK_CLIENT_SECRET": env.get("SLACK_CLIENT_SECRET"),
        "SLACK_SIGNING_SECRET": env.get("SLACK_SIGNING_SECRET"),
    }

    missing = [key for key, value in required.items() if not value]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    scopes = env.get("SLACK_SCOPES")
    return Settings(
        slack_client_id=required["SLACK_CLIENT_ID"],
        slack_client_secret=required["SLACK_CLIENT_SECRET"],
        slack_signing_secret=required["SLACK_SIGNING_SECRET"],
        slack_redirect_uri=env.get("SLACK_REDIRECT_URI", ""),
        slack_scopes=_split_scopes(scopes) if scopes else DEFAULT_SLACK_SCOPES,
        slack_timeout_seconds=int(env.get("SLACK_TIMEOUT_SECONDS", "5")),
        site_url=env.get("SITE_URL", "https://springout.org").rstrip("/"),
        gcp_project=env.get("GCLOUD_PROJECT") or env.get("GOOGLE_CLOUD_PROJECT", ""),
        images_collection=env.get("IMAGES_COLLECTION", "images"),
        log_level=env.get("LOG_LEVEL", "INFO"),
    )


def _split_scopes(raw: str) -> Tuple[str, ...]:
    return tuple(scope.strip() for scope in raw.split(",") if scope.strip())
