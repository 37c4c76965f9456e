from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"
MAX_REQUEST_AGE_SECONDS = 60 * 5


class SignatureVerificationError(RuntimeError):
    pass


def verify_signature(
    signing_secret: str,
    body: str,
    timestamp: Optional[str],
    signature: Optional[str],
    now: Optional[float] = None,
) -> None:
    if not signature:
        raise SignatureVerificationError("Missing X-Slack-Signature header")
    if not timestamp:
        raise SignatureVerificationError("Missing X-Slack-Request-Timestamp header")
    try:
        sent_at = int(timestamp)
    except ValueError as exc:
        raise SignatureVerificationError("Invalid request timestamp") from exc

    current = time.time() if now is None else now
    if abs(current - sent_at) > MAX_REQUEST_AGE_SECONDS:
        raise SignatureVerificationError("Request timestamp is too old")

    base = f"{SIGNATURE_VERSION}:{timestamp}:{body}"
    mac = hmac.new(signing_secret.encode("utf-8"), base.encode("utf-8"), hashlib.sha256)
    expected = f"{SIGNATURE_VERSION}={mac.hexdigest()}"
    if not hmac.compare_digest(expected, signature):
        raise SignatureVerificationError("Invalid signature")


def parse_interaction_payload(raw_payload: Optional[str]) -> Optional[Dict[str, Any]]:
    """フォームの `payload` フィールド(JSON 文字列)を読み込む。壊れていれば None。"""

    if not raw_payload:
        return None
    try:
        payload = json.loads(raw_payload)
    except json.JSONDecodeError:
        logger.warning("Interaction payload is not JSON")
        return None
    if not isinstance(payload, dict):
        return None
    return payload
