from __future__ import annotations

import logging
from typing import Any, Optional

from google.cloud import pubsub_v1

from ..domain.ports import PublisherPort
from ..presentation.pubsub_codec import encode_message

logger = logging.getLogger(__name__)


class PubSubPublisher(PublisherPort):
    """サービス名ごとのトピックへメッセージを送る。type は属性に載せる。"""

    def __init__(
        self,
        project_id: str,
        client: Optional[pubsub_v1.PublisherClient] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._project_id = project_id
        self._client = client or pubsub_v1.PublisherClient()
        self._timeout = timeout_seconds

    def publish(self, service: str, message: Any, message_type: str) -> str:
        topic = self._client.topic_path(self._project_id, service)
        future = self._client.publish(topic, encode_message(message), type=message_type)
        message_id = future.result(timeout=self._timeout)
        logger.info("Published message | topic=%s type=%s id=%s", service, message_type, message_id)
        return message_id
