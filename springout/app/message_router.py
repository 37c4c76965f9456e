from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..presentation.pubsub_codec import decode_message
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class MessageRouter:
    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    def route(self, data: Optional[str], attributes: Optional[Mapping[str, str]]) -> None:
        # デコード失敗はそのまま送出し、Pub/Sub の再配信に任せる
        message, message_type = decode_message(data, attributes)
        logger.debug("Routing message | type=%s", message_type)
        self._dispatcher.dispatch(message, message_type)
