from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Optional[str]], None]


def log_handler(message: Any, message_type: Optional[str]) -> None:
    logger.info("Received message | type=%s message=%s", message_type, message)


class Dispatcher:
    """登録順にすべてのハンドラを呼び出す。1 つが失敗しても残りは必ず実行する。"""

    def __init__(self, handlers: Iterable[Handler]) -> None:
        self._handlers: Tuple[Handler, ...] = tuple(handlers)

    @property
    def handlers(self) -> Tuple[Handler, ...]:
        return self._handlers

    def dispatch(self, message: Any, message_type: Optional[str]) -> None:
        # ハンドラの失敗は Pub/Sub 側へ伝播させない
        for handler in self._handlers:
            try:
                handler(message, message_type)
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception(
                    "Handler failed: %s",
                    exc,
                    extra={"handler": getattr(handler, "__qualname__", repr(handler)), "type": message_type},
                )
