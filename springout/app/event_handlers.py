from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..domain.models import StorageObject
from .bootstrap import AppContext

logger = logging.getLogger(__name__)


def storage_object_from(data: Any) -> StorageObject:
    """Storage トリガーのペイロード (dict か StorageObjectData) を StorageObject にそろえる。"""

    if isinstance(data, Mapping):
        name = data.get("name")
        bucket = data.get("bucket")
        metadata = data.get("metadata")
    else:
        name = getattr(data, "name", None)
        bucket = getattr(data, "bucket", None)
        metadata = getattr(data, "metadata", None)
    return StorageObject(
        name=name,
        bucket=bucket,
        metadata=dict(metadata) if metadata is not None else None,
    )


def on_storage_finalize(ctx: AppContext, data: Any) -> None:
    ctx.image_index.record_upload(storage_object_from(data))


def on_storage_delete(ctx: AppContext, data: Any) -> None:
    ctx.image_index.record_delete(storage_object_from(data))


def on_user_deleted(ctx: AppContext, uid: Optional[str]) -> None:
    if not uid:
        raise ValueError("deleted user notification is missing uid")
    logger.info("Cleaning up deleted user", extra={"uid": uid})
    ctx.slack_service.delete_user(uid)


def on_bus_message(ctx: AppContext, data: Optional[str], attributes: Optional[Mapping[str, str]]) -> None:
    ctx.router.route(data, attributes)
