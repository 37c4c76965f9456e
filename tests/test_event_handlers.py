from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from springout.app import event_handlers
from springout.domain.models import StorageObject
from springout.domain.services.image_index_service import ImageIndexService, StorageObjectError


def _ctx(index=None):
    index = index or MagicMock()
    return SimpleNamespace(
        image_index=ImageIndexService(index),
        slack_service=MagicMock(),
        router=MagicMock(),
    ), index


def test_storage_object_from_mapping_and_attributes():
    from_dict = event_handlers.storage_object_from(
        {"name": "uploads/cooking/a.jpg", "bucket": "b", "metadata": {"firebaseStorageDownloadTokens": "t"}}
    )
    from_obj = event_handlers.storage_object_from(SimpleNamespace(name="uploads/cooking/a.jpg", bucket="b", metadata=None))

    assert from_dict == StorageObject("uploads/cooking/a.jpg", "b", {"firebaseStorageDownloadTokens": "t"})
    assert from_obj == StorageObject("uploads/cooking/a.jpg", "b", None)


def test_storage_finalize_writes_url():
    ctx, index = _ctx()

    event_handlers.on_storage_finalize(
        ctx,
        {"name": "uploads/cooking/recipe1.jpg", "bucket": "b", "metadata": {"firebaseStorageDownloadTokens": "tok"}},
    )

    category_id, file_name, url = index.set_image.call_args.args
    assert (category_id, file_name) == ("cooking", "recipe1.jpg")
    assert url.endswith("uploads%2Fcooking%2Frecipe1.jpg?alt=media&token=tok")


def test_storage_finalize_without_metadata_raises():
    ctx, index = _ctx()

    with pytest.raises(StorageObjectError):
        event_handlers.on_storage_finalize(ctx, {"name": "uploads/cooking/recipe1.jpg", "bucket": "b"})

    index.set_image.assert_not_called()


def test_storage_delete_writes_tombstone():
    ctx, index = _ctx()

    event_handlers.on_storage_delete(ctx, {"name": "uploads/cooking/recipe1.jpg", "bucket": "b"})

    index.set_image.assert_called_once_with("cooking", "recipe1.jpg", None)


def test_storage_delete_without_name_raises():
    ctx, index = _ctx()

    with pytest.raises(StorageObjectError):
        event_handlers.on_storage_delete(ctx, {"bucket": "b"})

    index.set_image.assert_not_called()


def test_user_deleted_cleans_up_slack_link():
    ctx, _ = _ctx()

    event_handlers.on_user_deleted(ctx, "uid-1")

    ctx.slack_service.delete_user.assert_called_once_with("uid-1")


def test_user_deleted_requires_uid():
    ctx, _ = _ctx()

    with pytest.raises(ValueError):
        event_handlers.on_user_deleted(ctx, None)


def test_bus_message_is_routed():
    ctx, _ = _ctx()

    event_handlers.on_bus_message(ctx, "e30=", {"type": "RunSlackInteraction"})

    ctx.router.route.assert_called_once_with("e30=", {"type": "RunSlackInteraction"})
