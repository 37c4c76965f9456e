from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from ..models import StorageObject, StorageObjectRef
from ..ports import ImageIndexPort

logger = logging.getLogger(__name__)

DOWNLOAD_URL_PREFIX = "https://firebasestorage.googleapis.com/v0"
DOWNLOAD_TOKEN_KEY = "firebaseStorageDownloadTokens"


class StorageObjectError(ValueError):
    pass


def parse_object_path(name: Optional[str]) -> StorageObjectRef:
    """`<prefix>/<categoryId>/<fileName>` をカテゴリとファイル名に分解する。"""

    if not name:
        raise StorageObjectError("missing name from storage object")
    # 3 階層目より深い部分は無視する
    segments = name.split("/")
    if len(segments) < 3 or not segments[1] or not segments[2]:
        raise StorageObjectError(f"unexpected storage object path: {name}")
    return StorageObjectRef(category_id=segments[1], file_name=segments[2])


def build_download_url(obj: StorageObject) -> str:
    # Admin SDK はダウンロード URL を返さないので自前で組み立てる
    if not obj.name:
        raise StorageObjectError("missing name from storage object")
    if obj.metadata is None:
        raise StorageObjectError("missing metadata from storage object")
    uri = quote(obj.name, safe="")
    token = obj.metadata.get(DOWNLOAD_TOKEN_KEY)
    return f"{DOWNLOAD_URL_PREFIX}/b/{obj.bucket}/o/{uri}?alt=media&token={token}"


class ImageIndexService:
    """Storage のアップロード/削除を Firestore の画像インデックスへ反映する。"""

    def __init__(self, index: ImageIndexPort) -> None:
        self._index = index

    def record_upload(self, obj: StorageObject) -> StorageObjectRef:
        ref = parse_object_path(obj.name)
        url = build_download_url(obj)
        self._index.set_image(ref.category_id, ref.file_name, url)
        logger.info(
            "Indexed uploaded image",
            extra={"category_id": ref.category_id, "file_name": ref.file_name},
        )
        return ref

    def record_delete(self, obj: StorageObject) -> StorageObjectRef:
        """削除時は URL を作らないので name だけあればよい (metadata は見ない)。"""
        ref = parse_object_path(obj.name)
        self._index.set_image(ref.category_id, ref.file_name, None)
        logger.info(
            "Tombstoned deleted image",
            extra={"category_id": ref.category_id, "file_name": ref.file_name},
        )
        return ref

    def first_image(self, category_id: str) -> Optional[str]:
        images = self._index.fetch_images(category_id)
        for file_name in sorted(images):
            if images[file_name]:
                return images[file_name]
        return None
