"""Binary artifact storage keyed by ``<document_id>/<artifact>``."""

import os
from typing import Iterable, List, Protocol

from signflow.config import Config
from signflow.documents.exceptions import StorageFailureError
from signflow.logging import get_logger

logger = get_logger(__name__)

__all__ = ["FileStore", "LocalFileStore"]


class FileStore(Protocol):
    """Operations the document store needs from a blob store."""

    def put(self, key: str, data: bytes) -> str:
        ...

    def get(self, key: str) -> bytes:
        ...

    def delete(self, keys: Iterable[str]) -> List[str]:
        """Remove ``keys``; returns the keys that could not be removed."""
        ...

    def url_for(self, key: str) -> str:
        ...


class LocalFileStore:
    """File store backed by a directory on the local filesystem."""

    def __init__(self, root: str = Config.STORAGE_ROOT, public_base_url: str = Config.PUBLIC_BASE_URL):
        self.root = os.path.abspath(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise StorageFailureError(f"Invalid artifact key: {key}")
        return path

    def put(self, key: str, data: bytes) -> str:
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageFailureError(f"Could not write {key}: {e}") from e
        return key

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise StorageFailureError(f"Could not read {key}: {e}") from e

    def exists(self, key: str) -> bool:
        return os.path.exists(self._path(key))

    def delete(self, keys: Iterable[str]) -> List[str]:
        failed = []
        for key in keys:
            try:
                os.remove(self._path(key))
            except FileNotFoundError:
                # Already purged
                continue
            except (OSError, StorageFailureError) as e:
                logger.warning("Could not delete artifact %s: %s", key, e)
                failed.append(key)
        return failed

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/documents/files/{key}"
