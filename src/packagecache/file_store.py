"""File-backed cache store: one JSON document per entry."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Optional, Union

from common.logging_utils import extra_context
from .store import CacheStore

logger = logging.getLogger(__name__)


class FileCacheStore(CacheStore):
    """Persist entries under ``<cache_dir>/<namespace>/<sha256(key)>.json``.

    Values must be JSON-serializable. Unreadable or corrupt files are treated
    as cache misses and removed.
    """

    def __init__(self, cache_dir: Union[str, Path]):
        self._root = Path(cache_dir)
        self._lock = threading.Lock()

    def _path_for(self, namespace: str, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        safe_ns = namespace.replace(os.sep, "_") or "_"
        return self._root / safe_ns / f"{digest}.json"

    def get(self, namespace: str, key: str) -> Optional[Any]:
        path = self._path_for(namespace, key)
        with self._lock:
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    doc = json.load(fh)
                if not isinstance(doc, dict):
                    raise ValueError("cache document is not an object")
                expires_at = float(doc.get("expires_at", 0))
            except FileNotFoundError:
                return None
            except (OSError, TypeError, ValueError) as exc:
                logger.debug(
                    "Discarding unreadable cache file",
                    extra=extra_context(
                        event="cache_corrupt",
                        component="file_cache",
                        target=str(path),
                        error=str(exc),
                    ),
                )
                self._unlink(path)
                return None

            if doc.get("key") != key:
                return None
            if time.time() > expires_at:
                self._unlink(path)
                return None
            return doc.get("value")

    def set(self, namespace: str, key: str, value: Any, ttl_minutes: float) -> None:
        path = self._path_for(namespace, key)
        doc = {
            "namespace": namespace,
            "key": key,
            "value": value,
            "created_at": time.time(),
            "expires_at": time.time() + ttl_minutes * 60,
        }
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(doc, fh)
                os.replace(tmp_name, path)
            except BaseException:
                self._unlink(Path(tmp_name))
                raise

    def delete(self, namespace: str, key: str) -> None:
        with self._lock:
            self._unlink(self._path_for(namespace, key))

    def clear(self) -> None:
        with self._lock:
            if not self._root.is_dir():
                return
            for path in self._root.glob("*/*.json"):
                self._unlink(path)

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
