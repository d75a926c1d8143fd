"""
Subscription store and persistence port.

The subscription list is the only state that survives a restart. It is
stored as one JSON blob under a well-known key; aggregated articles are
never written.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
from pathlib import Path
from typing import Any

from ..utils.logging import log_event
from .types import Subscription

logger = logging.getLogger(__name__)

STORAGE_KEY = "rss-feed-storage-v2"


class StoragePort(ABC):
    """Key-value persistence for the serialized store."""

    @abstractmethod
    def read(self, key: str) -> dict[str, Any] | None:
        """Return the blob stored under ``key``, or None if nothing is stored."""
        raise NotImplementedError

    @abstractmethod
    def write(self, key: str, value: dict[str, Any]) -> None:
        """Replace the blob stored under ``key``."""
        raise NotImplementedError


class MemoryStorage(StoragePort):
    """In-process storage, used by tests and ephemeral runs."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None) -> None:
        self.data: dict[str, dict[str, Any]] = {k: json.loads(json.dumps(v)) for k, v in (initial or {}).items()}

    def read(self, key: str) -> dict[str, Any] | None:
        value = self.data.get(key)
        return json.loads(json.dumps(value)) if value is not None else None

    def write(self, key: str, value: dict[str, Any]) -> None:
        self.data[key] = json.loads(json.dumps(value))


class JsonFileStorage(StoragePort):
    """All keys in one JSON file, rewritten on every write."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def read(self, key: str) -> dict[str, Any] | None:
        data = self._load()
        value = data.get(key)
        return value if isinstance(value, dict) else None

    def write(self, key: str, value: dict[str, Any]) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            log_event(
                logger,
                "Storage file unreadable",
                level=logging.WARNING,
                event="storage_unreadable",
                path=str(self.path),
                error=str(exc),
            )
            return {}
        return data if isinstance(data, dict) else {}


class SubscriptionStore:
    """The user's subscription list, persisted through a StoragePort.

    The store reads its state once at construction and writes after every
    mutation. It does not enforce URL uniqueness; callers that care check
    ``has_url`` before ``add``.
    """

    def __init__(
        self,
        storage: StoragePort,
        key: str = STORAGE_KEY,
        defaults: list[dict[str, str]] | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._subscriptions: list[Subscription] = self._load(defaults or [])

    def _load(self, defaults: list[dict[str, str]]) -> list[Subscription]:
        blob = self.storage.read(self.key)
        if blob is None:
            return [
                Subscription(id=str(idx + 1), url=d["url"], title=d.get("title") or "Unknown Feed", category=d.get("category"))
                for idx, d in enumerate(defaults)
            ]
        loaded: list[Subscription] = []
        for raw in blob.get("subscriptions", []):
            try:
                loaded.append(Subscription.from_dict(raw))
            except (KeyError, TypeError) as exc:
                log_event(
                    logger,
                    "Skipping malformed subscription",
                    level=logging.WARNING,
                    event="subscription_malformed",
                    error=str(exc),
                )
        return loaded

    def _save(self) -> None:
        self.storage.write(self.key, {"subscriptions": [s.to_dict() for s in self._subscriptions]})

    def list(self) -> list[Subscription]:
        return list(self._subscriptions)

    def get(self, subscription_id: str) -> Subscription | None:
        for sub in self._subscriptions:
            if sub.id == subscription_id:
                return sub
        return None

    def has_url(self, url: str) -> bool:
        return any(sub.url == url for sub in self._subscriptions)

    def add(self, subscription: Subscription) -> None:
        self._subscriptions.append(subscription)
        self._save()
        log_event(logger, "Subscription added", event="subscription_added", url=subscription.url, id=subscription.id)

    def remove(self, subscription_id: str) -> bool:
        """Remove by identifier. Returns False (and writes nothing) if it was not present."""
        remaining = [sub for sub in self._subscriptions if sub.id != subscription_id]
        if len(remaining) == len(self._subscriptions):
            return False
        self._subscriptions = remaining
        self._save()
        log_event(logger, "Subscription removed", event="subscription_removed", id=subscription_id)
        return True

    def __len__(self) -> int:
        return len(self._subscriptions)
