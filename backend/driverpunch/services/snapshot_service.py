# Overview: In-process live snapshot hub backing the admin view's push updates.

"""
Snapshot Hub

Subscribers receive the FULL current list for a topic every time it
changes; consumers replace their state with each push instead of
patching it. subscribe() returns a callable that cancels the
subscription.

Writers call publish(topic) after committing. The snapshot is loaded once
per publish and handed to every subscriber. A subscriber that raises is
logged and skipped.
"""

from __future__ import annotations

import itertools
import threading
from typing import Callable

from flask import current_app

TOPIC_RETURN_FORMS = "return_forms"
TOPIC_PUNCH_LOGS = "punch_logs"
TOPICS = (TOPIC_RETURN_FORMS, TOPIC_PUNCH_LOGS)

Snapshot = list[dict]
Callback = Callable[[Snapshot], None]
Loader = Callable[[], Snapshot]


class SnapshotHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: dict[str, dict[int, Callback]] = {}
        self._loaders: dict[str, Loader] = {}

    def register_loader(self, topic: str, loader: Loader) -> None:
        with self._lock:
            self._loaders[topic] = loader

    def snapshot(self, topic: str) -> Snapshot:
        loader = self._loaders.get(topic)
        if loader is None:
            raise KeyError(f"Unknown snapshot topic: {topic}")
        return loader()

    def subscribe(self, topic: str, callback: Callback) -> Callable[[], None]:
        if topic not in self._loaders:
            raise KeyError(f"Unknown snapshot topic: {topic}")

        with self._lock:
            sub_id = next(self._ids)
            self._subscribers.setdefault(topic, {})[sub_id] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.get(topic, {}).pop(sub_id, None)

        return unsubscribe

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, {}))

    def publish(self, topic: str) -> int:
        """Push the current snapshot to every subscriber; returns how many were notified."""
        with self._lock:
            callbacks = list(self._subscribers.get(topic, {}).values())
        if not callbacks:
            return 0

        snapshot = self.snapshot(topic)
        delivered = 0
        for callback in callbacks:
            try:
                callback(snapshot)
                delivered += 1
            except Exception:
                current_app.logger.exception("Snapshot subscriber failed for topic %s", topic)
        return delivered


hub = SnapshotHub()
