from __future__ import annotations

import queue
import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

import requests
from loguru import logger

from .errors import ConfigError, PushError


class PushSink(ABC):
    """Destination for serialized reports.

    send() is called once per reporting cycle with the report's JSON text and
    raises PushError when the report could not be delivered."""

    @abstractmethod
    def send(self, message: str) -> None:
        """Deliver one serialized report."""

    def close(self) -> None:
        """Release resources held by the sink."""


class HttpPushSink(PushSink):
    """Posts each report to every target URL through one shared session.

    No retries: a failed target simply misses this cycle's report."""

    def __init__(
        self,
        targets: Iterable[str],
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._targets: List[str] = list(targets)
        if not self._targets:
            raise ConfigError("HttpPushSink needs at least one target")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._lock = threading.Lock()

    @property
    def targets(self) -> List[str]:
        return list(self._targets)

    def send(self, message: str) -> None:
        body = message.encode("utf-8")
        failures = []
        with self._lock:
            for target in self._targets:
                try:
                    resp = self._session.post(
                        target,
                        data=body,
                        headers={"Content-Type": "application/json; charset=utf-8"},
                        timeout=self._timeout,
                    )
                    resp.raise_for_status()
                except requests.RequestException as exc:
                    failures.append(f"{target}: {exc}")

        if len(failures) == len(self._targets):
            raise PushError("; ".join(failures))
        for failure in failures:
            logger.warning(f"Report not delivered to {failure}")

    def close(self) -> None:
        self._session.close()


class JsonlPushSink(PushSink):
    """Appends each report as one JSON line using a background writer thread."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._queue: queue.Queue[Optional[str]] = queue.Queue()
        self._closed = False
        self._thread = threading.Thread(target=self._writer, name="crawlstats-jsonl", daemon=True)
        self._thread.start()

    def send(self, message: str) -> None:
        """Enqueue a report for background writing."""
        if self._closed:
            raise PushError(f"JsonlPushSink for {self._path} is closed")
        self._queue.put(message)

    def close(self) -> None:
        """Signal the writer thread to flush and stop."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(None)
        self._thread.join(timeout=5)

    def _writer(self) -> None:
        with open(self._path, "a", encoding="utf-8") as f:
            while True:
                item = self._queue.get()
                if item is None:
                    break
                f.write(item.replace("\n", " ") + "\n")
                f.flush()
