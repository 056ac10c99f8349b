from __future__ import annotations

import socket
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from .metrics import StatsAggregator
from .models import RequestOutcome


def classify_exception(exc: BaseException) -> RequestOutcome:
    """Map a fetch-stage exception to the outcome it should be counted as."""
    # ConnectTimeout is both a Timeout and a ConnectionError; count it as a timeout.
    if isinstance(exc, (requests.Timeout, socket.timeout, TimeoutError)):
        return RequestOutcome.TIMEOUT_ERROR
    if isinstance(exc, requests.HTTPError):
        return RequestOutcome.STATUS_CODE_ERROR
    return RequestOutcome.CONNECTION_ERROR


class TrackedRequest(ABC):
    """Fetch-then-parse pipeline that records its own outcome.

    - Any 2xx status counts as success; anything else is a status code error
      and run() returns None.
    - Parse failures count as parse errors even when the fetch succeeded.
    - Exceptions are recorded and then re-raised to the caller.
    """

    def __init__(self, aggregator: StatsAggregator) -> None:
        self._aggregator = aggregator

    def run(self, request: Any) -> Any:
        start_ms = self._now_ms()

        try:
            response = self.fetch(request)
        except Exception as exc:
            self._record(classify_exception(exc), start_ms, _status_of(exc))
            raise

        status_code = getattr(response, "status_code", None)
        if status_code is None or not 200 <= int(status_code) < 300:
            self._record(RequestOutcome.STATUS_CODE_ERROR, start_ms, status_code)
            return None

        try:
            parsed = self.parse(response)
        except Exception:
            self._record(RequestOutcome.PARSE_ERROR, start_ms, status_code)
            raise

        outcome = RequestOutcome.SUCCESS_CACHED if self.is_cached(response) else RequestOutcome.SUCCESS
        self._record(outcome, start_ms, status_code)
        return parsed

    def is_cached(self, response: Any) -> bool:
        return bool(getattr(response, "from_cache", False))

    @abstractmethod
    def fetch(self, request: Any) -> Any:
        ...

    @abstractmethod
    def parse(self, response: Any) -> Any:
        ...

    def _record(self, outcome: RequestOutcome, start_ms: int, status_code: Optional[int]) -> None:
        self._aggregator.record(outcome, start_ms, self._now_ms(), int(status_code or 0))

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)


def _status_of(exc: BaseException) -> Optional[int]:
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)
