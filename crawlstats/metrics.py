from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from threading import Lock
from typing import Callable, Dict, Mapping, Optional

from .models import ExceptionCounts, Report, RequestOutcome, StatsIdentity, SystemResources, TimePeriod
from .resources import sample_system_resources


def _now_ms() -> int:
    return int(time.time() * 1000)


def _round3(value: float) -> float:
    # Halves round away from zero, not to even.
    scaled = Decimal(value * 1000).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return float(scaled) / 1000


def _rate(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return _round3(numerator / denominator)


@dataclass
class CounterStore:
    """Plain accumulator of request outcomes for the current cycle.

    Not thread-safe on its own; StatsAggregator owns the only instance and
    guards it with a lock."""

    total_requests: int = 0
    successful_requests: int = 0
    cache_hit: int = 0
    parse_errors: int = 0
    timeout_errors: int = 0
    connection_errors: int = 0
    status_code_errors: int = 0
    http_status_codes: Dict[int, int] = field(default_factory=dict)
    total_latency: int = 0

    def add(self, outcome: RequestOutcome, latency: int, status_code: int) -> None:
        self.total_requests += 1
        self.total_latency += latency

        # 0 means the crawler did not know the status code
        if status_code != 0:
            self.http_status_codes[status_code] = self.http_status_codes.get(status_code, 0) + 1

        if outcome is RequestOutcome.SUCCESS:
            self.successful_requests += 1
        elif outcome is RequestOutcome.SUCCESS_CACHED:
            self.successful_requests += 1
            self.cache_hit += 1
        elif outcome is RequestOutcome.PARSE_ERROR:
            self.parse_errors += 1
        elif outcome is RequestOutcome.TIMEOUT_ERROR:
            self.timeout_errors += 1
        elif outcome is RequestOutcome.CONNECTION_ERROR:
            self.connection_errors += 1
        elif outcome is RequestOutcome.STATUS_CODE_ERROR:
            self.status_code_errors += 1

    @property
    def exception_counts(self) -> ExceptionCounts:
        return ExceptionCounts(
            connection_error=self.connection_errors,
            timeout_error=self.timeout_errors,
            parse_error=self.parse_errors,
            status_code_error=self.status_code_errors,
        )


class StatsAggregator:
    """Thread-safe request statistics for one crawler process.

    Any number of producer threads call record(); the reporting loop calls
    snapshot_and_reset() once per cycle. Both serialize on the same lock, so a
    record() lands entirely in one report or entirely in the next."""

    def __init__(
        self,
        clock: Callable[[], int] = _now_ms,
        resource_sampler: Callable[[], SystemResources] = sample_system_resources,
    ) -> None:
        self._lock = Lock()
        self._clock = clock
        self._resource_sampler = resource_sampler
        self._store = CounterStore()
        self._init_time = clock()
        self._start_time = self._init_time

    @property
    def init_time(self) -> int:
        return self._init_time

    def record(
        self,
        outcome: RequestOutcome,
        request_time_ms: int,
        response_time_ms: int,
        status_code: int = 0,
    ) -> None:
        """Count one completed request. Never raises for any status code."""
        latency = response_time_ms - request_time_ms
        with self._lock:
            self._store.add(RequestOutcome(outcome), latency, status_code)

    def snapshot_and_reset(
        self,
        identity: StatsIdentity,
        hosts_ping_delay: Optional[Mapping[str, float]] = None,
    ) -> Report:
        """Build a Report from the current counters and clear them atomically.

        hosts_ping_delay is already in milliseconds."""
        resources = self._resource_sampler()
        with self._lock:
            store = self._store
            end_time = self._clock()
            time_period = TimePeriod(start=self._start_time, end=end_time)
            exceptions = store.exception_counts

            if store.total_requests > 0:
                average_latency = _round3(store.total_latency / store.total_requests)
            else:
                average_latency = 0.0

            report = Report(
                identity=identity,
                time_period=time_period,
                error_rate=_rate(exceptions.total, store.total_requests),
                exception_counts=exceptions,
                runtime_duration=(end_time - self._init_time) // 1000,
                total_requests=store.total_requests,
                cache_hit_rate=_rate(store.cache_hit, store.successful_requests),
                cache_hit=store.cache_hit,
                http_status_codes={str(code): count for code, count in store.http_status_codes.items()},
                average_request_latency=average_latency,
                hosts_ping_delay=dict(hosts_ping_delay or {}),
                system_resources=resources,
            )

            self._store = CounterStore()
            self._start_time = end_time
        return report
