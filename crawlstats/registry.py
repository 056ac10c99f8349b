"""Process-wide statistics context for crawlers that prefer module-level calls.

init_stats() installs the context exactly once and starts the background
reporter. update_stats() and send_stats() fail loudly if called before it.
Applications that can pass objects around should build a StatsContext and a
ReportingScheduler directly instead."""
from __future__ import annotations

import threading
from typing import List, Optional

from .config import StatsConfig
from .context import HostsCallback, IdentityCallback, StatsContext
from .errors import AlreadyInitializedError, NotInitializedError
from .metrics import StatsAggregator
from .models import Report, RequestOutcome, StatsIdentity
from .push import HttpPushSink, PushSink
from .reporter import ReportingScheduler, send_report

_lock = threading.Lock()
_context: Optional[StatsContext] = None
_config: Optional[StatsConfig] = None
_scheduler: Optional[ReportingScheduler] = None


def init_stats(
    config: StatsConfig,
    get_identity: IdentityCallback,
    get_hosts: HostsCallback,
    push_sink: Optional[PushSink] = None,
    aggregator: Optional[StatsAggregator] = None,
    start: bool = True,
) -> ReportingScheduler:
    """Install the process-wide context and start reporting in the background."""
    global _context, _config, _scheduler
    with _lock:
        if _context is not None:
            raise AlreadyInitializedError("crawl statistics are already initialized")
        context = StatsContext(
            aggregator=aggregator or StatsAggregator(),
            get_identity=get_identity,
            get_hosts=get_hosts,
            push_sink=push_sink or HttpPushSink(config.targets),
        )
        scheduler = ReportingScheduler.from_config(context, config)
        _context, _config, _scheduler = context, config, scheduler
    if start:
        scheduler.start_background()
    return scheduler


def get_context() -> StatsContext:
    context = _context
    if context is None:
        raise NotInitializedError("init_stats() must be called first")
    return context


def update_stats(
    request_time_ms: int,
    response_time_ms: int,
    status_code: int,
    outcome: RequestOutcome,
) -> None:
    get_context().aggregator.record(outcome, request_time_ms, response_time_ms, status_code)


def send_stats(identity: StatsIdentity, hosts: Optional[List[str]] = None) -> Report:
    """Report immediately, outside the regular cycle."""
    context, config = _context, _config
    if context is None or config is None:
        raise NotInitializedError("init_stats() must be called first")
    return send_report(context, identity, hosts, config.host_test_port, config.probe_timeout)


def shutdown() -> None:
    """Stop the background reporter and forget the installed context."""
    global _context, _config, _scheduler
    with _lock:
        scheduler, context = _scheduler, _context
        _context = _config = _scheduler = None
    if scheduler is not None:
        scheduler.stop()
        scheduler.join(timeout=5)
    if context is not None:
        context.push_sink.close()
