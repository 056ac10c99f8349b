from __future__ import annotations

import threading
from typing import List, Optional

from loguru import logger

from .cleanup import clean_old_files
from .config import DEFAULT_HOST_TEST_PORT, RetentionConfig, StatsConfig
from .context import StatsContext
from .errors import PushError
from .models import Report, StatsIdentity
from .probe import DEFAULT_PROBE_TIMEOUT, probe_hosts, to_millis


def send_report(
    context: StatsContext,
    identity: StatsIdentity,
    hosts: Optional[List[str]] = None,
    port: int = DEFAULT_HOST_TEST_PORT,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> Report:
    """Probe hosts, snapshot and reset the counters, and push the report.

    A push failure is logged and swallowed; the report is returned either way."""
    ping_delay = to_millis(probe_hosts(hosts, port, probe_timeout)) if hosts else {}
    report = context.aggregator.snapshot_and_reset(identity, ping_delay)

    try:
        context.push_sink.send(report.to_json())
    except PushError as exc:
        logger.warning(f"Failed to push stats report: {exc}")
    except Exception:  # noqa: BLE001
        logger.exception("Push sink raised unexpectedly")

    logger.info(f"Stats report:\n{report.to_json(pretty=True)}")
    return report


class ReportingScheduler:
    """Runs one reporting cycle every reporting_cycle seconds until stopped.

    A cycle probes the configured hosts, snapshots the aggregator, pushes the
    report and sweeps expired files. A failing step is logged and the rest of
    the cycle still runs."""

    def __init__(
        self,
        context: StatsContext,
        reporting_cycle: float,
        host_test_port: int = DEFAULT_HOST_TEST_PORT,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        retention: Optional[RetentionConfig] = None,
    ) -> None:
        self._context = context
        self._cycle = reporting_cycle
        self._port = host_test_port
        self._probe_timeout = probe_timeout
        self._retention = retention
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, context: StatsContext, config: StatsConfig) -> "ReportingScheduler":
        return cls(
            context,
            reporting_cycle=config.reporting_cycle,
            host_test_port=config.host_test_port,
            probe_timeout=config.probe_timeout,
            retention=config.retention,
        )

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Run the reporting loop in the calling thread until stop() is called."""
        logger.info(f"Stats reporting started, cycle={self._cycle}s")
        while not self._stop.wait(self._cycle):
            try:
                self.run_cycle()
            except Exception:  # noqa: BLE001
                logger.exception("Stats reporting cycle failed")
        logger.info("Stats reporting stopped")

    def start_background(self) -> threading.Thread:
        """Start the loop on a daemon thread and return it."""
        if self.running:
            raise RuntimeError("reporting loop already running")
        self._stop.clear()
        self._thread = threading.Thread(target=self.start, name="crawlstats-reporter", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        """Ask the loop to exit; an in-flight cycle finishes first."""
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run_cycle(self) -> Report:
        hosts = self._fetch_hosts()
        identity = self._context.get_identity()
        report = send_report(self._context, identity, hosts, self._port, self._probe_timeout)
        self._sweep()
        return report

    def _fetch_hosts(self) -> Optional[List[str]]:
        try:
            return list(self._context.get_hosts())
        except Exception as exc:  # noqa: BLE001
            logger.error(f"Failed to get hosts: {exc}")
            return None

    def _sweep(self) -> None:
        if self._retention is None:
            return
        for path in self._retention.paths:
            try:
                clean_old_files(path, self._retention.max_age)
            except Exception as exc:  # noqa: BLE001
                logger.error(f"Failed to delete expired files under {path}: {exc}")
