from __future__ import annotations

import argparse
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from crawlstats import registry
from crawlstats.config import StatsConfig
from crawlstats.models import RequestOutcome, StatsIdentity
from crawlstats.push import JsonlPushSink

_OUTCOME_WEIGHTS = [
    (RequestOutcome.SUCCESS, 70),
    (RequestOutcome.SUCCESS_CACHED, 15),
    (RequestOutcome.PARSE_ERROR, 3),
    (RequestOutcome.TIMEOUT_ERROR, 5),
    (RequestOutcome.CONNECTION_ERROR, 3),
    (RequestOutcome.STATUS_CODE_ERROR, 4),
]


def _fake_request(rng: random.Random) -> None:
    outcomes, weights = zip(*_OUTCOME_WEIGHTS)
    outcome = rng.choices(outcomes, weights=weights)[0]
    request_ms = int(time.time() * 1000)
    latency_ms = rng.randint(20, 400)
    time.sleep(latency_ms / 1000.0)
    if outcome is RequestOutcome.STATUS_CODE_ERROR:
        status = rng.choice([403, 429, 500, 502])
    elif outcome in (RequestOutcome.TIMEOUT_ERROR, RequestOutcome.CONNECTION_ERROR):
        status = 0
    else:
        status = 200
    registry.update_stats(request_ms, request_ms + latency_ms, status, outcome)


def run_demo(
    results_path: str,
    hosts: list[str],
    cycle: str,
    duration: float,
    workers: int,
    port: int,
) -> None:
    config = StatsConfig.from_mapping(
        {"target": [results_path], "reportingCycle": cycle, "hostTestPort": port}
    )
    identity = StatsIdentity(
        server_name="demo-host",
        scraper_name="demo-crawler",
        project_code="demo",
        scraper_type="simulated",
        request_frequency=workers,
    )
    registry.init_stats(
        config,
        get_identity=lambda: identity,
        get_hosts=lambda: hosts,
        push_sink=JsonlPushSink(results_path),
    )

    stop_at = time.time() + duration
    done = threading.Event()

    def worker(seed: int) -> None:
        rng = random.Random(seed)
        while not done.is_set() and time.time() < stop_at:
            _fake_request(rng)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        for i in range(workers):
            executor.submit(worker, i)

    done.set()
    final = registry.send_stats(identity, hosts)
    registry.shutdown()
    logger.info(f"DONE: last report counted {final.total_requests} requests, written to {results_path}")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--run-demo", action="store_true", help="Simulate a crawler and report its stats")

    parser.add_argument("--results", default="stats.jsonl", help="Output JSONL file for pushed reports")
    parser.add_argument("--hosts", nargs="*", default=["1.1.1.1", "8.8.8.8:53"], help="Hosts to ping each cycle")
    parser.add_argument("--port", type=int, default=443, help="Port used for hosts given without one")
    parser.add_argument("--cycle", default="5s", help="Reporting cycle, e.g. 5s or 1m")
    parser.add_argument("--duration", type=float, default=20.0, help="Seconds to simulate traffic")
    parser.add_argument("--workers", type=int, default=4, help="Simulated crawler threads")

    args = parser.parse_args()

    if args.run_demo:
        run_demo(
            results_path=args.results,
            hosts=args.hosts,
            cycle=args.cycle,
            duration=args.duration,
            workers=args.workers,
            port=args.port,
        )
        return

    print("Nothing to do. Use --run-demo to run the demo.")


if __name__ == "__main__":
    main()
