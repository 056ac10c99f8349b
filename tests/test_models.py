"""Tests for report data classes and their wire format."""

import json
import unittest

from crawlstats.models import (
    ExceptionCounts,
    Report,
    RequestOutcome,
    StatsIdentity,
    SystemResources,
    TimePeriod,
    Usage,
)


def _make_report(**overrides) -> Report:
    """Helper to build a Report with sensible defaults."""
    defaults = dict(
        identity=StatsIdentity("srv", "spider", "P01", "list", 3),
        time_period=TimePeriod(start=1000, end=31000),
        error_rate=0.2,
        exception_counts=ExceptionCounts(connection_error=1, timeout_error=2),
        runtime_duration=30,
        total_requests=15,
        cache_hit_rate=0.5,
        cache_hit=6,
        http_status_codes={"200": 12},
        average_request_latency=42.5,
        hosts_ping_delay={"10.0.0.1": 0.6},
        system_resources=SystemResources("12.50%", Usage(100, 200), Usage(300, 400)),
    )
    defaults.update(overrides)
    return Report(**defaults)


class TestRequestOutcome(unittest.TestCase):
    """Verify outcome classification helpers."""

    def test_success_variants(self):
        """Only the two success variants report is_success."""
        successes = {o for o in RequestOutcome if o.is_success}
        self.assertEqual(successes, {RequestOutcome.SUCCESS, RequestOutcome.SUCCESS_CACHED})

    def test_lookup_by_wire_name(self):
        """Outcomes can be built from their external names."""
        self.assertIs(RequestOutcome("SuccessfulAndCache"), RequestOutcome.SUCCESS_CACHED)


class TestStatsIdentity(unittest.TestCase):
    """Verify identity parsing and immutability."""

    def test_from_mapping_defaults_frequency(self):
        """requestFrequency is optional and defaults to 0."""
        identity = StatsIdentity.from_mapping(
            {"serverName": "a", "scraperName": "b", "projectCode": "c", "scraperType": "d"}
        )
        self.assertEqual(identity.request_frequency, 0)
        self.assertEqual(identity.to_dict()["scraperName"], "b")

    def test_identity_is_immutable(self):
        """Frozen dataclass should raise on attribute assignment."""
        identity = StatsIdentity("a", "b", "c", "d")
        with self.assertRaises(AttributeError):
            identity.server_name = "other"


class TestReportSerialization(unittest.TestCase):
    """Verify the report keeps the field names downstream consumers rely on."""

    def test_top_level_keys(self):
        """Identity fields are flattened next to the statistics."""
        data = _make_report().to_dict()
        self.assertEqual(
            set(data),
            {
                "serverName",
                "scraperName",
                "projectCode",
                "scraperType",
                "requestFrequency",
                "timePeriod",
                "errorRate",
                "exceptionTypes",
                "runtimeDuration",
                "totalRequests",
                "cacheHitRate",
                "cacheHit",
                "httpStatusCodes",
                "averageRequestLatency",
                "hostsPingDelay",
                "systemResources",
            },
        )

    def test_nested_values(self):
        """Nested objects use their camelCase names."""
        data = json.loads(_make_report().to_json())
        self.assertEqual(data["timePeriod"], {"start": 1000, "end": 31000})
        self.assertEqual(data["exceptionTypes"]["timeoutError"], 2)
        self.assertEqual(data["exceptionTypes"]["statusCodeError"], 0)
        self.assertEqual(data["systemResources"]["cpuUsage"], "12.50%")
        self.assertEqual(data["systemResources"]["diskUsage"], {"used": 300, "total": 400})
        self.assertEqual(data["hostsPingDelay"], {"10.0.0.1": 0.6})

    def test_pretty_json_is_multiline(self):
        """Pretty output is indented but carries the same data."""
        report = _make_report()
        pretty = report.to_json(pretty=True)
        self.assertIn("\n", pretty)
        self.assertEqual(json.loads(pretty), json.loads(report.to_json()))


if __name__ == "__main__":
    unittest.main()
