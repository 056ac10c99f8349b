"""Tests for configuration loading and duration parsing."""

import unittest

from crawlstats.config import RetentionConfig, StatsConfig, parse_duration
from crawlstats.errors import ConfigError


class TestParseDuration(unittest.TestCase):
    """Verify human-readable durations convert to seconds."""

    def test_single_units(self):
        self.assertEqual(parse_duration("30s"), 30.0)
        self.assertEqual(parse_duration("5m"), 300.0)
        self.assertEqual(parse_duration("2h"), 7200.0)
        self.assertEqual(parse_duration("1d"), 86400.0)
        self.assertEqual(parse_duration("500ms"), 0.5)

    def test_compound_and_long_units(self):
        self.assertEqual(parse_duration("1h 30m"), 5400.0)
        self.assertEqual(parse_duration("1min30sec"), 90.0)

    def test_numbers_are_seconds(self):
        self.assertEqual(parse_duration(15), 15.0)
        self.assertEqual(parse_duration(2.5), 2.5)

    def test_invalid_durations(self):
        """Garbage, empty strings and missing units raise ConfigError."""
        for bad in ["", "soon", "30", "30x", "5m later", "abc5s"]:
            with self.subTest(value=bad):
                with self.assertRaises(ConfigError):
                    parse_duration(bad)

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            parse_duration("nope")


class TestStatsConfig(unittest.TestCase):
    """Verify settings mappings build a validated StatsConfig."""

    def test_minimal_mapping_uses_defaults(self):
        """hostTestPort defaults to 443 and retention is off."""
        config = StatsConfig.from_mapping({"target": ["http://collector:5003/stats"], "reportingCycle": "30s"})
        self.assertEqual(config.targets, ["http://collector:5003/stats"])
        self.assertEqual(config.reporting_cycle, 30.0)
        self.assertEqual(config.host_test_port, 443)
        self.assertEqual(config.probe_timeout, 3.0)
        self.assertIsNone(config.retention)

    def test_full_mapping(self):
        config = StatsConfig.from_mapping(
            {
                "target": ["a", "b"],
                "reportingCycle": "1m",
                "hostTestPort": 8443,
                "probeTimeout": "1500ms",
                "cleanPaths": ["/tmp/stats"],
                "maxFileAge": "7d",
            }
        )
        self.assertEqual(config.host_test_port, 8443)
        self.assertEqual(config.probe_timeout, 1.5)
        self.assertEqual(config.retention, RetentionConfig(paths=["/tmp/stats"], max_age=604800.0))

    def test_missing_required_keys(self):
        with self.assertRaises(ConfigError):
            StatsConfig.from_mapping({"reportingCycle": "30s"})
        with self.assertRaises(ConfigError):
            StatsConfig.from_mapping({"target": ["a"]})

    def test_target_must_be_list(self):
        with self.assertRaises(ConfigError):
            StatsConfig.from_mapping({"target": "a", "reportingCycle": "30s"})

    def test_retention_settings_come_together(self):
        with self.assertRaises(ConfigError):
            StatsConfig.from_mapping({"target": ["a"], "reportingCycle": "30s", "cleanPaths": ["/tmp"]})

    def test_invalid_values_rejected(self):
        """Non-positive cycles and out-of-range ports are refused."""
        with self.assertRaises(ConfigError):
            StatsConfig(targets=["a"], reporting_cycle=0)
        with self.assertRaises(ConfigError):
            StatsConfig(targets=["a"], reporting_cycle=10, host_test_port=70000)
        with self.assertRaises(ConfigError):
            StatsConfig.from_mapping({"target": ["a"], "reportingCycle": "30s", "hostTestPort": "https"})


if __name__ == "__main__":
    unittest.main()
