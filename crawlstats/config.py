from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from .errors import ConfigError
from .probe import DEFAULT_PROBE_TIMEOUT

DEFAULT_HOST_TEST_PORT = 443

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)\s*(ms|sec|min|hr|s|m|h|d)", re.IGNORECASE)

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "sec": 1.0,
    "m": 60.0,
    "min": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
    "d": 86400.0,
}


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse a duration such as "30s", "5m", "1h 30m" or "500ms" into seconds.

    Plain numbers are taken as seconds."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip()
    if not text:
        raise ConfigError("Invalid duration: empty string")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if text[pos:match.start()].strip():
            raise ConfigError(f"Invalid duration: {value!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2).lower()]
        pos = match.end()
    if pos == 0 or text[pos:].strip():
        raise ConfigError(f"Invalid duration: {value!r}")
    return total


@dataclass(frozen=True)
class RetentionConfig:
    paths: List[str]
    max_age: float


@dataclass(frozen=True)
class StatsConfig:
    """Settings read once at startup; the reporting cycle is fixed afterwards."""

    targets: List[str]
    reporting_cycle: float
    host_test_port: int = DEFAULT_HOST_TEST_PORT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    retention: Optional[RetentionConfig] = None

    def __post_init__(self) -> None:
        if self.reporting_cycle <= 0:
            raise ConfigError(f"reporting_cycle must be positive, got {self.reporting_cycle}")
        if not 0 <= self.host_test_port <= 65535:
            raise ConfigError(f"host_test_port out of range: {self.host_test_port}")
        if self.probe_timeout <= 0:
            raise ConfigError(f"probe_timeout must be positive, got {self.probe_timeout}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StatsConfig":
        """Build a config from the camelCase keys used in crawler settings files."""
        try:
            targets = data["target"]
            cycle = data["reportingCycle"]
        except KeyError as exc:
            raise ConfigError(f"Missing required setting: {exc.args[0]}") from exc
        if isinstance(targets, str) or not isinstance(targets, (list, tuple)):
            raise ConfigError("target must be a list of strings")

        clean_paths = data.get("cleanPaths")
        max_file_age = data.get("maxFileAge")
        if (clean_paths is None) != (max_file_age is None):
            raise ConfigError("cleanPaths and maxFileAge must be set together")
        retention = None
        if clean_paths is not None:
            retention = RetentionConfig(
                paths=[str(p) for p in clean_paths],
                max_age=parse_duration(max_file_age),
            )

        try:
            port = int(data.get("hostTestPort", DEFAULT_HOST_TEST_PORT))
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid hostTestPort: {data.get('hostTestPort')!r}") from exc

        return cls(
            targets=[str(t) for t in targets],
            reporting_cycle=parse_duration(cycle),
            host_test_port=port,
            probe_timeout=parse_duration(data.get("probeTimeout", DEFAULT_PROBE_TIMEOUT)),
            retention=retention,
        )
