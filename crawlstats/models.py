from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping


class RequestOutcome(str, Enum):
    """Terminal classification of one completed request."""

    SUCCESS = "Successful"
    SUCCESS_CACHED = "SuccessfulAndCache"
    PARSE_ERROR = "ParseError"
    TIMEOUT_ERROR = "TimeoutError"
    CONNECTION_ERROR = "ConnectionError"
    STATUS_CODE_ERROR = "StatusCodeError"

    @property
    def is_success(self) -> bool:
        return self in (RequestOutcome.SUCCESS, RequestOutcome.SUCCESS_CACHED)


@dataclass(frozen=True)
class StatsIdentity:
    server_name: str
    scraper_name: str
    project_code: str
    scraper_type: str
    request_frequency: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StatsIdentity":
        return cls(
            server_name=data["serverName"],
            scraper_name=data["scraperName"],
            project_code=data["projectCode"],
            scraper_type=data["scraperType"],
            request_frequency=int(data.get("requestFrequency", 0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "serverName": self.server_name,
            "scraperName": self.scraper_name,
            "projectCode": self.project_code,
            "scraperType": self.scraper_type,
            "requestFrequency": self.request_frequency,
        }


@dataclass(frozen=True)
class TimePeriod:
    start: int
    end: int


@dataclass(frozen=True)
class ExceptionCounts:
    connection_error: int = 0
    timeout_error: int = 0
    parse_error: int = 0
    status_code_error: int = 0

    @property
    def total(self) -> int:
        return self.connection_error + self.timeout_error + self.parse_error + self.status_code_error

    def to_dict(self) -> Dict[str, int]:
        return {
            "connectionError": self.connection_error,
            "timeoutError": self.timeout_error,
            "parseError": self.parse_error,
            "statusCodeError": self.status_code_error,
        }


@dataclass(frozen=True)
class Usage:
    used: int = 0
    total: int = 0


@dataclass(frozen=True)
class SystemResources:
    cpu_usage: str = "0.00%"
    memory_usage: Usage = field(default_factory=Usage)
    disk_usage: Usage = field(default_factory=Usage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpuUsage": self.cpu_usage,
            "memoryUsage": {"used": self.memory_usage.used, "total": self.memory_usage.total},
            "diskUsage": {"used": self.disk_usage.used, "total": self.disk_usage.total},
        }


@dataclass(frozen=True)
class Report:
    """One reporting cycle's snapshot, ready to be serialized and pushed.

    Latency values are milliseconds. runtime_duration counts whole seconds
    since the aggregator was created, not since the cycle started."""

    identity: StatsIdentity
    time_period: TimePeriod
    error_rate: float
    exception_counts: ExceptionCounts
    runtime_duration: int
    total_requests: int
    cache_hit_rate: float
    cache_hit: int
    http_status_codes: Dict[str, int]
    average_request_latency: float
    hosts_ping_delay: Dict[str, float]
    system_resources: SystemResources

    def to_dict(self) -> Dict[str, Any]:
        data = self.identity.to_dict()
        data.update(
            {
                "timePeriod": {"start": self.time_period.start, "end": self.time_period.end},
                "errorRate": self.error_rate,
                "exceptionTypes": self.exception_counts.to_dict(),
                "runtimeDuration": self.runtime_duration,
                "totalRequests": self.total_requests,
                "cacheHitRate": self.cache_hit_rate,
                "cacheHit": self.cache_hit,
                "httpStatusCodes": dict(self.http_status_codes),
                "averageRequestLatency": self.average_request_latency,
                "hostsPingDelay": dict(self.hosts_ping_delay),
                "systemResources": self.system_resources.to_dict(),
            }
        )
        return data

    def to_json(self, pretty: bool = False) -> str:
        if pretty:
            return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
        return json.dumps(self.to_dict(), ensure_ascii=False)
