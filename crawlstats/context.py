from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from .metrics import StatsAggregator
from .models import StatsIdentity
from .push import PushSink

IdentityCallback = Callable[[], StatsIdentity]
HostsCallback = Callable[[], List[str]]


@dataclass(frozen=True)
class StatsContext:
    """Everything a reporting loop needs, wired together once at startup.

    get_identity must be fast and must not raise. get_hosts may raise; the
    failure only costs that cycle its host probes."""

    aggregator: StatsAggregator
    get_identity: IdentityCallback
    get_hosts: HostsCallback
    push_sink: PushSink
