"""powchain.core.metrics

A tiny metrics surface: how much work went into the chain.

No Prometheus dependency here. Just a stable interface that can be wired later.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


@dataclass
class Counter:
    name: str
    _value: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, Counter] = {}

    def counter(self, name: str) -> Counter:
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name=name)
            return self._counters[name]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {k: v.value for k, v in sorted(self._counters.items())}


REGISTRY = MetricsRegistry()
