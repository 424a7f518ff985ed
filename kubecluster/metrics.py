"""Counters of cluster lifecycle events."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any


class _Counter:
    """A single monotonically increasing counter."""

    def __init__(self) -> None:
        self._value = 0.0
        self._lock = threading.Lock()

    def inc(self, amount: float = 1.0) -> None:
        if amount < 0:
            raise ValueError("counters can only be incremented by non-negative amounts")
        with self._lock:
            self._value += amount

    @property
    def value(self) -> float:
        with self._lock:
            return self._value


class CounterVec:
    """A family of counters told apart by their label values."""

    def __init__(self, name: str, help: str, label_names: list[str]) -> None:
        self.name = name
        self.help = help
        self.label_names = tuple(label_names)
        self._children: dict[tuple[str, ...], _Counter] = {}
        self._lock = threading.Lock()

    def _key(self, args: tuple[Any, ...]) -> tuple[str, ...]:
        if len(args) != len(self.label_names):
            raise ValueError(
                f"{self.name}: expected {len(self.label_names)} label values, got {len(args)}"
            )
        return tuple(str(a.value) if isinstance(a, Enum) else str(a) for a in args)

    def with_label_values(self, *args: Any) -> _Counter:
        """The counter for these label values, created on first use."""
        key = self._key(args)
        with self._lock:
            child = self._children.get(key)
            if child is None:
                child = self._children[key] = _Counter()
            return child

    def value(self, *args: Any) -> float:
        """Current count for these label values; zero if never incremented."""
        key = self._key(args)
        with self._lock:
            child = self._children.get(key)
        return 0.0 if child is None else child.value


REGISTRY: dict[str, CounterVec] = {}


def _register(counter: CounterVec) -> CounterVec:
    if counter.name in REGISTRY:
        raise ValueError(f"duplicate metrics collector registration: {counter.name}")
    REGISTRY[counter.name] = counter
    return counter


CLUSTERS_CREATED = _register(
    CounterVec(
        "kubeclusters_created_total",
        "Counts number of clusters created",
        ["cluster_namespace", "cluster_type"],
    )
)
CLUSTERS_DELETED = _register(
    CounterVec(
        "kubeclusters_deleted_total",
        "Counts number of clusters deleted",
        ["cluster_namespace", "cluster_type"],
    )
)
CLUSTERS_SUCCESSFUL = _register(
    CounterVec(
        "kubeclusters_successful_total",
        "Counts number of clusters successful",
        ["cluster_namespace", "cluster_type"],
    )
)
CLUSTERS_FAILED = _register(
    CounterVec(
        "kubeclusters_failed_total",
        "Counts number of clusters failed",
        ["cluster_namespace", "cluster_schema"],
    )
)
CLUSTERS_RESTARTED = _register(
    CounterVec(
        "kubeclusters_restarted_total",
        "Counts number of clusters restarted",
        ["cluster_namespace", "cluster_type"],
    )
)


def created_clusters_counter_inc(cluster_namespace: str, cluster_type: str) -> None:
    # Counted on the restarted family, as the controller has always done.
    CLUSTERS_RESTARTED.with_label_values(cluster_namespace, cluster_type).inc()


def deleted_clusters_counter_inc(cluster_namespace: str, cluster_type: Any) -> None:
    CLUSTERS_DELETED.with_label_values(cluster_namespace, cluster_type).inc()


def successful_clusters_counter_inc(cluster_namespace: str, cluster_type: str) -> None:
    CLUSTERS_SUCCESSFUL.with_label_values(cluster_namespace, cluster_type).inc()


def failed_clusters_counter_inc(cluster_namespace: str, cluster_type: str) -> None:
    CLUSTERS_FAILED.with_label_values(cluster_namespace, cluster_type).inc()


def restarted_clusters_counter_inc(cluster_namespace: str, cluster_type: str) -> None:
    CLUSTERS_RESTARTED.with_label_values(cluster_namespace, cluster_type).inc()