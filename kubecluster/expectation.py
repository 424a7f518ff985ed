"""Expectations: what a controller waits to observe before its next sync."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

log = logging.getLogger(__name__)

# If a watch drops an event, a controller waiting on it is woken up after this
# many seconds anyway.
EXPECTATIONS_TIMEOUT = 5 * 60.0

Clock = Callable[[], float]


class ControlleeExpectations:
    """Counters of creations and deletions a controller still expects."""

    def __init__(
        self,
        key: str,
        add: int = 0,
        delete: int = 0,
        timestamp: Optional[float] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.key = key
        self._clock = clock
        self.timestamp = clock() if timestamp is None else timestamp
        self._add = add
        self._del = delete
        self._lock = threading.Lock()

    def add(self, add: int, delete: int) -> None:
        """Increment the add and delete counters."""
        with self._lock:
            self._add += add
            self._del += delete

    def fulfilled(self) -> bool:
        """Whether every expected creation and deletion has been observed."""
        with self._lock:
            return self._add <= 0 and self._del <= 0

    def get_expectations(self) -> tuple[int, int]:
        """Return the (add, delete) counters."""
        with self._lock:
            return self._add, self._del

    def is_expired(self) -> bool:
        return self._clock() - self.timestamp > EXPECTATIONS_TIMEOUT

    def __repr__(self) -> str:
        add, delete = self.get_expectations()
        return (
            f"ControlleeExpectations(key={self.key!r}, add={add}, "
            f"delete={delete}, timestamp={self.timestamp!r})"
        )


class ControllerExpectations:
    """Store mapping controller keys to their expectations.

    With a ttl, entries older than ttl seconds are treated as absent.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Clock = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._store: dict[str, ControlleeExpectations] = {}
        self._pre_satisfied: dict[str, bool] = {}
        self._lock = threading.Lock()

    def _lookup(self, controller_key: str) -> Optional[ControlleeExpectations]:
        with self._lock:
            exp = self._store.get(controller_key)
            if (
                exp is not None
                and self._ttl is not None
                and self._clock() - exp.timestamp > self._ttl
            ):
                del self._store[controller_key]
                return None
            return exp

    def get_expectations(self, controller_key: str) -> Optional[ControlleeExpectations]:
        """Return the expectations of the controller, or None if it has none."""
        return self._lookup(controller_key)

    def delete_expectations(self, controller_key: str) -> None:
        with self._lock:
            self._store.pop(controller_key, None)

    def satisfied_expectations(self, controller_key: str) -> bool:
        """Whether the controller's expectations were met or have expired."""
        exp = self.get_expectations(controller_key)
        if exp is None:
            log.debug(
                "Controller %s either never recorded expectations, or the ttl expired.",
                controller_key,
            )
            return True
        if exp.fulfilled():
            log.debug("Controller expectations fulfilled %r", exp)
            return True
        if exp.is_expired():
            log.debug("Controller expectations expired %r", exp)
            return True
        log.debug("Controller still waiting on expectations %r", exp)
        return False

    def set_expectations(self, controller_key: str, add: int, delete: int) -> None:
        """Register new expectations, replacing any existing ones."""
        exp = ControlleeExpectations(controller_key, add, delete, clock=self._clock)
        log.debug("Setting expectations %r", exp)
        with self._lock:
            self._store[controller_key] = exp

    def expect_creations(self, controller_key: str, adds: int) -> None:
        self.set_expectations(controller_key, adds, 0)

    def expect_deletions(self, controller_key: str, dels: int) -> None:
        self.set_expectations(controller_key, 0, dels)

    def lower_expectations(self, controller_key: str, add: int, delete: int) -> None:
        exp = self.get_expectations(controller_key)
        if exp is not None:
            exp.add(-add, -delete)
            log.debug("Lowered expectations %r", exp)

    def raise_expectations(self, controller_key: str, add: int, delete: int) -> None:
        exp = self.get_expectations(controller_key)
        if exp is not None:
            exp.add(add, delete)
            log.debug("Raised expectations %r", exp)

    def creation_observed(self, controller_key: str) -> None:
        self.lower_expectations(controller_key, 1, 0)

    def deletion_observed(self, controller_key: str) -> None:
        self.lower_expectations(controller_key, 0, 1)

    def set_pre_satisfied_expectations(self, controller_key: str, satisfied: bool) -> None:
        """Record whether the controller's expectations count as met in advance."""
        with self._lock:
            self._pre_satisfied[controller_key] = bool(satisfied)
        log.debug("Set pre-satisfied expectations %s=%s", controller_key, satisfied)

    def pre_satisfied_expectations(self, controller_key: str) -> bool:
        """Whether a True pre-satisfied marker is recorded for the controller."""
        with self._lock:
            return self._pre_satisfied.get(controller_key, False)


def gen_expectation_pods_key(cluster_key: str, replica_type: str) -> str:
    return f"{cluster_key}/{str(replica_type).lower()}/pods"


def gen_expectation_services_key(cluster_key: str, replica_type: str) -> str:
    return f"{cluster_key}/{str(replica_type).lower()}/services"


def gen_expectation_config_map_key(cluster_key: str) -> str:
    return f"{cluster_key}/configmap"


def gen_pre_satisfied_key(cluster_key: str) -> str:
    return f"{cluster_key}/presatisfied"