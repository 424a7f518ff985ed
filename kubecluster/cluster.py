"""Cluster-wide checks over pods: abnormal pods, deadlines, backoff and replica counts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Mapping, Sequence

from kubecluster.objects import (
    ClusterStatus,
    ConditionStatus,
    ContainerStatus,
    Pod,
    PodPhase,
    ReplicaSpec,
    ReplicaStatus,
    RestartPolicy,
    RunPolicy,
)

log = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

PodFilterFunc = Callable[[Sequence[Pod], str], Sequence[Pod]]

_COUNTED_RESTART_POLICIES = (
    RestartPolicy.ON_FAILURE,
    RestartPolicy.ALWAYS,
    RestartPolicy.EXIT_CODE,
)


@dataclass(frozen=True)
class Event:
    """One recorded event about an object."""

    obj: Any
    event_type: str
    reason: str
    message: str


@dataclass
class EventRecorder:
    """Collects events raised about objects, in the order they were raised."""

    events: list[Event] = field(default_factory=list)

    def event(self, obj: Any, event_type: str, reason: str, message: str) -> None:
        self.events.append(Event(obj, event_type, reason, message))

    def eventf(self, obj: Any, event_type: str, reason: str, fmt: str, *args: Any) -> None:
        self.event(obj, event_type, reason, fmt % args if args else fmt)


def _record_container_status(
    pod: Pod, status: ContainerStatus, obj: Any, recorder: EventRecorder
) -> None:
    state = status.state
    if state.terminated and state.exit_code != 0:
        recorder.eventf(
            obj, EVENT_TYPE_WARNING, state.reason,
            "Error pod %s container %s exitCode: %d terminated message: %s",
            pod.name, status.name, state.exit_code, state.message,
        )
    if state.waiting and state.message:
        recorder.eventf(
            obj, EVENT_TYPE_WARNING, state.reason,
            "Error pod %s container %s waiting message: %s",
            pod.name, status.name, state.message,
        )


def record_abnormal_pods(
    active_pods: Iterable[Pod], obj: Any, recorder: EventRecorder
) -> None:
    """Record a warning for each active pod whose latest state is not healthy."""
    for pod in active_pods:
        statuses = pod.container_statuses or pod.init_container_statuses
        if statuses:
            for status in statuses:
                _record_container_status(pod, status, obj, recorder)
            continue
        if not pod.conditions:
            continue
        latest = sorted(
            pod.conditions,
            key=lambda c: (c.last_transition_time is not None, c.last_transition_time or datetime.min),
            reverse=True,
        )[0]
        if latest.status == ConditionStatus.TRUE:
            continue
        recorder.eventf(
            obj, EVENT_TYPE_WARNING, latest.reason,
            "Error pod %s condition message: %s", pod.name, latest.message,
        )


def past_active_deadline(run_policy: RunPolicy, cluster_status: ClusterStatus) -> bool:
    """Whether the cluster has been active longer than its deadline allows."""
    if run_policy.active_deadline_seconds is None or cluster_status.start_time is None:
        return False
    start = cluster_status.start_time
    duration = datetime.now(start.tzinfo) - start
    return duration >= timedelta(seconds=run_policy.active_deadline_seconds)


def past_backoff_limit(
    cluster_name: str,
    run_policy: RunPolicy,
    replicas: Mapping[str, ReplicaSpec],
    pods: Sequence[Pod],
    pod_filter_func: PodFilterFunc,
) -> bool:
    """Whether the restarts of running pods reach the backoff limit.

    Only replicas restarted on failure, always or by exit code are counted.
    Errors raised by the filter function propagate.
    """
    if run_policy.backoff_limit is None:
        return False
    restarts = 0
    for rtype, spec in replicas.items():
        if spec.restart_policy not in _COUNTED_RESTART_POLICIES:
            log.warning(
                "The restart policy of replica %s of the cluster %s is not OnFailure, "
                "Always or ExitCode. Not counted in backoff limit.",
                rtype, cluster_name,
            )
            continue
        for pod in pod_filter_func(pods, str(rtype).lower()):
            if pod.phase != PodPhase.RUNNING:
                continue
            restarts += sum(s.restart_count for s in pod.init_container_statuses)
            restarts += sum(s.restart_count for s in pod.container_statuses)
    if run_policy.backoff_limit == 0:
        return restarts > 0
    return restarts >= run_policy.backoff_limit


def initialize_replica_statuses(cluster_status: ClusterStatus, rtype: str) -> None:
    """Reset the status of one replica type to zero counts."""
    if cluster_status.replica_statuses is None:
        cluster_status.replica_statuses = {}
    cluster_status.replica_statuses[rtype] = ReplicaStatus()


def update_cluster_replica_statuses(cluster_status: ClusterStatus, rtype: str, pod: Pod) -> None:
    """Count the pod as active or failed in its replica type's status."""
    status = cluster_status.replica_statuses[rtype]
    if pod.phase == PodPhase.RUNNING:
        # A terminating running pod may never reach Failed; count it as failed.
        if pod.deletion_timestamp is not None:
            status.failed += 1
        else:
            status.active += 1
    elif pod.phase == PodPhase.FAILED:
        status.failed += 1