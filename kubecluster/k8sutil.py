"""Helpers over pods and replica specs."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from kubecluster.objects import Pod, PodPhase, ReplicaSpec, ReplicaStatus

log = logging.getLogger(__name__)


def filter_active_pods(pods: Iterable[Pod]) -> list[Pod]:
    """Return the pods that have not terminated."""
    result = []
    for pod in pods:
        if is_pod_active(pod):
            result.append(pod)
        else:
            log.info(
                "Ignoring inactive pod %s/%s in state %s, deletion time %s",
                pod.namespace, pod.name, pod.phase, pod.deletion_timestamp,
            )
    return result


def is_pod_active(pod: Pod) -> bool:
    return (
        pod.phase not in (PodPhase.SUCCEEDED, PodPhase.FAILED)
        and pod.deletion_timestamp is None
    )


def filter_pod_count(pods: Iterable[Pod], phase: PodPhase) -> int:
    """Count the pods in the given phase."""
    return sum(1 for pod in pods if pod.phase == phase)


def get_total_replicas(replicas: Mapping[str, ReplicaSpec]) -> int:
    """Sum of desired replicas; an unset count stands for one."""
    return sum(1 if r.replicas is None else r.replicas for r in replicas.values())


def get_total_failed_replicas(replicas: Mapping[str, ReplicaStatus]) -> int:
    return sum(status.failed for status in replicas.values())