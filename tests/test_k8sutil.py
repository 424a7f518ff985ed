from datetime import datetime, timezone

from kubecluster.k8sutil import (
    filter_active_pods,
    filter_pod_count,
    get_total_failed_replicas,
    get_total_replicas,
    is_pod_active,
)
from kubecluster.objects import Pod, PodPhase, ReplicaSpec, ReplicaStatus


def _pods():
    return [
        Pod(name="run", phase=PodPhase.RUNNING),
        Pod(name="pend", phase=PodPhase.PENDING),
        Pod(name="ok", phase=PodPhase.SUCCEEDED),
        Pod(name="bad", phase=PodPhase.FAILED),
        Pod(
            name="gone",
            phase=PodPhase.RUNNING,
            deletion_timestamp=datetime.now(timezone.utc),
        ),
    ]


def test_is_pod_active():
    pods = {p.name: p for p in _pods()}
    assert is_pod_active(pods["run"]) is True
    assert is_pod_active(pods["pend"]) is True
    assert is_pod_active(pods["ok"]) is False
    assert is_pod_active(pods["bad"]) is False
    assert is_pod_active(pods["gone"]) is False


def test_filter_active_pods_keeps_order():
    assert [p.name for p in filter_active_pods(_pods())] == ["run", "pend"]


def test_filter_active_pods_empty():
    assert filter_active_pods([]) == []


def test_filter_pod_count():
    pods = _pods()
    assert filter_pod_count(pods, PodPhase.RUNNING) == 2
    assert filter_pod_count(pods, PodPhase.FAILED) == 1
    assert filter_pod_count(pods, PodPhase.UNKNOWN) == 0


def test_get_total_replicas_defaults_to_one():
    replicas = {"a": ReplicaSpec(replicas=2), "b": ReplicaSpec()}
    assert get_total_replicas(replicas) == 3
    assert get_total_replicas({}) == 0


def test_get_total_failed_replicas():
    statuses = {"a": ReplicaStatus(failed=2), "b": ReplicaStatus(active=5, failed=1)}
    assert get_total_failed_replicas(statuses) == 3
    assert get_total_failed_replicas({}) == 0