from enum import Enum

import pytest

from kubecluster import metrics
from kubecluster.metrics import CounterVec


class Kind(str, Enum):
    SLURM = "slurm"


def test_counter_vec_counts_per_label_values():
    vec = CounterVec("demo_total", "demo", ["a", "b"])
    vec.with_label_values("x", "y").inc()
    vec.with_label_values("x", "y").inc()
    vec.with_label_values("x", "z").inc()
    assert vec.value("x", "y") == 2
    assert vec.value("x", "z") == 1
    assert vec.value("q", "q") == 0


def test_counter_vec_rejects_wrong_label_count():
    vec = CounterVec("demo_total", "demo", ["a", "b"])
    with pytest.raises(ValueError):
        vec.with_label_values("only-one")
    with pytest.raises(ValueError):
        vec.value("a", "b", "c")


def test_counter_rejects_negative_increment():
    vec = CounterVec("demo_total", "demo", ["a"])
    counter = vec.with_label_values("x")
    with pytest.raises(ValueError):
        counter.inc(-1)
    assert vec.value("x") == 0


def test_enum_label_uses_its_value():
    vec = CounterVec("demo_total", "demo", ["kind"])
    vec.with_label_values(Kind.SLURM).inc()
    assert vec.value("slurm") == 1


def test_registry_holds_all_families():
    assert set(metrics.REGISTRY) == {
        "kubeclusters_created_total",
        "kubeclusters_deleted_total",
        "kubeclusters_successful_total",
        "kubeclusters_failed_total",
        "kubeclusters_restarted_total",
    }
    failed = metrics.REGISTRY["kubeclusters_failed_total"]
    assert failed.label_names == ("cluster_namespace", "cluster_schema")
    before = failed.value("ns-registry", "schema")
    failed.with_label_values("ns-registry", "schema").inc()
    assert failed.value("ns-registry", "schema") == before + 1
    assert metrics.CLUSTERS_FAILED.value("ns-registry", "schema") == before + 1


def test_successful_counter():
    before = metrics.CLUSTERS_SUCCESSFUL.value("ns-success", "t")
    metrics.successful_clusters_counter_inc("ns-success", "t")
    assert metrics.CLUSTERS_SUCCESSFUL.value("ns-success", "t") == before + 1


def test_failed_counter():
    before = metrics.CLUSTERS_FAILED.value("ns-failed", "t")
    metrics.failed_clusters_counter_inc("ns-failed", "t")
    assert metrics.CLUSTERS_FAILED.value("ns-failed", "t") == before + 1


def test_deleted_counter_accepts_enum_type():
    before = metrics.CLUSTERS_DELETED.value("ns-deleted", "slurm")
    metrics.deleted_clusters_counter_inc("ns-deleted", Kind.SLURM)
    assert metrics.CLUSTERS_DELETED.value("ns-deleted", "slurm") == before + 1


def test_restarted_counter():
    before = metrics.CLUSTERS_RESTARTED.value("ns-restarted", "t")
    metrics.restarted_clusters_counter_inc("ns-restarted", "t")
    assert metrics.CLUSTERS_RESTARTED.value("ns-restarted", "t") == before + 1


def test_created_counter_counts_on_restarted_family():
    created_before = metrics.CLUSTERS_CREATED.value("ns-created", "t")
    restarted_before = metrics.CLUSTERS_RESTARTED.value("ns-created", "t")
    metrics.created_clusters_counter_inc("ns-created", "t")
    assert metrics.CLUSTERS_RESTARTED.value("ns-created", "t") == restarted_before + 1
    assert metrics.CLUSTERS_CREATED.value("ns-created", "t") == created_before