"""Reconciliation helpers for replicated clusters of pods and services."""

__version__ = "0.1.0"

__all__ = [
    "cluster",
    "expectation",
    "k8sutil",
    "labels",
    "logger",
    "metrics",
    "objects",
    "quota",
    "randstr",
    "scheduling",
    "status",
    "workload",
]