"""Label keys and helpers for replica pods and services."""

from __future__ import annotations

import re

REPLICA_INDEX_LABEL = "kubecluster.org/replica-index"
REPLICA_TYPE_LABEL = "kubecluster.org/replica-type"
CLUSTER_ROLE_LABEL = "kubecluster.org/cluster-role"
CLUSTER_TYPE_LABEL = "kubecluster.org/cluster-type"
CONTROLLER_NAME_LABEL = "kubecluster.org/controller-name"
CLUSTER_NAME_LABEL = "kubecluster.org/cluster-name"

_INTEGER = re.compile(r"[+-]?[0-9]+")


def replica_index(labels: dict[str, str]) -> int:
    """Return the replica index stored in the labels.

    Raises ValueError if the label is missing or is not an integer.
    """
    try:
        value = labels[REPLICA_INDEX_LABEL]
    except KeyError:
        raise ValueError("replica index label not found") from None
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"invalid replica index: {value!r}")
    return int(value)


def set_replica_index(labels: dict[str, str], idx: int) -> None:
    set_replica_index_str(labels, str(idx))


def set_replica_index_str(labels: dict[str, str], idx: str) -> None:
    labels[REPLICA_INDEX_LABEL] = idx


def gen_replica_type_label(rtype: str) -> str:
    return str(rtype).lower()


def set_replica_type(labels: dict[str, str], rt: str) -> None:
    labels[REPLICA_TYPE_LABEL] = rt


def set_cluster_role(labels: dict[str, str], role: str) -> None:
    labels[CLUSTER_ROLE_LABEL] = role


def set_cluster_type(labels: dict[str, str], cluster_type: str) -> None:
    labels[CLUSTER_TYPE_LABEL] = cluster_type


def gen_labels(controller_name: str, cluster_type: str) -> dict[str, str]:
    """Base labels carried by every object a controller creates for a cluster."""
    return {
        CONTROLLER_NAME_LABEL: controller_name,
        CLUSTER_NAME_LABEL: cluster_type.replace("/", "-"),
    }