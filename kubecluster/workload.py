"""Grouping of replica pods and services by type and index."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional, Sequence, TypeVar, Union

from kubecluster.labels import REPLICA_TYPE_LABEL, replica_index
from kubecluster.objects import (
    PodTemplate,
    Pod,
    ReplicaSpec,
    RestartPolicy,
    Service,
    max_int,
)

log = logging.getLogger(__name__)

Logger = Union[logging.Logger, logging.LoggerAdapter]
T = TypeVar("T", Pod, Service)


def _filter_for_replica_type(objects: Iterable[T], replica_type: str) -> list[T]:
    return [o for o in objects if o.labels.get(REPLICA_TYPE_LABEL) == replica_type]


def _slice_size(objects: Iterable[T], replicas: int) -> int:
    size = 0
    for obj in objects:
        try:
            index = replica_index(obj.labels)
        except ValueError:
            continue
        size = max_int(size, index)
    return max_int(size + 1, replicas)


def _slices(
    objects: Sequence[T], replicas: int, logger: Optional[Logger], what: str
) -> list[list[T]]:
    logger = logger or log
    slices: list[list[T]] = [[] for _ in range(_slice_size(objects, replicas))]
    for obj in objects:
        try:
            index = replica_index(obj.labels)
        except ValueError as err:
            logger.warning(
                "Error obtaining replica index from %s %s/%s: %s",
                what, obj.namespace, obj.name, err,
            )
            continue
        if index < 0 or index >= replicas:
            logger.warning(
                "The label index is not expected: %d, %s: %s/%s",
                index, what, obj.namespace, obj.name,
            )
        if index < 0:
            raise IndexError(f"negative replica index {index} on {obj.namespace}/{obj.name}")
        slices[index].append(obj)
    return slices


def filter_pods_for_replica_type(pods: Iterable[Pod], replica_type: str) -> list[Pod]:
    """Return the pods that belong to the replica type."""
    return _filter_for_replica_type(pods, replica_type)


def get_pod_slices(
    pods: Sequence[Pod], replicas: int, logger: Optional[Logger] = None
) -> list[list[Pod]]:
    """Group pods by replica index; slot i holds the pods of replica i."""
    return _slices(pods, replicas, logger, "pod")


def calculate_pod_slice_size(pods: Iterable[Pod], replicas: int) -> int:
    """The larger of the highest pod index plus one and the desired replicas."""
    return _slice_size(pods, replicas)


def set_restart_policy(pod_template: PodTemplate, spec: ReplicaSpec) -> None:
    """Copy the replica's restart policy onto the pod template."""
    if spec.restart_policy == RestartPolicy.EXIT_CODE:
        pod_template.restart_policy = RestartPolicy.NEVER
    else:
        pod_template.restart_policy = spec.restart_policy


def filter_services_for_replica_type(
    services: Iterable[Service], replica_type: str
) -> list[Service]:
    """Return the services that belong to the replica type."""
    return _filter_for_replica_type(services, replica_type)


def get_service_slices(
    services: Sequence[Service], replicas: int, logger: Optional[Logger] = None
) -> list[list[Service]]:
    """Group services by replica index; slot i holds the services of replica i."""
    return _slices(services, replicas, logger, "service")


def calculate_service_slice_size(services: Iterable[Service], replicas: int) -> int:
    """The larger of the highest service index plus one and the desired replicas."""
    return _slice_size(services, replicas)


def get_ports_from_cluster(
    spec: ReplicaSpec, default_container_name: str
) -> Optional[dict[str, int]]:
    """Ports of the default container, or None if it exposes none.

    Raises LookupError if no container has the default name.
    """
    for container in spec.template.containers:
        if container.name == default_container_name:
            if not container.ports:
                return None
            return {port.name: port.container_port for port in container.ports}
    raise LookupError("failed to find the port")


def is_custom_scheduler_set(
    replicas: Mapping[str, ReplicaSpec], gang_scheduler_name: str
) -> bool:
    """Whether any replica template names a scheduler other than the gang scheduler."""
    return any(
        spec.template.scheduler_name and spec.template.scheduler_name != gang_scheduler_name
        for spec in replicas.values()
    )