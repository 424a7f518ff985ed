"""Gang scheduling configuration and minimum resources of a pod group."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, MutableMapping, Optional, Union

from kubecluster.objects import ReplicaSpec
from kubecluster.quota import Quantity, parse_quantity

log = logging.getLogger(__name__)


class GangScheduler(str, Enum):
    """Known gang schedulers; any other name selects scheduler-plugins."""

    NONE = "None"
    VOLCANO = "volcano"
    SCHEDULER_PLUGINS = "scheduler-plugins"


@dataclass
class ClusterControllerConfiguration:
    """Configuration of the cluster controller."""

    gang_scheduling: str = ""

    def enable_gang_scheduling(self) -> bool:
        return bool(self.gang_scheduling) and self.gang_scheduling != GangScheduler.NONE


@dataclass
class PriorityClass:
    """A named scheduling priority."""

    name: str = ""
    value: int = 0


@dataclass
class ReplicaPriority:
    """A replica spec together with its scheduling priority."""

    priority: int = 0
    spec: ReplicaSpec = field(default_factory=ReplicaSpec)


PriorityClassGetFunc = Callable[[str], Optional[PriorityClass]]
QuantityLike = Union[Quantity, str]


def _as_quantity(value: QuantityLike) -> Quantity:
    return value if isinstance(value, Quantity) else parse_quantity(value)


def _accumulate(
    resource_list: MutableMapping[str, Quantity], amounts: Mapping[str, QuantityLike]
) -> None:
    for name, amount in amounts.items():
        quantity = _as_quantity(amount)
        current = resource_list.get(name)
        resource_list[name] = quantity if current is None else current + quantity


def add_resource_list(
    resource_list: MutableMapping[str, Quantity],
    req: Optional[Mapping[str, QuantityLike]],
    limit: Optional[Mapping[str, QuantityLike]],
) -> None:
    """Add a container's requests to the list; without requests, its limits."""
    if req is not None:
        _accumulate(resource_list, req)
        return
    if limit is not None:
        _accumulate(resource_list, limit)


def calc_pg_min_resources(
    min_member: int,
    replicas: Mapping[str, ReplicaSpec],
    pc_get_func: PriorityClassGetFunc,
) -> dict[str, Quantity]:
    """Resources needed by the first min_member pods, highest priority first."""
    priorities = []
    for rtype, spec in replicas.items():
        pc_name = spec.template.priority_class_name
        priority = 0
        try:
            priority_class = pc_get_func(pc_name)
        except Exception as err:  # an unknown priority class only loses its priority
            log.warning("Ignore task %s priority class %s: %s", rtype, pc_name, err)
        else:
            if priority_class is None:
                log.warning("Ignore task %s priority class %s: not found", rtype, pc_name)
            else:
                priority = priority_class.value
        priorities.append(ReplicaPriority(priority, spec))

    priorities.sort(key=lambda rp: rp.priority, reverse=True)

    resources: dict[str, Quantity] = {}
    pod_count = 0
    for task in priorities:
        if task.spec.replicas is None:
            continue
        for _ in range(task.spec.replicas):
            if pod_count >= min_member:
                break
            pod_count += 1
            for container in task.spec.template.containers:
                add_resource_list(resources, container.requests, container.limits)
    return resources