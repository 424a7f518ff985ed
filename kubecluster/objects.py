"""Core object model for clusters, replicas, pods and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class PodPhase(str, Enum):
    """Lifecycle phase of a pod."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class ConditionStatus(str, Enum):
    """Status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class RestartPolicy(str, Enum):
    """Restart policy of a replica or a pod."""

    ALWAYS = "Always"
    ON_FAILURE = "OnFailure"
    NEVER = "Never"
    EXIT_CODE = "ExitCode"


class ClusterConditionType(str, Enum):
    """Kinds of condition a cluster can carry."""

    CREATED = "Created"
    RUNNING = "Running"
    RESTARTING = "Restarting"
    FAILED = "Failed"
    SUSPENDED = "Suspended"


@dataclass
class OwnerReference:
    """Reference from a dependent object to the object that owns it."""

    api_version: str = ""
    kind: str = ""
    name: str = ""
    uid: str = ""
    controller: bool = False
    block_owner_deletion: bool = False


@dataclass
class ContainerState:
    """State of a container: waiting, terminated, or neither (running)."""

    waiting: bool = False
    terminated: bool = False
    exit_code: int = 0
    reason: str = ""
    message: str = ""


@dataclass
class ContainerStatus:
    """Observed status of one container of a pod."""

    name: str = ""
    state: ContainerState = field(default_factory=ContainerState)
    restart_count: int = 0


@dataclass
class PodCondition:
    """One condition of a pod."""

    type: str = ""
    status: ConditionStatus = ConditionStatus.UNKNOWN
    reason: str = ""
    message: str = ""
    last_transition_time: Optional[datetime] = None


@dataclass
class ContainerPort:
    """A named port exposed by a container."""

    name: str = ""
    container_port: int = 0


@dataclass
class Container:
    """A container of a pod template."""

    name: str = ""
    ports: list[ContainerPort] = field(default_factory=list)
    requests: Optional[dict] = None
    limits: Optional[dict] = None


@dataclass
class PodTemplate:
    """Template that pods of a replica are created from."""

    name: str = ""
    labels: Optional[dict[str, str]] = None
    containers: list[Container] = field(default_factory=list)
    restart_policy: Optional[RestartPolicy] = None
    scheduler_name: str = ""
    priority_class_name: str = ""


@dataclass
class Pod:
    """A pod with its metadata and observed status."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)
    deletion_timestamp: Optional[datetime] = None
    phase: Optional[PodPhase] = None
    conditions: list[PodCondition] = field(default_factory=list)
    container_statuses: list[ContainerStatus] = field(default_factory=list)
    init_container_statuses: list[ContainerStatus] = field(default_factory=list)


@dataclass
class Service:
    """A service with its metadata."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)


@dataclass
class ConfigMap:
    """A config map with its metadata and data."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)
    data: dict[str, str] = field(default_factory=dict)


@dataclass
class ReplicaSpec:
    """Desired state of one replica type of a cluster."""

    replicas: Optional[int] = None
    restart_policy: Optional[RestartPolicy] = None
    template: PodTemplate = field(default_factory=PodTemplate)


@dataclass
class ReplicaStatus:
    """Observed counts of pods of one replica type."""

    active: int = 0
    failed: int = 0
    activating: int = 0


@dataclass
class ClusterCondition:
    """One condition of a cluster."""

    type: ClusterConditionType
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_update_time: Optional[datetime] = None
    last_transition_time: Optional[datetime] = None


@dataclass
class ClusterStatus:
    """Observed state of a cluster."""

    conditions: list[ClusterCondition] = field(default_factory=list)
    replica_statuses: Optional[dict[str, ReplicaStatus]] = None
    start_time: Optional[datetime] = None
    completion_time: Optional[datetime] = None
    last_reconcile_time: Optional[datetime] = None


@dataclass
class RunPolicy:
    """Policy that governs how a cluster runs and is cleaned up."""

    active_deadline_seconds: Optional[int] = None
    backoff_limit: Optional[int] = None
    suspend: Optional[bool] = None
    clean_kube_node_policy: Optional[str] = None
    ttl_seconds_after_finished: Optional[int] = None


def max_int(x: int, y: int) -> int:
    """Return the larger of two integers."""
    return y if x < y else x


def gen_general_name(cluster_name: str, rtype: str, index: str) -> str:
    """Build the name of a replica's pod or service."""
    name = f"{cluster_name}-{str(rtype).lower()}-{index}"
    return name.replace("/", "-")


def is_retryable_exit_code(exit_code: int) -> bool:
    """Exit codes from 128 up come from signals and may be retried."""
    return exit_code >= 128


def is_cluster_suspended(run_policy: Optional[RunPolicy]) -> bool:
    """Whether the run policy asks for the cluster to be suspended."""
    return run_policy is not None and bool(run_policy.suspend)