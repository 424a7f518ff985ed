"""Cluster conditions: queries and updates."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from kubecluster.objects import (
    ClusterCondition,
    ClusterConditionType,
    ClusterStatus,
    ConditionStatus,
)

CLUSTER_CREATED_REASON = "Created"
CLUSTER_RUNNING_REASON = "Running"
CLUSTER_FAILED_REASON = "Failed"
CLUSTER_RESTARTING_REASON = "Restarting"
CLUSTER_FAILED_VALIDATION_REASON = "FailedValidation"
CLUSTER_SUSPENDED_REASON = "Suspended"
CLUSTER_RESUMED_REASON = "Resumed"


def new_reason(kind: str, reason: str) -> str:
    return f"{kind}{reason}"


def is_finished(status: ClusterStatus) -> bool:
    """A cluster is finished once it has failed."""
    return is_failed(status)


def is_failed(status: ClusterStatus) -> bool:
    return _is_condition_true(status, ClusterConditionType.FAILED)


def is_running(status: ClusterStatus) -> bool:
    return _is_condition_true(status, ClusterConditionType.RUNNING)


def is_suspended(status: ClusterStatus) -> bool:
    return _is_condition_true(status, ClusterConditionType.SUSPENDED)


def update_cluster_conditions(
    status: ClusterStatus,
    condition_type: ClusterConditionType,
    condition_status: ConditionStatus,
    reason: str,
    message: str,
) -> None:
    """Add or replace the condition of the given type, if it changed."""
    now = datetime.now(timezone.utc)
    condition = ClusterCondition(
        type=condition_type,
        status=condition_status,
        reason=reason,
        message=message,
        last_update_time=now,
        last_transition_time=now,
    )
    _set_condition(status, condition)


def _is_condition_true(status: ClusterStatus, cond_type: ClusterConditionType) -> bool:
    return any(
        c.type == cond_type and c.status == ConditionStatus.TRUE for c in status.conditions
    )


def _get_condition(
    status: ClusterStatus, cond_type: ClusterConditionType
) -> Optional[ClusterCondition]:
    return next((c for c in status.conditions if c.type == cond_type), None)


def _set_condition(status: ClusterStatus, condition: ClusterCondition) -> None:
    if is_failed(status):
        return
    current = _get_condition(status, condition.type)
    if current is not None and current.status == condition.status:
        if current.reason == condition.reason:
            return
        condition.last_transition_time = current.last_transition_time
    status.conditions = _filter_out_condition(status.conditions, condition.type)
    status.conditions.append(condition)


def _filter_out_condition(
    conditions: list[ClusterCondition], cond_type: ClusterConditionType
) -> list[ClusterCondition]:
    running = ClusterConditionType.RUNNING
    restarting = ClusterConditionType.RESTARTING
    result = []
    for c in conditions:
        if cond_type == restarting and c.type == running:
            continue
        if cond_type == running and c.type == restarting:
            continue
        if c.type == cond_type:
            continue
        if cond_type == ClusterConditionType.FAILED and c.type == running:
            c = replace(c, status=ConditionStatus.FALSE)
        result.append(c)
    return result