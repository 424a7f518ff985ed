"""Loggers that carry the identity of the cluster object they report on."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

_base = logging.getLogger("kubecluster")


class FieldLogger(logging.LoggerAdapter):
    """Logger adapter that appends its fields to every message as key=value."""

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self.extra)

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        text = str(msg) % args if args else str(msg)
        pairs = " ".join(f"{key}={value}" for key, value in self.extra.items())
        kwargs.pop("extra", None)
        self.logger.log(level, "%s %s", text, pairs, **kwargs)


def _with_fields(**fields: Any) -> FieldLogger:
    return FieldLogger(_base, fields)


def _controller_of(owner_references: Iterable[Any]) -> Optional[Any]:
    return next((ref for ref in owner_references if ref.controller), None)


def _owning_cluster(obj: Any, kind: str) -> str:
    ref = _controller_of(obj.owner_references)
    if ref is not None and ref.kind == kind:
        return f"{obj.namespace}.{ref.name}"
    return ""


def logger_for_replica(cluster: Any, rtype: str) -> FieldLogger:
    return _with_fields(**{
        "cluster": f"{cluster.namespace}.{cluster.name}",
        "uid": cluster.uid,
        "replica-type": rtype,
    })


def logger_for_cluster(cluster: Any) -> FieldLogger:
    return _with_fields(cluster=f"{cluster.namespace}.{cluster.name}", uid=cluster.uid)


def logger_for_pod(pod: Any, kind: str) -> FieldLogger:
    return _with_fields(
        cluster=_owning_cluster(pod, kind),
        pod=f"{pod.namespace}.{pod.name}",
        uid=pod.uid,
    )


def logger_for_service(svc: Any, kind: str) -> FieldLogger:
    return _with_fields(
        cluster=_owning_cluster(svc, kind),
        service=f"{svc.namespace}.{svc.name}",
        uid=svc.uid,
    )


def logger_for_config_map(cm: Any, kind: str) -> FieldLogger:
    return _with_fields(
        kcluster=_owning_cluster(cm, kind),
        configMap=f"{cm.namespace}.{cm.name}",
        uid=cm.uid,
    )


def logger_for_key(key: str) -> FieldLogger:
    """Logger for a work-queue key of the form namespace/name."""
    return _with_fields(cluster=key.replace("/", "."))