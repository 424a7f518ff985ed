# kubecluster

Building blocks for a controller that keeps a replicated cluster of pods and
services in its desired state. Everything works on plain Python objects: the
package holds the bookkeeping and the decisions, not the calls that carry
them out.

## Modules

- `kubecluster.objects`: dataclasses for pods, services, config maps,
  containers, pod templates, replica specs and statuses, run policies and
  cluster status, with enums `PodPhase`, `ConditionStatus`, `RestartPolicy`
  and `ClusterConditionType`. Helpers: `max_int`, `gen_general_name`
  (`"<cluster>-<type>-<index>"`, with `/` replaced by `-`),
  `is_retryable_exit_code` (exit codes 128 and above) and
  `is_cluster_suspended`.
- `kubecluster.labels`: label keys and helpers to read and write the replica
  index, replica type, cluster role and cluster type. `replica_index` raises
  `ValueError` when the label is missing or not an integer.
- `kubecluster.status`: queries `is_failed`, `is_running`, `is_suspended`,
  `is_finished` (true once the cluster has failed) and
  `update_cluster_conditions`. A new condition replaces one of the same type;
  Running and Restarting replace each other; adding Failed sets Running to
  False; once Failed, the conditions no longer change.
- `kubecluster.workload`: filters pods and services by replica type, groups
  them into per-index slices (`get_pod_slices`, `get_service_slices`), sizes
  those slices, copies a replica's restart policy onto a pod template
  (`ExitCode` becomes `Never`), reads a container's ports
  (`get_ports_from_cluster`, raising `LookupError` when the container is
  absent) and detects custom scheduler names.
- `kubecluster.k8sutil`: active-pod filtering, counting pods by phase, and
  totals of desired and failed replicas.
- `kubecluster.expectation`: `ControllerExpectations` tracks creations and
  deletions still pending per controller key. Entries are satisfied once both
  counters drop to zero or below, or after five minutes; an optional `ttl`
  and `clock` can be given. Key helpers such as `gen_expectation_pods_key`
  build the keys.
- `kubecluster.cluster`: `past_backoff_limit`, `past_active_deadline`,
  `record_abnormal_pods` (into an in-memory `EventRecorder`),
  `initialize_replica_statuses` and `update_cluster_replica_statuses`.
- `kubecluster.scheduling`: `ClusterControllerConfiguration`,
  `GangScheduler` and `calc_pg_min_resources`, which sums the requests (or,
  where a container has none, the limits) of the first `min_member` pods,
  with higher-priority replicas counted first.
- `kubecluster.quota`: exact `Quantity` values and `parse_quantity` (`"500m"`,
  `"1Gi"`, `"1e3"`, ...), arithmetic and comparison over resource lists, a
  `Registry` of evaluators and `calculate_usage`, which raises
  `QuotaCalculationError` (carrying the partial usage) when an evaluator
  fails.
- `kubecluster.metrics`: in-process labelled counters (`CounterVec`) and
  increment helpers for created, deleted, successful, failed and restarted
  clusters. `created_clusters_counter_inc` increments the restarted-clusters
  counter.
- `kubecluster.logger`: `logger_for_cluster`, `logger_for_pod` and friends
  return log adapters that append `key=value` context to each message.
- `kubecluster.randstr`: `rand_str(n)` returns `n` random ASCII letters.

## Installation

```
pip install kubecluster
```

To run the tests:

```
pip install "kubecluster[test]"
pytest
```

## Example

```python
from kubecluster import labels, status, workload
from kubecluster.expectation import ControllerExpectations
from kubecluster.objects import ClusterConditionType, ClusterStatus, ConditionStatus, Pod
from kubecluster.quota import add, parse_quantity

pods = [Pod(name=f"demo-worker-{i}", labels={}) for i in range(3)]
for i, pod in enumerate(pods):
    labels.set_replica_type(pod.labels, "worker")
    labels.set_replica_index(pod.labels, i)

workers = workload.filter_pods_for_replica_type(pods, "worker")
print(workload.calculate_pod_slice_size(workers, 4))  # 4: one replica is missing

st = ClusterStatus()
status.update_cluster_conditions(
    st, ClusterConditionType.RUNNING, ConditionStatus.TRUE, "Running", "cluster is running"
)
print(status.is_running(st))  # True

expectations = ControllerExpectations()
expectations.set_expectations("default/demo/worker/pods", 2, 0)
expectations.creation_observed("default/demo/worker/pods")
print(expectations.satisfied_expectations("default/demo/worker/pods"))  # False
expectations.creation_observed("default/demo/worker/pods")
print(expectations.satisfied_expectations("default/demo/worker/pods"))  # True

total = add({"cpu": parse_quantity("500m")}, {"cpu": parse_quantity("1")})
print(total["cpu"])  # 1500m
```

## What it does not do

The package does not talk to a cluster's API server, watch resources, or run
a reconcile loop; it creates and deletes nothing itself. Events go to an
in-memory `EventRecorder` and counters stay in process, with no metrics
endpoint. There is no command-line program.