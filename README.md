# autoflipper

`autoflipper` performs periodic rollout restarts of deployments. A
`Flipper` resource names a label set, an optional namespace and an
interval such as `"10m"`. When a flipper is reconciled, every ready
deployment that matches it receives fresh restart annotations. The
flipper's status then moves between the `Pending`, `Failed` and
`Succeeded` phases. `FlipPhase` also defines `Running`, but the
reconciler never sets it.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

### `autoflipper.types`

- `Flipper` is the resource itself. It has a `name`, a `namespace`, a
  `spec` and a `status`.
  - The `spec` is a `FlipperSpec`. It holds the `interval` and a
    `MatchFilter`, which carries `labels` and a `namespace`.
  - The `status` is a `FlipperStatus`. It holds the `phase` (a
    `FlipPhase`, or `None` before the first reconcile), the `reason`,
    the `failed_rollout_deployments` (a list of `DeploymentInfo`) and the
    `last_scheduled_rollout_time`.
- `Flipper.to_dict()` and `Flipper.from_dict()` convert a flipper to and
  from its JSON shape. `Flipper.copy()` returns a deep copy.
- `FlipperList` holds several flippers and can be iterated over.
- `GROUP_VERSION` is a `GroupVersion` for `crd.ricktech.io/v1alpha1`.

### `autoflipper.webhook`

- `default(flipper)` sets the interval to `10m0s` when it is empty.
- `validate_create(flipper)` and `validate_update(flipper, old)` raise
  `FlipperValidationError` when the interval is not a valid duration or
  when no labels are given. The error's `errors` lists every problem
  found. On success they return an empty list of warnings.
- `validate_delete(flipper)` always admits the flipper.
- `validate_flipper(flipper)` runs both checks.

### `autoflipper.duration`

`parse_duration("1h30m")` returns a `timedelta`. It accepts the units
`ns`, `us`, `µs`, `ms`, `s`, `m` and `h`, and raises `ValueError` on
malformed input. `format_duration(timedelta(minutes=10))` returns
`"10m0s"`.

### `autoflipper.cluster`

- `Deployment` holds a deployment's labels, annotations, pod-template
  annotations, `replicas` and `ready_replicas`. `is_ready()` is true
  when all replicas are ready.
- `InMemoryClient` stores `Deployment` and `Flipper` objects. It provides
  `create`, `get`, `list_deployments`, `patch`, `update_status` and
  `delete`. Its `errors` mapping makes a named operation (for example
  `"patch"` or `"list"`) raise a given exception.
- `ApiError`, `NotFoundError` and `ForbiddenError` are the errors the
  client raises. `ignore_not_found(error)` returns `None` for a
  not-found error and returns any other error unchanged.
- `EventRecorder` collects `Event`s in the order they were recorded.
- `NamespacedName(namespace, name)` identifies an object.

### `autoflipper.rollout`

- `handle_rollout_restart(client, deployment, managed_by, restart_time)`
  sets three annotations and patches the deployment:
  - `flipper.ricktech.io/managedBy` and `flipper.ricktech.io/restartedAt`
    on the deployment;
  - `kubectl.kubernetes.io/restartedAt` on its pod template.
- `handle_rollout_restart_list(...)` does the same for every deployment
  in a list and returns the ones it restarted.
  - Deployments that no longer exist are skipped.
  - Other failures are collected and raised together as
    `RolloutRestartError`, whose `failed` attribute lists the deployments
    that were not restarted.
  - Objects that are not deployments raise `UnsupportedKindError`.

### `autoflipper.controller`

`FlipperReconciler(client, recorder, clock=None)` advances a flipper by
one step each time `reconcile(key)` is called. The call returns a
`Result(requeue, requeue_after)`.

- **No phase or `Pending`:** the reconciler lists the matching
  deployments and restarts the ready ones. If none are ready, the phase
  stays `Pending` and the result asks to requeue after 10 seconds.
- **`Failed`:** the reconciler retries the deployments recorded in
  `failed_rollout_deployments`.
- **`Succeeded`:** once the interval has passed, the phase goes back to
  `Pending` and the result asks to requeue at once. Before that, the
  result asks to requeue when the interval is up.

After a successful restart, the phase is `Succeeded`, the rollout time
is recorded, and the result asks to requeue after the interval. A
missing interval, or one that cannot be parsed, counts as ten minutes.

## Example

```python
from autoflipper.cluster import Deployment, EventRecorder, InMemoryClient, NamespacedName
from autoflipper.controller import FlipperReconciler
from autoflipper.types import Flipper, FlipperSpec, MatchFilter
from autoflipper.webhook import default, validate_create

client = InMemoryClient()
client.create(Deployment(name="web", namespace="default", labels={"app": "web"},
                         replicas=1, ready_replicas=1))

flipper = Flipper(name="nightly", namespace="default",
                  spec=FlipperSpec(match=MatchFilter(labels={"app": "web"})))
default(flipper)
validate_create(flipper)
client.create(flipper)

reconciler = FlipperReconciler(client, EventRecorder())
result = reconciler.reconcile(NamespacedName("default", "nightly"))
print(result.requeue_after)   # 0:10:00, the interval until the next restart
```

## What it does not do

This package is a library.

- It keeps cluster state only in `InMemoryClient`. It does not connect
  to a real cluster.
- It has no command and no long-running manager that watches resources
  or requeues them on a timer. The caller decides when to call
  `reconcile` again, using the `Result` it returns.
- It does not serve admission requests over HTTP. The defaulting and
  validation functions are called directly.
- It has no metrics endpoint, no health probes and no leader election.