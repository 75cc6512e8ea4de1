import pytest

from autoflipper.cluster import (
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    ApiError,
    Deployment,
    EventRecorder,
    ForbiddenError,
    InMemoryClient,
    NamespacedName,
    NotFoundError,
    ignore_not_found,
)
from autoflipper.types import FlipPhase, Flipper, FlipperSpec, MatchFilter

PATCH_METHOD = "patch"


def make_deployment(name="mydeployment", namespace="default", labels=None, ready=1):
    return Deployment(
        name=name,
        namespace=namespace,
        labels=dict(labels if labels is not None else {"app": "myapp"}),
        replicas=1,
        ready_replicas=ready,
    )


def key(obj):
    return NamespacedName(obj.namespace, obj.name)


def send_merge(client, obj):
    """Send obj to the client's merge-patch method."""
    method = getattr(client, PATCH_METHOD)
    return method(obj)


def test_namespaced_name_str():
    assert str(NamespacedName("default", "mydeployment")) == "default/mydeployment"


def test_create_then_get_round_trip():
    dep = make_deployment()
    client = InMemoryClient([dep])
    got = client.get(Deployment, key(dep))
    assert got == dep
    assert got is not dep


def test_get_accepts_kind_name():
    dep = make_deployment()
    client = InMemoryClient([dep])
    assert client.get(Deployment.KIND, key(dep)).name == dep.name


def test_get_returns_independent_copy():
    dep = make_deployment()
    client = InMemoryClient([dep])
    got = client.get(Deployment, key(dep))
    got.annotations["changed"] = "x"
    assert "changed" not in client.get(Deployment, key(dep)).annotations


def test_get_missing_raises_not_found():
    client = InMemoryClient()
    with pytest.raises(NotFoundError) as info:
        client.get(Deployment, NamespacedName("default", "mydeployment"))
    assert "mydeployment" in str(info.value)


def test_create_duplicate_raises():
    dep = make_deployment()
    client = InMemoryClient([dep])
    with pytest.raises(ApiError) as info:
        client.create(dep)
    assert not isinstance(info.value, NotFoundError)
    assert info.value.reason == "AlreadyExists"


def test_list_filters_by_labels():
    client = InMemoryClient(
        [
            make_deployment("a", labels={"app": "myapp"}),
            make_deployment("b", labels={"app": "other"}),
            make_deployment("c", labels={"app": "myapp", "tier": "web"}),
        ]
    )
    names = [d.name for d in client.list_deployments("", {"app": "myapp"})]
    assert names == ["a", "c"]


def test_list_filters_by_namespace():
    client = InMemoryClient(
        [make_deployment("a", namespace="one"), make_deployment("b", namespace="two")]
    )
    names = [d.name for d in client.list_deployments("two", {"app": "myapp"})]
    assert names == ["b"]


def test_list_with_no_labels_matches_every_deployment():
    flipper = Flipper(name="f", namespace="default")
    client = InMemoryClient([make_deployment("a"), make_deployment("b", labels={}), flipper])
    assert len(client.list_deployments("", {})) == 2
    assert len(client) == 3


def test_patch_merges_annotations_and_keeps_status():
    dep = make_deployment(ready=1)
    dep.annotations["keep"] = "yes"
    client = InMemoryClient([dep])
    changed = dep.copy()
    changed.annotations = {"added": "1"}
    changed.template_annotations["restart"] = "now"
    changed.ready_replicas = 0
    send_merge(client, changed)
    stored = client.get(Deployment, key(dep))
    assert stored.annotations == {"keep": "yes", "added": "1"}
    assert stored.template_annotations == {"restart": "now"}
    assert stored.ready_replicas == 1


def test_patch_missing_raises_not_found():
    with pytest.raises(NotFoundError):
        send_merge(InMemoryClient(), make_deployment())


def test_update_status_deployment():
    dep = make_deployment(ready=0)
    client = InMemoryClient([dep])
    dep.ready_replicas = 1
    dep.annotations["ignored"] = "x"
    client.update_status(dep)
    stored = client.get(Deployment, key(dep))
    assert stored.is_ready()
    assert stored.annotations == {}


def test_update_status_flipper_changes_only_status():
    flipper = Flipper(
        name="f",
        namespace="default",
        spec=FlipperSpec(match=MatchFilter(labels={"app": "myapp"})),
    )
    client = InMemoryClient([flipper])
    changed = flipper.copy()
    changed.status.phase = FlipPhase.SUCCEEDED
    changed.spec.interval = "5m"
    client.update_status(changed)
    stored = client.get(Flipper, key(flipper))
    assert stored.status.phase is FlipPhase.SUCCEEDED
    assert stored.spec.interval == ""


def test_delete_removes_object():
    dep = make_deployment()
    client = InMemoryClient([dep])
    client.delete(dep)
    with pytest.raises(NotFoundError):
        client.get(Deployment, key(dep))


def test_delete_missing_raises():
    with pytest.raises(NotFoundError):
        InMemoryClient().delete(make_deployment())


def test_injected_error_is_raised():
    dep = make_deployment()
    client = InMemoryClient([dep], errors={PATCH_METHOD: ForbiddenError("Deployment", dep.name)})
    with pytest.raises(ForbiddenError):
        send_merge(client, dep)
    assert client.get(Deployment, key(dep)) == dep


def test_ignore_not_found():
    forbidden = ForbiddenError("Deployment", "x")
    assert ignore_not_found(NotFoundError("Deployment", "x")) is None
    assert ignore_not_found(None) is None
    assert ignore_not_found(forbidden) is forbidden


@pytest.mark.parametrize("ready,expected", [(1, True), (0, False), (2, False)])
def test_is_ready(ready, expected):
    assert make_deployment(ready=ready).is_ready() is expected


def test_deployment_copy_is_independent():
    dep = make_deployment()
    clone = dep.copy()
    clone.labels["app"] = "changed"
    assert dep.labels == {"app": "myapp"}


def test_event_recorder_keeps_events_in_order():
    recorder = EventRecorder()
    dep = make_deployment()
    first = recorder.event(dep, EVENT_TYPE_WARNING, "First", "one")
    recorder.event(dep, EVENT_TYPE_NORMAL, "Second", "two")
    assert len(recorder) == 2
    assert [e.reason for e in recorder] == ["First", "Second"]
    assert first.kind == Deployment.KIND
    assert first.key == key(dep)
    assert first.message == "one"
    assert first.event_type == EVENT_TYPE_WARNING