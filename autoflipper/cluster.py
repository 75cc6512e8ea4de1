"""Cluster objects, API errors, event recording and an in-memory client."""

import copy as _copy
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


@dataclass(frozen=True)
class NamespacedName:
    """The namespace and name that identify an object."""

    namespace: str = ""
    name: str = ""

    def __str__(self):
        return f"{self.namespace}/{self.name}"


def _key_of(obj):
    return NamespacedName(namespace=obj.namespace, name=obj.name)


def _kind_of(kind):
    """Accept a kind name or a class carrying a KIND attribute."""
    if isinstance(kind, str):
        return kind
    return getattr(kind, "KIND", getattr(kind, "__name__", str(kind)))


def _object_kind(obj):
    return getattr(type(obj), "KIND", type(obj).__name__)


@dataclass
class Deployment:
    """A deployment: metadata, desired and ready replicas, pod template annotations."""

    KIND: ClassVar[str] = "Deployment"

    name: str = ""
    namespace: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    replicas: int = 1
    ready_replicas: int = 0
    template_annotations: Dict[str, str] = field(default_factory=dict)

    def is_ready(self):
        """True when every desired replica is ready."""
        return self.ready_replicas == self.replicas

    def copy(self):
        """Return an independent deep copy."""
        return _copy.deepcopy(self)


class ApiError(Exception):
    """An error reported by the cluster API."""

    def __init__(self, message, reason="Unknown", code=500):
        super().__init__(message)
        self.reason = reason
        self.code = code


class NotFoundError(ApiError):
    """The requested object does not exist."""

    def __init__(self, kind, name):
        super().__init__(f'{kind} "{name}" not found', reason="NotFound", code=404)
        self.kind = kind
        self.name = name


class ForbiddenError(ApiError):
    """The operation on the object is not allowed."""

    def __init__(self, kind, name, detail=""):
        super().__init__(f'{kind} "{name}" is forbidden: {detail}', reason="Forbidden", code=403)
        self.kind = kind
        self.name = name


def ignore_not_found(error):
    """Return None for a not-found error (or None), otherwise the error itself."""
    if error is None or isinstance(error, NotFoundError):
        return None
    return error


@dataclass(frozen=True)
class Event:
    """An event recorded against an object."""

    kind: str
    key: NamespacedName
    event_type: str
    reason: str
    message: str


class EventRecorder:
    """Collects events in the order they are recorded."""

    def __init__(self):
        self.events = []

    def event(self, obj, event_type, reason, message):
        """Record an event about obj and return it."""
        recorded = Event(
            kind=_object_kind(obj),
            key=_key_of(obj),
            event_type=event_type,
            reason=reason,
            message=message,
        )
        self.events.append(recorded)
        return recorded

    def __iter__(self):
        return iter(self.events)

    def __len__(self):
        return len(self.events)


class InMemoryClient:
    """A cluster client keeping objects in memory.

    ``errors`` maps an operation name ("create", "get", "list", "patch",
    "update_status", "delete") to an exception that operation raises.
    """

    def __init__(self, objects=(), errors=None):
        self._store = {}
        self.errors = {}
        for obj in objects:
            self.create(obj)
        self.errors = dict(errors or {})

    def _check(self, operation):
        error = self.errors.get(operation)
        if error is not None:
            raise error

    @staticmethod
    def _store_key(kind, key):
        return (kind, key.namespace, key.name)

    def _stored(self, obj):
        kind = _object_kind(obj)
        stored = self._store.get(self._store_key(kind, _key_of(obj)))
        if stored is None:
            raise NotFoundError(kind, obj.name)
        return stored

    def create(self, obj):
        """Store a copy of a new object."""
        self._check("create")
        kind = _object_kind(obj)
        store_key = self._store_key(kind, _key_of(obj))
        if store_key in self._store:
            raise ApiError(f'{kind} "{obj.name}" already exists', reason="AlreadyExists", code=409)
        self._store[store_key] = _copy.deepcopy(obj)

    def get(self, kind, key):
        """Return a copy of the object of the given kind at key."""
        self._check("get")
        kind_name = _kind_of(kind)
        stored = self._store.get(self._store_key(kind_name, key))
        if stored is None:
            raise NotFoundError(kind_name, key.name)
        return _copy.deepcopy(stored)

    def list_deployments(self, namespace, labels):
        """Return copies of deployments carrying all the labels, in an optional namespace."""
        self._check("list")
        wanted = dict(labels or {})
        found = [
            obj
            for (kind, obj_namespace, _), obj in self._store.items()
            if kind == Deployment.KIND
            and (not namespace or obj_namespace == namespace)
            and all(obj.labels.get(k) == v for k, v in wanted.items())
        ]
        found.sort(key=lambda obj: (obj.namespace, obj.name))
        return [_copy.deepcopy(obj) for obj in found]

    def patch(self, obj):
        """Merge the object's metadata and template changes into the stored one."""
        self._check("patch")
        stored = self._stored(obj)
        if isinstance(stored, Deployment):
            stored.labels.update(obj.labels)
            stored.annotations.update(obj.annotations)
            stored.template_annotations.update(obj.template_annotations)
            stored.replicas = obj.replicas
        else:
            replacement = _copy.deepcopy(obj)
            replacement.status = stored.status
            self._store[self._store_key(_object_kind(obj), _key_of(obj))] = replacement

    def update_status(self, obj):
        """Replace the stored object's status with the one given."""
        self._check("update_status")
        stored = self._stored(obj)
        if isinstance(stored, Deployment):
            stored.ready_replicas = obj.ready_replicas
        else:
            stored.status = _copy.deepcopy(obj.status)

    def delete(self, obj):
        """Remove the object."""
        self._check("delete")
        self._stored(obj)
        del self._store[self._store_key(_object_kind(obj), _key_of(obj))]

    def __len__(self):
        return len(self._store)


def _optional(value: Optional[object]):
    return value