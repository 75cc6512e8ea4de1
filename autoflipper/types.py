"""Flipper resource types and the API group they belong to."""

import copy as _copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with its version."""

    group: str
    version: str

    @property
    def api_version(self):
        return f"{self.group}/{self.version}"


GROUP_VERSION = GroupVersion(group="crd.ricktech.io", version="v1alpha1")


class FlipPhase(str, Enum):
    """Phase of a scheduled rollout restart."""

    PENDING = "Pending"
    RUNNING = "Running"
    FAILED = "Failed"
    SUCCEEDED = "Succeeded"


@dataclass
class MatchFilter:
    """Selects deployments by labels within an optional namespace."""

    labels: Dict[str, str] = field(default_factory=dict)
    namespace: str = ""


@dataclass
class FlipperSpec:
    """Desired state: restart interval and deployment filter."""

    interval: str = ""
    match: MatchFilter = field(default_factory=MatchFilter)


@dataclass
class DeploymentInfo:
    """Name and namespace of a deployment."""

    name: str = ""
    namespace: str = ""


@dataclass
class FlipperStatus:
    """Observed state of a Flipper."""

    phase: Optional[FlipPhase] = None
    reason: str = ""
    failed_rollout_deployments: List[DeploymentInfo] = field(default_factory=list)
    last_scheduled_rollout_time: Optional[datetime] = None


def _format_time(value):
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_time(text):
    if not text:
        return None
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


@dataclass
class Flipper:
    """A scheduled rollout restart of matching deployments."""

    KIND = "Flipper"

    name: str = ""
    namespace: str = ""
    spec: FlipperSpec = field(default_factory=FlipperSpec)
    status: FlipperStatus = field(default_factory=FlipperStatus)

    def to_dict(self):
        """Serialise to the resource's JSON shape."""
        spec = {}
        if self.spec.interval:
            spec["interval"] = self.spec.interval
        match = {}
        if self.spec.match.labels:
            match["labels"] = dict(self.spec.match.labels)
        if self.spec.match.namespace:
            match["namespace"] = self.spec.match.namespace
        spec["match"] = match

        status = {"status": self.status.phase.value if self.status.phase else ""}
        if self.status.reason:
            status["reason"] = self.status.reason
        if self.status.failed_rollout_deployments:
            failed = []
            for info in self.status.failed_rollout_deployments:
                entry = {"namespace": info.namespace}
                if info.name:
                    entry["name"] = info.name
                failed.append(entry)
            status["failedRolloutDeployments"] = failed
        status["lastScheduleTime"] = _format_time(self.status.last_scheduled_rollout_time)

        metadata = {}
        if self.name:
            metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        return {
            "apiVersion": GROUP_VERSION.api_version,
            "kind": self.KIND,
            "metadata": metadata,
            "spec": spec,
            "status": status,
        }

    @classmethod
    def from_dict(cls, data):
        """Build a Flipper from its JSON shape."""
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        match = spec.get("match") or {}
        status = data.get("status") or {}
        phase = status.get("status") or None
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            spec=FlipperSpec(
                interval=spec.get("interval", ""),
                match=MatchFilter(
                    labels=dict(match.get("labels") or {}),
                    namespace=match.get("namespace", ""),
                ),
            ),
            status=FlipperStatus(
                phase=FlipPhase(phase) if phase else None,
                reason=status.get("reason", ""),
                failed_rollout_deployments=[
                    DeploymentInfo(name=item.get("name", ""), namespace=item.get("namespace", ""))
                    for item in status.get("failedRolloutDeployments") or []
                ],
                last_scheduled_rollout_time=_parse_time(status.get("lastScheduleTime")),
            ),
        )

    def copy(self):
        """Return an independent deep copy."""
        return _copy.deepcopy(self)


@dataclass
class FlipperList:
    """A list of Flipper resources."""

    items: List[Flipper] = field(default_factory=list)

    def __iter__(self):
        return iter(self.items)

    def __len__(self):
        return len(self.items)