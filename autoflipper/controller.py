"""Reconciliation of Flipper resources: periodic rollout restarts of matching deployments."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .cluster import (
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    Deployment,
    NamespacedName,
    NotFoundError,
    ignore_not_found,
)
from .consts import DEFAULT_FLIPPER_INTERVAL, DEFAULT_PENDING_WAIT_INTERVAL
from .duration import parse_duration
from .rollout import RolloutRestartError, handle_rollout_restart_list
from .types import DeploymentInfo, Flipper, FlipPhase

log = logging.getLogger("autoflipper.controller")

MAX_CONCURRENT_RECONCILES = 5


@dataclass(frozen=True)
class Result:
    """What the reconcile loop should do next."""

    requeue: bool = False
    requeue_after: timedelta = timedelta(0)


def _utc_now():
    return datetime.now(timezone.utc)


def _rfc3339(moment):
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.isoformat(timespec="seconds")
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def _interval_of(flipper):
    try:
        interval = parse_duration(flipper.spec.interval)
    except ValueError:
        interval = timedelta(0)
    # The defaulting webhook normally fills the interval in.
    return interval or DEFAULT_FLIPPER_INTERVAL


class FlipperReconciler:
    """Drives each Flipper through Pending, Succeeded and Failed phases."""

    def __init__(self, client, recorder, clock=None):
        self.client = client
        self.recorder = recorder
        self.clock = clock or _utc_now

    def reconcile(self, key):
        """Fetch the Flipper at key and handle it; a missing Flipper is ignored."""
        log.info("reconciling flipper %s", key)
        try:
            flipper = self.client.get(Flipper, key)
        except NotFoundError:
            log.info("flipper %s not found", key)
            return Result()
        log.info("flipper spec %s", flipper)
        return self.handle_rollout(flipper)

    def _update_status(self, flipper):
        try:
            self.client.update_status(flipper)
        except Exception:
            self.recorder.event(
                flipper, EVENT_TYPE_WARNING, "RolloutRestartFailed", "Unable to update flipperStatus"
            )
            raise

    def _warn_not_ready(self, flipper, deployment):
        self.recorder.event(
            flipper,
            EVENT_TYPE_WARNING,
            "RolloutRestartWarning",
            f"Deployment {deployment.namespace}/{deployment.name} not ready ignoring for rollout",
        )

    def handle_rollout(self, flipper):
        """Restart the deployments selected by the Flipper when its schedule is due."""
        interval = _interval_of(flipper)
        rollout_time = self.clock()
        restart_time = _rfc3339(rollout_time)
        deployments = []
        ready = []
        status = flipper.status

        log.info("checking phase of flipper: %s", status.phase)
        if status.phase in (None, FlipPhase.PENDING):
            try:
                deployments = self.client.list_deployments(
                    flipper.spec.match.namespace, flipper.spec.match.labels
                )
            except Exception as err:
                if ignore_not_found(err) is None:
                    deployments = []
                else:
                    log.error("error in listing the deployments: %s", err)
                    status.reason = "Error in listing the deployments"
                    self.recorder.event(
                        flipper, EVENT_TYPE_WARNING, "RolloutRestartFailed", "Unable to list Deployments"
                    )
                    status.phase = FlipPhase.FAILED
                    self._update_status(flipper)
                    raise
            for deployment in deployments:
                if deployment.is_ready():
                    ready.append(deployment)
                else:
                    self._warn_not_ready(flipper, deployment)
            if not ready:
                status.phase = FlipPhase.PENDING
                self._update_status(flipper)
                self.recorder.event(
                    flipper, EVENT_TYPE_WARNING, "RolloutRestartPending", "No objects found"
                )
                return Result(requeue_after=DEFAULT_PENDING_WAIT_INTERVAL)
        elif status.phase is FlipPhase.FAILED:
            for info in status.failed_rollout_deployments:
                key = NamespacedName(namespace=info.namespace, name=info.name)
                try:
                    deployment = self.client.get(Deployment, key)
                except Exception:
                    continue
                if deployment.is_ready():
                    ready.append(deployment)
                else:
                    self._warn_not_ready(flipper, deployment)
        elif status.phase is FlipPhase.SUCCEEDED:
            due = status.last_scheduled_rollout_time + interval
            now = self.clock()
            if due <= now:
                status.phase = FlipPhase.PENDING
                self.recorder.event(
                    flipper, EVENT_TYPE_NORMAL, "RolloutRestartInit", "Triggering next scheduled"
                )
                self.recorder.event(
                    flipper, EVENT_TYPE_NORMAL, "RolloutRestartInit", "Moving state to pending"
                )
                self._update_status(flipper)
                return Result(requeue=True)
            # The controller restarted after a success: wait for the next slot.
            return Result(requeue_after=due - now)

        status.failed_rollout_deployments = []
        try:
            handle_rollout_restart_list(
                self.client,
                deployments,
                self.recorder,
                f"{flipper.namespace}/{flipper.name}",
                restart_time,
            )
        except RolloutRestartError as err:
            self.recorder.event(flipper, EVENT_TYPE_WARNING, "RolloutRestartFailed", f"Error {err}")
            status.phase = FlipPhase.FAILED
            status.failed_rollout_deployments = [
                DeploymentInfo(name=failed.name, namespace=failed.namespace) for failed in err.failed
            ]
            self.client.update_status(flipper)
            raise

        self.recorder.event(
            flipper, EVENT_TYPE_NORMAL, "RolloutRestartSucceeded", f"flipper {flipper.name} succeeded"
        )
        status.phase = FlipPhase.SUCCEEDED
        status.last_scheduled_rollout_time = rollout_time
        self.client.update_status(flipper)
        return Result(requeue_after=interval)