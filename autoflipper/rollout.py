"""Rollout restart of deployments by annotating their pod templates."""

from datetime import datetime

from .cluster import (
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    Deployment,
    ignore_not_found,
)
from .consts import (
    ANNOTATION_FLIPPER_RESTARTED_AT,
    ERROR_UNSUPPORTED_KIND,
    REASON_ROLLOUT_RESTART_FAILED,
    REASON_ROLLOUT_RESTART_TRIGGERED,
    ROLLOUT_MANAGED_BY,
    ROLLOUT_RESTART_ANNOTATION,
)


class UnsupportedKindError(TypeError):
    """Raised for objects other than deployments."""

    def __init__(self, obj):
        super().__init__(ERROR_UNSUPPORTED_KIND.format(obj))
        self.obj = obj


class RolloutRestartError(Exception):
    """Raised when some deployments could not be restarted."""

    def __init__(self, errors, failed):
        self.errors = list(errors)
        self.failed = list(failed)
        super().__init__("\n".join(str(error) for error in self.errors))


def _now_rfc3339():
    text = datetime.now().astimezone().isoformat(timespec="seconds")
    return text[:-6] + "Z" if text.endswith("+00:00") else text


def handle_rollout_restart(client, obj, managed_by, restart_time=None):
    """Annotate a deployment so that its pods are restarted, and patch it."""
    if not isinstance(obj, Deployment):
        raise UnsupportedKindError(obj)
    restart_time = restart_time or _now_rfc3339()
    obj.annotations[ROLLOUT_MANAGED_BY] = managed_by
    obj.annotations[ANNOTATION_FLIPPER_RESTARTED_AT] = restart_time
    obj.template_annotations[ROLLOUT_RESTART_ANNOTATION] = restart_time
    client.patch(obj)


def handle_rollout_restart_list(client, objects, recorder, flipper_name, restart_time=None):
    """Restart every deployment given; return those restarted.

    Deployments that no longer exist are skipped. Any other failure is
    collected and raised at the end as RolloutRestartError, whose ``failed``
    lists the deployments that were not restarted.
    """
    items = list(objects or [])
    for obj in items:
        if not isinstance(obj, Deployment):
            raise UnsupportedKindError(obj)

    errors = []
    failed = []
    restarted = []
    for obj in items:
        copied = obj.copy()
        try:
            handle_rollout_restart(client, copied, flipper_name, restart_time)
        except Exception as err:  # every failure is reported per deployment
            if ignore_not_found(err) is not None:
                errors.append(err)
                failed.append(obj)
                recorder.event(
                    copied,
                    EVENT_TYPE_WARNING,
                    REASON_ROLLOUT_RESTART_FAILED,
                    f"Rollout restart failed for target {copied!r}: err={err}",
                )
            else:
                recorder.event(
                    copied,
                    EVENT_TYPE_WARNING,
                    REASON_ROLLOUT_RESTART_FAILED,
                    f"Listed Object not found (mightbeDeleted) {copied!r}: err={err}",
                )
        else:
            restarted.append(copied)
            recorder.event(
                copied,
                EVENT_TYPE_NORMAL,
                REASON_ROLLOUT_RESTART_TRIGGERED,
                f"Rollout restart triggered for {copied}",
            )

    if errors:
        raise RolloutRestartError(errors, failed)
    return restarted