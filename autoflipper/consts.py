"""Shared constants: event reasons, annotation keys and default intervals."""

from datetime import timedelta

REASON_ROLLOUT_RESTART_FAILED = "RolloutRestartFailed"
REASON_ROLLOUT_RESTART_TRIGGERED = "RolloutRestartTriggered"
REASON_ROLLOUT_RESTART_UNSUPPORTED = "RolloutRestartUnsupported"
REASON_ANNOTATION_SUCCEEDED = "AnnotationAdditionSucceeded"
REASON_ANNOTATION_FAILED = "AnnotationAdditionFailed"

DEFAULT_FLIPPER_INTERVAL = timedelta(minutes=10)
DEFAULT_PENDING_WAIT_INTERVAL = timedelta(seconds=10)

ANNOTATION_FLIPPER_RESTARTED_AT = "flipper.ricktech.io/restartedAt"
ROLLOUT_RESTART_ANNOTATION = "kubectl.kubernetes.io/restartedAt"
ROLLOUT_MANAGED_BY = "flipper.ricktech.io/managedBy"
_ROLLOUT_INTERVAL_GROUP_NAME = "flipper.ricktech.io/IntervalGroup"

ERROR_UNSUPPORTED_KIND = "unsupported Kind {}"