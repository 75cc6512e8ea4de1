"""Defaulting and validation of Flipper resources."""

import logging

from .consts import DEFAULT_FLIPPER_INTERVAL
from .duration import format_duration, parse_duration

log = logging.getLogger("autoflipper.flipper-resource")


class FlipperValidationError(ValueError):
    """Raised when a Flipper fails validation; holds every problem found."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))

    @property
    def warnings(self):
        return ["\n".join(self.errors)]


def default(flipper):
    """Fill in the default interval when none is given."""
    log.info("default name=%s", flipper.name)
    if not flipper.spec.interval:
        flipper.spec.interval = format_duration(DEFAULT_FLIPPER_INTERVAL)
    return flipper


def _interval_error(flipper):
    log.info("validate interval name=%s", flipper.name)
    try:
        parse_duration(flipper.spec.interval)
    except ValueError as exc:
        log.error("interval is not in duration format: %s", exc)
        return str(exc)
    return None


def _labels_error(flipper):
    log.info("validate labels name=%s", flipper.name)
    if not flipper.spec.match.labels:
        log.error("labels absent")
        return "no labels found"
    return None


def validate_flipper(flipper):
    """Check interval and labels; raise FlipperValidationError listing all problems."""
    errors = [e for e in (_interval_error(flipper), _labels_error(flipper)) if e]
    if errors:
        raise FlipperValidationError(errors)


def validate_create(flipper):
    """Validate a new Flipper; return admission warnings (empty when valid)."""
    log.info("validate create name=%s", flipper.name)
    validate_flipper(flipper)
    return []


def validate_update(flipper, old):
    """Validate an updated Flipper; return admission warnings (empty when valid)."""
    log.info("validate update name=%s", flipper.name)
    validate_flipper(flipper)
    return []


def validate_delete(flipper):
    """Deletion is always admitted."""
    log.info("validate delete name=%s", flipper.name)
    return []