"""Scheduled rollout restarts of labelled deployments, driven by Flipper resources."""

__version__ = "0.1.0"

__all__ = ["__version__"]