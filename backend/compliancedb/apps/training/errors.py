from __future__ import annotations

from compliancedb.apps.notifications.providers import DeliveryError


class TrainingError(Exception):
    """Base class for training lifecycle errors surfaced to callers."""


class ValidationError(TrainingError):
    """Malformed input (bulk assignment rows, quiz payload). Never written partially."""


class NotFoundError(TrainingError):
    """Assignment, section or certificate unknown to the caller's scope."""


class StoreUnavailableError(TrainingError):
    """The durable store could not be reached; the current run must stop."""


__all__ = [
    "DeliveryError",
    "NotFoundError",
    "StoreUnavailableError",
    "TrainingError",
    "ValidationError",
]
