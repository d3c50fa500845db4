"""
Domain exceptions for the crop classifier.

All of these signal a broken caller contract rather than a transient
condition, so nothing in the domain layer retries them.
"""


class CropAdvisorError(Exception):
    """Base class for crop advisor domain errors."""
    pass


class InvalidFeatureError(CropAdvisorError, ValueError):
    """A feature vector is missing a field, holds a non-finite value, or has an unknown soil type."""
    pass


class NotTrainedError(CropAdvisorError):
    """Prediction was requested from a classifier with an empty forest."""
    pass


class RetrainError(CropAdvisorError):
    """Training was invoked on a classifier that has already been trained."""
    pass
