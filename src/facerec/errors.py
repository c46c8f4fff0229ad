"""Exceptions raised by the recognition engine."""


class FaceRecError(Exception):
    """Base class for library errors."""


class TrainingError(FaceRecError, ValueError):
    """Training data cannot produce a projection basis."""


class GalleryError(FaceRecError):
    """A persisted gallery is missing, unreadable or inconsistent."""
