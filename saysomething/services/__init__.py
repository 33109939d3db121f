"""Services layer for SaySomething application logic."""

from .recording_controller import RecordingController, describe_authorization

__all__ = [
    "RecordingController",
    "describe_authorization",
]
