"""Error taxonomy for recording, playback and recognition failures."""


class SaySomethingError(Exception):
    """Base class for all reported (non-fatal) application errors."""


class PermissionDenied(SaySomethingError):
    """Recording permission or recognition authorization was refused."""


class SessionConfigurationError(SaySomethingError):
    """The audio capture backend could not be configured."""


class RecorderCreationError(SaySomethingError):
    """A recorder could not be created for the recording file."""


class PlaybackError(SaySomethingError):
    """The recording could not be played back."""


class PlayerCreationError(PlaybackError):
    """The recording file is missing or cannot be decoded."""


class RecognitionError(SaySomethingError):
    """The recognition service failed or returned no result."""


class ConfigurationError(SaySomethingError):
    """A configuration value or service status is not representable."""
