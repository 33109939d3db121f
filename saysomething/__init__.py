"""SaySomething - push-to-talk recording and speech transcription."""

__version__ = "0.1.0"
