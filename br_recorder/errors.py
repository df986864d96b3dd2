"""Exception types raised by the capture, inference and decode stages."""


class RecorderError(Exception):
    """Base class for recorder failures."""


class CaptureError(RecorderError):
    """Screenshot of the game window could not be taken."""


class WindowNotFoundError(CaptureError):
    pass


class WindowMinimizedError(CaptureError):
    pass


class WindowHandleInvalidError(CaptureError):
    pass


class DecodeError(RecorderError):
    """Model output tensor does not have the expected layout."""


class InferenceError(RecorderError):
    """The inference runtime failed to produce an output."""


class ModelLoadError(RecorderError):
    """The detection model could not be loaded."""
