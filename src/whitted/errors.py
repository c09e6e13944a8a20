"""Exception types raised by the tracer and its scene collaborators."""


class TracerError(Exception):
    """Base class for tracer errors."""


class SceneNotReadyError(TracerError):
    """Raised when tracing or rendering is requested before a scene is loaded."""

    def __init__(self, message: str = "No scene loaded. Load a scene before tracing.") -> None:
        super().__init__(message)


class SceneLoadError(TracerError):
    """Raised when a scene file cannot be read or does not describe a valid scene.

    Attributes:
        source: The file path or description of the data that failed to load.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source is not None:
            message = f"{source}: {message}"
        super().__init__(message)
