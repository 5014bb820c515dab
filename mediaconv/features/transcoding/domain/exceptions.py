from pathlib import Path
from typing import Optional


class MediaConvError(Exception):
    """Base class for every failure the transcoding feature surfaces."""


class ValidationError(MediaConvError):
    """
    The request cannot be processed as given (e.g. no output format).
    Raised before any staging path is allocated.
    """


class StagingError(MediaConvError):
    """Writing the input or reading the output in temporary storage failed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class ProcessingError(MediaConvError):
    """
    The external encoder reported failure.
    `cause` holds the encoder's diagnostic text verbatim.
    """

    def __init__(self, cause: str, command_line: Optional[str] = None, return_code: Optional[int] = None):
        self.cause = cause
        self.command_line = command_line
        self.return_code = return_code
        super().__init__(f"Media processing failed: {cause}")


class CleanupWarning(UserWarning):
    """A staged path could not be removed. Logged, never raised."""

    def __init__(self, path: Path, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Could not remove staged file {path}: {error}")
