from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Optional
from .exceptions import CleanupWarning
from .models import TranscodeOptions, Invocation, Outcome, StagedFilePair


class ITempStorage(ABC):
    """
    Contract for the staging area used by one pipeline run.
    """

    @abstractmethod
    def allocate(self, extension: str) -> Path:
        """
        Returns a fresh path that no other allocation in this process will ever return.
        The file itself is not created.
        """
        pass

    @abstractmethod
    def release(self, path: Path) -> Optional[CleanupWarning]:
        """
        Deletes the file behind `path` if it exists.

        Returns:
            None on success, a CleanupWarning (already logged) if deletion failed.
            Never raises.
        """
        pass

    @abstractmethod
    def staged(self, input_extension: str, output_extension: str) -> AbstractContextManager:
        """
        Scoped acquisition of an input/output pair.
        Both paths are released exactly once when the block exits, however it exits.
        """
        pass


class ICommandBuilder(ABC):
    """
    Contract for turning options into an encoder command line.
    Abstracts away the encoder's argument syntax from the pipeline.
    """

    @abstractmethod
    def build(self, input_path: Path, output_path: Path, options: TranscodeOptions) -> Invocation:
        """
        Maps the fields set on `options` onto encoder arguments.
        Pure: performs no I/O and never raises for any value of the options.
        """
        pass


class IProcessSupervisor(ABC):
    """
    Contract for running the external encoder to completion.
    """

    @abstractmethod
    async def run(self, invocation: Invocation, timeout: Optional[float] = None) -> Outcome:
        """
        Launches the encoder and waits for its single terminal signal.

        Args:
            invocation: The command to run.
            timeout: Seconds before the encoder is forcibly terminated. None waits forever.

        Returns:
            Completed or Failed. Encoder failures are reported, not raised.
        """
        pass
