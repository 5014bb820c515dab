import shlex
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Tuple, Union

# Container assumed for uploads that don't say what they are
DEFAULT_INPUT_FORMAT = "mp4"


@dataclass(frozen=True)
class TranscodeOptions:
    """
    Value Object describing a single transcode request.

    Only `output_format` is required. Every other field is independently
    optional and no combination is rejected here: a `width` without a
    `height` simply means "scale, keeping the aspect ratio".
    """
    output_format: str
    input_format: Optional[str] = None

    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None
    video_bitrate: Optional[str] = None   # e.g. "500k"
    audio_bitrate: Optional[str] = None

    fps: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None
    aspect_ratio: Optional[str] = None    # e.g. "16:9"

    audio_channels: Optional[int] = None
    audio_frequency: Optional[int] = None

    # Time offsets in encoder syntax ("00:00:05", "5.5")
    start_time: Optional[str] = None
    duration: Optional[str] = None
    seek: Optional[str] = None

    # Each entry becomes its own complex filter stage, in order
    filters: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def input_extension(self) -> str:
        return self.input_format or DEFAULT_INPUT_FORMAT

    @property
    def output_extension(self) -> str:
        return self.output_format

    def to_payload(self) -> dict:
        """JSON-safe dict of the fields that are set."""
        payload = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == ():
                continue
            payload[f.name] = list(value) if isinstance(value, tuple) else value
        return payload


@dataclass(frozen=True)
class StagedFilePair:
    """
    The two temporary locations owned by exactly one pipeline run.
    Neither file is created by allocation; the pipeline writes the input
    and the encoder writes the output.
    """
    input_path: Path
    output_path: Path


@dataclass(frozen=True)
class Invocation:
    """A fully composed encoder command line."""
    binary: str
    input_path: Path
    output_path: Path
    global_args: Tuple[str, ...] = ()
    input_args: Tuple[str, ...] = ()
    output_args: Tuple[str, ...] = ()

    @property
    def argv(self) -> list:
        return [
            self.binary,
            *self.global_args,
            *self.input_args,
            "-i", str(self.input_path),
            *self.output_args,
            str(self.output_path),
        ]

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ProgressEvent:
    """
    Advisory telemetry from a running encoder.
    `percent` is None until the input duration is known and may exceed 100
    or go backwards; nothing depends on it being well-behaved.
    """
    time_seconds: float
    percent: Optional[float] = None
    raw: str = ""


@dataclass(frozen=True)
class Completed:
    """Terminal outcome: the encoder exited cleanly and the output is written."""
    return_code: int = 0


@dataclass(frozen=True)
class Failed:
    """Terminal outcome: the encoder (or its launch) failed."""
    cause: str
    return_code: Optional[int] = None


Outcome = Union[Completed, Failed]
